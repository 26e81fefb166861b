import httpx
import pytest

from psychocalc.calculators.enums import ToolId
from psychocalc.core.config import Settings
from psychocalc.core.errors import HelpAssistantError, ValidationError
from psychocalc.core.metrics import get_counters
from psychocalc.services import help_assistant
from psychocalc.services.help_assistant import answer, ask_model, get_tool_help, match_faq


class _FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("POST", "https://example.test")
            raise httpx.HTTPStatusError("error", request=request, response=httpx.Response(self.status_code, request=request))

    def json(self):
        return self._body


@pytest.fixture()
def ai_settings():
    return Settings(gemini_api_key="test-key", locale="es")


def test_tool_help_is_localized():
    es = get_tool_help(ToolId.AIKEN, "es")
    en = get_tool_help(ToolId.AIKEN, "en")
    assert es.welcome.startswith("¡Hola!")
    assert en.welcome.startswith("Hi!")
    assert len(es.faqs) == 3


def test_faq_match_ignores_question_marks_and_case():
    faqs = get_tool_help(ToolId.AIKEN, "es").faqs
    matched = match_faq("oye, QUÉ ES LA V DE AIKEN, por favor", faqs)
    assert matched is faqs[0]
    assert match_faq("algo totalmente distinto", faqs) is None


def test_answer_from_faq_without_key():
    result = answer(ToolId.AIKEN, "¿Qué es la V de Aiken?")
    assert result.source == "faq"
    assert "coeficiente" in result.answer
    assert get_counters()["help.answers.faq"] == 1.0


def test_unmatched_question_lists_catalog_with_tip():
    result = answer(ToolId.RECODE, "¿Cuál es la capital de Francia?")
    assert result.source == "catalog"
    assert "1. " in result.answer
    assert "API key" in result.answer


def test_empty_question_is_rejected():
    with pytest.raises(ValidationError):
        answer(ToolId.CRONBACH, "   ")


def test_model_answer_when_key_configured(monkeypatch, ai_settings):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        return _FakeResponse({"candidates": [{"content": {"parts": [{"text": " Respuesta del modelo "}]}}]})

    monkeypatch.setattr(help_assistant.httpx, "post", fake_post)

    result = answer(ToolId.CRONBACH, "¿Qué es la psicometría?", settings=ai_settings)

    assert result.source == "model"
    assert result.answer == "Respuesta del modelo"
    url, kwargs = calls[0]
    assert url.endswith("/models/gemini-pro:generateContent")
    assert kwargs["params"] == {"key": "test-key"}
    prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert "¿Qué es la psicometría?" in prompt
    assert "Alfa de Cronbach" in prompt


def test_model_failure_falls_back_to_faq(monkeypatch, ai_settings):
    def failing_post(url, **kwargs):
        raise httpx.ConnectError("unreachable")

    monkeypatch.setattr(help_assistant.httpx, "post", failing_post)

    result = answer(ToolId.AIKEN, "¿Qué es la V de Aiken?", settings=ai_settings)

    assert result.source == "faq"
    assert get_counters()["help.answers.model_failed"] == 1.0


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse({}, status_code=500),
        _FakeResponse({"candidates": []}),
        _FakeResponse({"candidates": [{"content": {"parts": [{"text": "  "}]}}]}),
    ],
)
def test_ask_model_rejects_bad_responses(monkeypatch, ai_settings, response):
    monkeypatch.setattr(help_assistant.httpx, "post", lambda url, **kwargs: response)
    with pytest.raises(HelpAssistantError):
        ask_model("prompt", ai_settings)


def test_ask_model_requires_key():
    with pytest.raises(HelpAssistantError):
        ask_model("prompt", Settings(gemini_api_key=None))
