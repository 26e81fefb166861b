"""Per-tool help: FAQ content with optional model-backed answers.

Each tool has a technical context, a welcome line and a short FAQ, loaded
from the ``help`` i18n resource. When a Gemini API key is configured the
question is forwarded to the ``generateContent`` REST endpoint together with
the tool context. Any failure there (network, HTTP status, malformed body)
is logged and answered from the FAQ instead, so asking for help never
errors out once the question itself is valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

import httpx

from psychocalc.calculators.enums import ToolId
from psychocalc.core.config import Settings, get_settings
from psychocalc.core.errors import HelpAssistantError, ValidationError
from psychocalc.core.logging import get_logger
from psychocalc.core.metrics import inc_counter, timer
from psychocalc.i18n import get_i18n_resource

__all__ = [
    "FaqEntry",
    "ToolHelp",
    "HelpAnswer",
    "get_tool_help",
    "match_faq",
    "ask_model",
    "answer",
]

logger = get_logger("psychocalc.services.help_assistant", component="help")


@dataclass(frozen=True, slots=True)
class FaqEntry:
    question: str
    answer: str


@dataclass(frozen=True, slots=True)
class ToolHelp:
    tool: ToolId
    context: str
    welcome: str
    faqs: Tuple[FaqEntry, ...]


@dataclass(frozen=True, slots=True)
class HelpAnswer:
    tool: ToolId
    answer: str
    source: str  # "model", "faq" or "catalog"


def _common(locale: str) -> Mapping[str, Any]:
    return get_i18n_resource("help", locale).get("common", {})


def get_tool_help(tool: ToolId, locale: str) -> ToolHelp:
    section = get_i18n_resource("help", locale).get(tool.value)
    if section is None:
        raise LookupError(f"No help content for tool '{tool.value}'")
    return ToolHelp(
        tool=tool,
        context=str(section.get("context", "")).strip(),
        welcome=str(section.get("welcome", "")),
        faqs=tuple(FaqEntry(question=str(f["q"]), answer=str(f["a"])) for f in section.get("faqs", ())),
    )


def _core_text(question: str) -> str:
    """Question text without its opening/closing marks: ``"¿Qué es X?"`` -> ``"qué es x"``."""

    text = question.lower()
    if "¿" in text:
        text = text.split("¿", 1)[1]
    return text.split("?", 1)[0].strip()


def match_faq(question: str, faqs: Sequence[FaqEntry]) -> Optional[FaqEntry]:
    """First FAQ whose core text appears in the question, or that contains the question."""

    lowered = question.lower()
    for faq in faqs:
        core = _core_text(faq.question)
        if (core and core in lowered) or lowered in faq.question.lower():
            return faq
    return None


def _catalog(help_content: ToolHelp, locale: str, settings: Settings) -> str:
    common = _common(locale)
    lines = [str(common.get("no_match", "")), ""]
    lines.extend(f"{i}. {faq.question}" for i, faq in enumerate(help_content.faqs, start=1))
    if not settings.help_ai_enabled:
        lines.extend(["", str(common.get("tip", ""))])
    return "\n".join(lines).strip()


def _prompt(help_content: ToolHelp, question: str, locale: str) -> str:
    common = _common(locale)
    return (
        f"{help_content.context}\n\n"
        f"{common.get('question_prefix', '')} {question}\n\n"
        f"{str(common.get('instructions', '')).strip()}"
    )


def ask_model(prompt: str, settings: Settings) -> str:
    """Send ``prompt`` to Gemini and return the first candidate's text.

    Raises:
        HelpAssistantError: no key configured, transport/HTTP failure, or an
            answer without text.
    """
    if not settings.gemini_api_key:
        raise HelpAssistantError("No API key configured")
    url = f"{str(settings.gemini_base_url).rstrip('/')}/models/{settings.gemini_model}:generateContent"
    try:
        with timer("help.model"):
            response = httpx.post(
                url,
                params={"key": settings.gemini_api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=settings.help_timeout_ms / 1000.0,
            )
            response.raise_for_status()
            body = response.json()
    except httpx.HTTPError as exc:
        raise HelpAssistantError(detail={"reason": type(exc).__name__}) from exc
    except ValueError as exc:
        raise HelpAssistantError(detail={"reason": "invalid_json"}) from exc
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise HelpAssistantError(detail={"reason": "empty_answer"}) from exc
    if not isinstance(text, str) or not text.strip():
        raise HelpAssistantError(detail={"reason": "empty_answer"})
    return text.strip()


def answer(tool: ToolId, question: str, *, locale: Optional[str] = None, settings: Optional[Settings] = None) -> HelpAnswer:
    """Answer a help question for ``tool``.

    Raises:
        ValidationError: for an empty question.
    """
    settings = settings or get_settings()
    locale = locale or settings.locale
    question = (question or "").strip()
    if not question:
        raise ValidationError("The question is empty")

    help_content = get_tool_help(tool, locale)
    inc_counter(f"help.questions.{tool.value}")

    if settings.help_ai_enabled:
        try:
            text = ask_model(_prompt(help_content, question, locale), settings)
            inc_counter("help.answers.model")
            return HelpAnswer(tool=tool, answer=text, source="model")
        except HelpAssistantError as exc:
            inc_counter("help.answers.model_failed")
            logger.warning(
                "help_ai_fallback",
                extra={"structured_data": {"tool": tool.value, "reason": exc.message, "detail": exc.detail}},
            )

    matched = match_faq(question, help_content.faqs)
    if matched is not None:
        inc_counter("help.answers.faq")
        return HelpAnswer(tool=tool, answer=matched.answer, source="faq")
    inc_counter("help.answers.catalog")
    return HelpAnswer(tool=tool, answer=_catalog(help_content, locale, settings), source="catalog")
