"""Tests for label and help resource loading."""

from typing import Mapping

import pytest

from psychocalc.calculators.enums import ToolId
from psychocalc.i18n import (
    clear_i18n_cache,
    get_i18n_resource,
    preload_i18n_resources,
    translate,
)


def test_preload_loads_every_locale():
    clear_i18n_cache()
    stats = preload_i18n_resources()
    assert stats == {"loaded_count": 4, "failed_count": 0, "cache_size": 4}


def test_cached_resource_is_reused_and_read_only():
    clear_i18n_cache()
    first = get_i18n_resource("labels", "es")
    second = get_i18n_resource("labels", "es")
    assert first is second
    assert isinstance(first, Mapping)
    with pytest.raises(TypeError):
        first["verdicts"] = {}


def test_translate_falls_back_to_code():
    assert translate("verdicts", "Valid", "es") == "Válido"
    assert translate("alpha_bands", "Very high", "es") == "Muy alta"
    assert translate("levels", "High", "en") == "High"
    assert translate("levels", "Unknown level", "es") == "Unknown level"


def test_unknown_locale_uses_spanish():
    resource = get_i18n_resource("labels", "fr")
    assert resource["apa"]["caption"] == "Tabla 1"


def test_missing_resource_type_raises():
    with pytest.raises(LookupError):
        get_i18n_resource("styles", "es")


@pytest.mark.parametrize("locale", ["es", "en"])
def test_help_covers_every_tool(locale):
    help_resource = get_i18n_resource("help", locale)
    for tool in ToolId:
        entry = help_resource[tool.value]
        assert entry["context"]
        assert entry["welcome"]
        assert all(faq["q"] and faq["a"] for faq in entry["faqs"])
