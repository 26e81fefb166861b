"""Localized resources: label catalogs and per-tool help content.

Resources live next to this module as ``<locale>_<type>.yaml`` files and are
loaded once into an in-memory, read-only cache. Lookups fall back to the
other supported locale when a file is missing.

Usage:
    >>> from psychocalc.i18n import get_i18n_resource
    >>> labels = get_i18n_resource("labels", "es")
    >>> labels["verdicts"]["Valid"]
    'Válido'
"""

from __future__ import annotations

from pathlib import Path
from threading import RLock
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from psychocalc.core.logging import get_logger

__all__ = [
    "SUPPORTED_LOCALES",
    "get_i18n_resource",
    "translate",
    "preload_i18n_resources",
    "clear_i18n_cache",
]

logger = get_logger("psychocalc.i18n", component="i18n")

SUPPORTED_LOCALES: tuple[str, ...] = ("es", "en")
_LOCALE_FALLBACK: dict[str, tuple[str, ...]] = {
    "es": ("es", "en"),
    "en": ("en", "es"),
}
_RESOURCE_DIR = Path(__file__).parent

_resource_cache: dict[tuple[str, str], Mapping[str, Any]] = {}
_cache_lock = RLock()


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _load_file(path: Path) -> Mapping[str, Any] | None:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError:
        return None
    except yaml.YAMLError as exc:
        logger.warning("i18n_parse_failed", extra={"structured_data": {"path": path.name, "error": str(exc)}})
        return None
    if not isinstance(data, dict):
        logger.warning("i18n_invalid_root", extra={"structured_data": {"path": path.name}})
        return None
    return _freeze(data)


def get_i18n_resource(resource_type: str, locale: str) -> Mapping[str, Any]:
    """Return the cached resource, loading it on first use.

    Raises:
        LookupError: when no locale in the fallback chain has the resource.
    """
    key = (resource_type, locale)
    with _cache_lock:
        cached = _resource_cache.get(key)
        if cached is not None:
            return cached
        for candidate in _LOCALE_FALLBACK.get(locale, _LOCALE_FALLBACK[SUPPORTED_LOCALES[0]]):
            resource = _load_file(_RESOURCE_DIR / f"{candidate}_{resource_type}.yaml")
            if resource is not None:
                _resource_cache[key] = resource
                return resource
    raise LookupError(f"No i18n resource '{resource_type}' for locale '{locale}'")


def translate(group: str, code: str, locale: str) -> str:
    """Look up ``code`` in a label group, returning the code itself if absent."""

    labels = get_i18n_resource("labels", locale)
    return labels.get(group, {}).get(code, code)


def preload_i18n_resources(
    *,
    resource_types: tuple[str, ...] = ("labels", "help"),
    locales: tuple[str, ...] = SUPPORTED_LOCALES,
) -> dict[str, int]:
    """Warm the cache at startup; returns loaded/failed counts."""

    loaded = failed = 0
    for resource_type in resource_types:
        for locale in locales:
            try:
                get_i18n_resource(resource_type, locale)
                loaded += 1
            except LookupError:
                failed += 1
    return {"loaded_count": loaded, "failed_count": failed, "cache_size": len(_resource_cache)}


def clear_i18n_cache() -> None:
    with _cache_lock:
        _resource_cache.clear()
