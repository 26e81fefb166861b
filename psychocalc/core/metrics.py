from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Dict, Iterator, TypeVar, cast

from psychocalc.core.config import settings

_F = TypeVar("_F", bound=Callable[..., Any])


@dataclass(slots=True)
class TimingStats:
    """Running aggregates for one timing label (Welford variance)."""

    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0
    _mean_ms: float = 0.0
    _m2: float = 0.0

    def update(self, elapsed_ms: float) -> None:
        self.count += 1
        self.total_ms += elapsed_ms
        self.max_ms = max(self.max_ms, elapsed_ms)
        delta = elapsed_ms - self._mean_ms
        self._mean_ms += delta / self.count
        self._m2 += delta * (elapsed_ms - self._mean_ms)

    @property
    def variance_ms(self) -> float:
        return self._m2 / (self.count - 1) if self.count > 1 else 0.0

    def snapshot(self) -> Dict[str, float]:
        return {
            "count": float(self.count),
            "total_ms": self.total_ms,
            "max_ms": self.max_ms,
            "avg_ms": self._mean_ms,
            "variance_ms": self.variance_ms,
        }


class _MetricsRegistry:
    """Thread-safe in-process store for timings, counters and last runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timings: Dict[str, TimingStats] = {}
        self._counters: Dict[str, float] = {}
        self._last_runs: Dict[str, Dict[str, Any]] = {}

    def record(self, label: str, elapsed_ms: float) -> None:
        if not label:
            return
        with self._lock:
            self._timings.setdefault(label, TimingStats()).update(float(elapsed_ms))
            self._last_runs[label] = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "duration_ms": float(elapsed_ms),
            }

    def inc(self, label: str, amount: float = 1.0) -> None:
        if not label:
            return
        with self._lock:
            self._counters[label] = self._counters.get(label, 0.0) + float(amount)

    def timings_snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return {label: stats.snapshot() for label, stats in self._timings.items()}

    def counters_snapshot(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._counters)

    def last_runs_snapshot(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {label: dict(payload) for label, payload in self._last_runs.items()}

    def reset(self) -> None:
        with self._lock:
            self._timings.clear()
            self._counters.clear()
            self._last_runs.clear()


metrics_registry = _MetricsRegistry()

_INSTRUMENTATION_ENABLED: bool = bool(settings.debug_instrumentation_enabled)


def set_instrumentation_enabled(enabled: bool) -> None:
    global _INSTRUMENTATION_ENABLED
    _INSTRUMENTATION_ENABLED = bool(enabled)


def instrumentation_enabled() -> bool:
    return _INSTRUMENTATION_ENABLED


@contextmanager
def timer(label: str) -> Iterator[None]:
    """Time a block and record it under ``label``."""
    if not instrumentation_enabled():
        yield
        return
    t0 = perf_counter()
    try:
        yield
    finally:
        metrics_registry.record(label, (perf_counter() - t0) * 1000.0)


def measure_time(label: str) -> Callable[[_F], _F]:
    """Decorator form of :func:`timer`."""

    def _wrap(func: _F) -> _F:
        @wraps(func)
        def _inner(*args: Any, **kwargs: Any):
            with timer(label):
                return func(*args, **kwargs)

        return cast(_F, _inner)

    return _wrap


def count_calls(label: str) -> Callable[[_F], _F]:
    """Decorator that increments a counter each time the function is invoked."""

    def _wrap(func: _F) -> _F:
        @wraps(func)
        def _inner(*args: Any, **kwargs: Any):
            if instrumentation_enabled():
                metrics_registry.inc(label)
            return func(*args, **kwargs)

        return cast(_F, _inner)

    return _wrap


def inc_counter(label: str, amount: float = 1.0) -> None:
    if instrumentation_enabled():
        metrics_registry.inc(label, amount)


def get_metrics() -> Dict[str, Dict[str, float]]:
    return metrics_registry.timings_snapshot()


def get_counters() -> Dict[str, float]:
    return metrics_registry.counters_snapshot()


def get_last_runs() -> Dict[str, Dict[str, Any]]:
    return metrics_registry.last_runs_snapshot()


__all__ = [
    "timer",
    "measure_time",
    "count_calls",
    "inc_counter",
    "get_metrics",
    "get_counters",
    "get_last_runs",
    "metrics_registry",
    "set_instrumentation_enabled",
    "instrumentation_enabled",
]
