"""Typed diagnostic channel for non-fatal store events.

Recoverable conditions (degraded parameter encodings, skipped runs,
missing timestamps) are recorded here instead of aborting operations.
Each recorded event is also logged as a structured warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class DiagnosticKind(str, Enum):
    """Kinds of non-fatal store diagnostics."""

    ENCODING_FALLBACK = "encoding_fallback"
    SYSTEM_PARAM_DRIFT = "system_param_drift"
    INCOMPATIBLE_RUN_SKIPPED = "incompatible_run_skipped"
    SYSTEM_PARAMS_MISSING = "system_params_missing"
    TIMESTAMP_WRITE_FAILED = "timestamp_write_failed"
    ARTIFACT_READ_FAILED = "artifact_read_failed"


@dataclass(frozen=True)
class Diagnostic:
    """One recorded diagnostic event.

    Attributes:
        kind: Diagnostic category.
        message: Human-readable description.
        fields: Structured context (keys, run ids, stored types).
    """

    kind: DiagnosticKind
    message: str
    fields: Mapping[str, object] = field(default_factory=dict)


class DiagnosticLog:
    """Collector for diagnostics emitted during store operations."""

    def __init__(self, log_events: bool = True) -> None:
        self._events: list[Diagnostic] = []
        self._log_events = log_events

    def record(self, kind: DiagnosticKind, message: str, **fields: object) -> Diagnostic:
        """Record one diagnostic and emit it as a warning log event."""
        diagnostic = Diagnostic(kind=kind, message=message, fields=dict(fields))
        self._events.append(diagnostic)
        if self._log_events:
            _LOGGER.warning(kind.value, message=message, **_loggable(fields))
        return diagnostic

    @property
    def events(self) -> tuple[Diagnostic, ...]:
        """Return recorded diagnostics in emission order."""
        return tuple(self._events)

    def of_kind(self, kind: DiagnosticKind) -> tuple[Diagnostic, ...]:
        """Return recorded diagnostics matching one kind."""
        return tuple(event for event in self._events if event.kind is kind)

    def clear(self) -> None:
        """Drop all recorded diagnostics."""
        self._events.clear()


def _loggable(fields: Mapping[str, object]) -> dict[str, object]:
    # JSON rendering needs plain values
    return {
        key: value if isinstance(value, (str, int, float, bool, type(None))) else repr(value)
        for key, value in fields.items()
    }
