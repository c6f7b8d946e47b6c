"""
Diagnostics: the report channel for recoverable conditions.

Parsers and resolver stages never drop a problem silently and never stop
the run for one that only affects a single node. They add a ``Diagnostic``
to the run's ``DiagnosticReport``; every entry is logged as it is added.

Severity:
    - ``info``: documentation quality (missing description/docstring)
    - ``warning``: ambiguous or unresolved references with a sane fallback
    - ``error``: structural inconsistency (name clash, missing ancestor,
      inheritance cycle). In strict mode the first one is raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from docspine.errors import (
    CycleError,
    DocSpineError,
    MissingAncestorError,
    NameClashError,
    ResolutionError,
    UnresolvedReferenceError,
)
from docspine.logging import get_logger
from docspine.model.records import SourceLocation

logger = get_logger(__name__)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """One reported condition.

    Attributes:
        code: Stable snake_case identifier (``name_clash``, ``cycle``, ...)
        message: Human-readable message
        severity: info, warning or error
        record_id: Record the condition concerns
        locations: Source locations involved
        error: The recoverable exception, when one was raised
    """

    code: str
    message: str
    severity: Severity = Severity.WARNING
    record_id: str | None = None
    locations: tuple[SourceLocation, ...] = ()
    error: DocSpineError | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.record_id is not None:
            result["record_id"] = self.record_id
        if self.locations:
            result["locations"] = [loc.to_dict() for loc in self.locations]
        return result


def _classify(error: ResolutionError) -> tuple[str, Severity]:
    if isinstance(error, NameClashError):
        return "name_clash", Severity.ERROR
    if isinstance(error, CycleError):
        return "cycle", Severity.ERROR
    if isinstance(error, MissingAncestorError):
        return "missing_ancestor", Severity.ERROR
    if isinstance(error, UnresolvedReferenceError):
        return "unresolved_reference", Severity.WARNING
    return "resolution_error", Severity.ERROR


class DiagnosticReport:
    """Ordered collection of diagnostics for one run."""

    def __init__(self, diagnostics: Iterable[Diagnostic] = ()):
        self._items: list[Diagnostic] = []
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def add(self, diagnostic: Diagnostic) -> Diagnostic:
        self._items.append(diagnostic)
        level = "info" if diagnostic.severity is Severity.INFO else diagnostic.severity.value
        getattr(logger, level)(
            diagnostic.code,
            message=diagnostic.message,
            record_id=diagnostic.record_id,
            locations=[str(loc) for loc in diagnostic.locations],
        )
        return diagnostic

    def report(
        self,
        code: str,
        message: str,
        severity: Severity = Severity.WARNING,
        record_id: str | None = None,
        locations: Iterable[SourceLocation] = (),
    ) -> Diagnostic:
        """Add a diagnostic that has no exception behind it."""
        return self.add(
            Diagnostic(
                code=code,
                message=message,
                severity=severity,
                record_id=record_id,
                locations=tuple(locations),
            )
        )

    def record(
        self,
        error: ResolutionError,
        code: str | None = None,
        severity: Severity | None = None,
    ) -> Diagnostic:
        """Turn a recoverable error into a diagnostic."""
        default_code, default_severity = _classify(error)
        return self.add(
            Diagnostic(
                code=code or default_code,
                message=error.message,
                severity=severity or default_severity,
                record_id=error.context.record_id,
                locations=error.locations,
                error=error,
            )
        )

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self._items if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self._items if d.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self._items)

    def by_code(self, code: str) -> list[Diagnostic]:
        return [d for d in self._items if d.code == code]

    def first_error(self) -> DocSpineError | None:
        """The exception behind the first error-severity diagnostic."""
        for diagnostic in self.errors:
            if diagnostic.error is not None:
                return diagnostic.error
            return ResolutionError(diagnostic.message).with_context(record_id=diagnostic.record_id)
        return None

    def counts(self) -> dict[str, int]:
        """Number of diagnostics per severity."""
        result = {severity.value: 0 for severity in Severity}
        for diagnostic in self._items:
            result[diagnostic.severity.value] += 1
        return result

    def to_dicts(self) -> list[dict[str, Any]]:
        return [d.to_dict() for d in self._items]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


__all__ = ["Severity", "Diagnostic", "DiagnosticReport"]
