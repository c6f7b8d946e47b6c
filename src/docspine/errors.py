"""
Structured error types for docspine.

Every failure the tool can raise is a ``DocSpineError``. Errors carry a
category, a recoverable flag, an ``ErrorContext`` with the source location
or plugin involved, and an optional chained cause.

Manifesto:
    - **Typed Error Hierarchy:** Parse, configuration, resolution and
      render failures are different types with different propagation
    - **Explicit Recovery Semantics:** Each error knows whether the run can
      continue after it is reported
    - **Rich Context:** Errors carry file/line and record ids for the report
    - **Error Chaining:** Original exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      DocSpineError                           │
        │          (category, recoverable, context, cause)             │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ParseError        ConfigurationError     ResolutionError    │
        │  (PARSE, fatal)    (CONFIG, fatal)        (RESOLUTION)       │
        │                         │                      │             │
        │               UnknownRendererError      NameClashError       │
        │               UnknownProfileError       UnresolvedReference  │
        │               InvalidOptionError          └ MissingAncestor  │
        │                                         CycleError           │
        │                                                              │
        │  ResolutionStateError   RenderError     FrozenRecordError    │
        │  (INTERNAL, fatal)      (RENDER)        (INTERNAL)           │
        └─────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Raise recoverable resolution errors out of the pipeline
    ✅ DO: Record them in the DiagnosticReport and degrade the node

    ❌ DON'T: Continue after a ParseError or ConfigurationError
    ✅ DO: Let them propagate and stop the run

Tags:
    error-handling, exception-hierarchy, diagnostics, docspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from docspine.model.records import SourceLocation


class ErrorCategory(str, Enum):
    """
    Standard error categories used for reporting.

    Attributes:
        PARSE: Malformed parser input
        CONFIG: Unknown renderer/profile, malformed options
        RESOLUTION: Structural inconsistency found while building the tree
        RENDER: Renderer failure
        INTERNAL: Misuse of the pipeline, bugs
    """

    PARSE = "PARSE"
    CONFIG = "CONFIG"
    RESOLUTION = "RESOLUTION"
    RENDER = "RENDER"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        file: Source file the error relates to
        line: Line number in ``file``
        record_id: Record id involved
        parser: Parser extension that was dispatched
        renderer: Renderer name that was running
        metadata: Additional key-value pairs
    """

    file: str | None = None
    line: int | None = None
    record_id: str | None = None
    parser: str | None = None
    renderer: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["file", "line", "record_id", "parser", "renderer"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DocSpineError(Exception):
    """
    Base exception for all docspine errors.

    Subclasses set ``default_category`` and ``default_recoverable``.
    Recoverable errors are turned into diagnostics by the resolver; the
    others stop the run.

    Examples:
        >>> error = DocSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(file="lib/ajax.js", line=12).context.line
        12
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        recoverable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.recoverable = recoverable if recoverable is not None else self.default_recoverable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    @property
    def locations(self) -> tuple[SourceLocation, ...]:
        """Source locations this error points at."""
        return ()

    def with_context(self, **kwargs: Any) -> DocSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ParseError("Unexpected token").with_context(parser=".js")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "recoverable": self.recoverable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PARSE ERRORS
# =============================================================================


class ParseError(DocSpineError):
    """
    Malformed input to a parser.

    Fatal: the run stops with file/line context and produces no output.
    """

    default_category = ErrorCategory.PARSE
    default_recoverable = False

    def __init__(
        self,
        message: str,
        *,
        file: str | None = None,
        line: int | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if file is not None:
            self.context.file = file
        if line is not None:
            self.context.line = line

    def __str__(self) -> str:
        if self.context.file is None:
            return self.message
        if self.context.line is None:
            return f"{self.context.file}: {self.message}"
        return f"{self.context.file}:{self.context.line}: {self.message}"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(DocSpineError):
    """
    Configuration error.

    Fatal, raised before any resolution work begins.
    """

    default_category = ErrorCategory.CONFIG
    default_recoverable = False


class UnknownRendererError(ConfigurationError):
    """Renderer name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = sorted(available or [])
        listing = ", ".join(self.available) or "none"
        super().__init__(f"Unknown renderer: {name} (available: {listing})")


class UnknownProfileError(ConfigurationError):
    """Global-object profile name is not known."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = sorted(available or [])
        listing = ", ".join(self.available) or "none"
        super().__init__(f"I don't know any global objects for the type '{name}' (available: {listing})")


class InvalidOptionError(ConfigurationError):
    """Option value is malformed."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# RESOLUTION ERRORS (recoverable)
# =============================================================================


class ResolutionError(DocSpineError):
    """
    Structural inconsistency discovered while building the tree.

    Recoverable: the affected node degrades and the error is reported.
    """

    default_category = ErrorCategory.RESOLUTION
    default_recoverable = True


class NameClashError(ResolutionError):
    """Two records resolve to the same id."""

    def __init__(
        self,
        record_id: str,
        kept: SourceLocation,
        dropped: SourceLocation,
        message: str | None = None,
    ):
        self.record_id = record_id
        self.kept = kept
        self.dropped = dropped
        super().__init__(
            message or f"Name clash on '{record_id}': keeping {kept}, dropping {dropped}"
        )
        self.context.record_id = record_id

    @property
    def locations(self) -> tuple[SourceLocation, ...]:
        return (self.kept, self.dropped)


class UnresolvedReferenceError(ResolutionError):
    """A record refers to an id that does not exist."""

    relation: str = "reference"

    def __init__(
        self,
        record_id: str,
        target: str,
        location: SourceLocation | None = None,
        message: str | None = None,
    ):
        self.record_id = record_id
        self.target = target
        self.location = location
        super().__init__(
            message or f"'{record_id}' has {self.relation} '{target}' which does not exist"
        )
        self.context.record_id = record_id

    @property
    def locations(self) -> tuple[SourceLocation, ...]:
        return (self.location,) if self.location is not None else ()


class MissingAncestorError(UnresolvedReferenceError):
    """An ``inherits`` or ``superclass`` reference points to a nonexistent class."""

    relation = "ancestor"


class CycleError(ResolutionError):
    """An inheritance chain revisits an ancestor already on the current path."""

    def __init__(self, cycle: list[str] | tuple[str, ...], message: str | None = None):
        self.cycle = tuple(cycle)
        super().__init__(message or f"Inheritance cycle: {' -> '.join(self.cycle)}")
        if self.cycle:
            self.context.record_id = self.cycle[0]


# =============================================================================
# PIPELINE / OUTPUT ERRORS
# =============================================================================


class ResolutionStateError(DocSpineError):
    """A resolution stage was re-entered on a collection already handed on."""

    default_category = ErrorCategory.INTERNAL
    default_recoverable = False


class FrozenRecordError(DocSpineError, AttributeError):
    """A resolved (read-only) record was mutated."""

    default_category = ErrorCategory.INTERNAL
    default_recoverable = False


class RenderError(DocSpineError):
    """Renderer failure."""

    default_category = ErrorCategory.RENDER
    default_recoverable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_recoverable(error: Exception) -> bool:
    """Check if an error can be reported without stopping the run."""
    if isinstance(error, DocSpineError):
        return error.recoverable
    return False


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, DocSpineError):
        return error.category
    if isinstance(error, (SyntaxError, ValueError)):
        return ErrorCategory.PARSE
    if isinstance(error, OSError):
        return ErrorCategory.RENDER
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocSpineError",
    "ParseError",
    "ConfigurationError",
    "UnknownRendererError",
    "UnknownProfileError",
    "InvalidOptionError",
    "ResolutionError",
    "NameClashError",
    "UnresolvedReferenceError",
    "MissingAncestorError",
    "CycleError",
    "ResolutionStateError",
    "FrozenRecordError",
    "RenderError",
    "is_recoverable",
    "categorize_error",
]
