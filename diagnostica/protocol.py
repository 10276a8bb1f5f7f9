"""Core diagnostic protocol: severities, spans, labels, source code and diagnostics."""

from __future__ import annotations

import abc
import enum
import functools
import inspect
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple


class MietteError(Exception):
    """Base error raised by the diagnostic machinery."""


class OutOfBoundsError(MietteError):
    """Raised when a span lies outside the bounds of its source."""

    def __init__(self, message: str = "The given offset is outside the bounds of its Source") -> None:
        super().__init__(message)


@functools.total_ordering
class Severity(enum.Enum):
    """Diagnostic severity. Reporters treat a missing severity as ``ERROR``."""

    ADVICE = "Advice"
    WARNING = "Warning"
    ERROR = "Error"

    @property
    def _rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self._rank < other._rank

    def to_json(self) -> str:
        """Return the JSON representation of this severity."""
        return self.value

    @classmethod
    def from_json(cls, value: Any) -> "Severity":
        """Build a severity from its JSON representation."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown severity: {value!r}") from None


_SEVERITY_ORDER = (Severity.ADVICE, Severity.WARNING, Severity.ERROR)


def _check_non_negative(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")


@dataclass(frozen=True, order=True)
class SourceOffset:
    """A byte offset from the beginning of a source."""

    offset: int

    def __post_init__(self) -> None:
        _check_non_negative("offset", self.offset)

    @classmethod
    def from_location(cls, source: str, loc_line: int, loc_col: int) -> "SourceOffset":
        """Convert a 1-based line/column into a byte offset.

        Out-of-range locations give the offset of the end of the source.
        """
        line = col = offset = 0
        for char in source:
            if line + 1 >= loc_line and col + 1 >= loc_col:
                break
            if char == "\n":
                col = 0
                line += 1
            else:
                col += 1
            offset += len(char.encode("utf-8"))
        return cls(offset)

    @classmethod
    def from_current_location(cls) -> Tuple[str, "SourceOffset"]:
        """Return the caller's file name and the offset of the call in that file."""
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        if caller is None:
            raise MietteError("caller location is not available")
        try:
            info = inspect.getframeinfo(caller, context=0)
        finally:
            del frame, caller
        column = 1
        positions = getattr(info, "positions", None)
        if positions is not None and positions.col_offset is not None:
            column = positions.col_offset + 1
        try:
            with open(info.filename, encoding="utf-8") as handle:
                text = handle.read()
        except OSError as exc:
            raise MietteError(str(exc)) from exc
        return info.filename, cls.from_location(text, info.lineno, column)

    def to_json(self) -> int:
        """Return the JSON representation of this offset."""
        return self.offset

    @classmethod
    def from_json(cls, value: Any) -> "SourceOffset":
        """Build an offset from its JSON representation."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"invalid source offset: {value!r}")
        return cls(value)


@dataclass(frozen=True, order=True)
class SourceSpan:
    """A span of bytes within a source."""

    offset: int
    length: int = 0

    def __post_init__(self) -> None:
        _check_non_negative("offset", self.offset)
        _check_non_negative("length", self.length)

    def __len__(self) -> int:
        return self.length

    @classmethod
    def coerce(cls, value: Any) -> "SourceSpan":
        """Build a span from a span, offset, int, ``(offset, length)`` pair or range."""
        if isinstance(value, SourceSpan):
            return value
        if isinstance(value, SourceOffset):
            return cls(value.offset, 0)
        if isinstance(value, range):
            if value.step != 1:
                raise ValueError("only ranges with a step of 1 can become spans")
            return cls.from_range(value.start, value.stop)
        if isinstance(value, tuple) and len(value) == 2:
            start, length = value
            if isinstance(start, SourceOffset):
                start = start.offset
            return cls(start, length)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value, 0)
        raise TypeError(f"cannot make a SourceSpan from {value!r}")

    @classmethod
    def from_range(cls, start: int, stop: int) -> "SourceSpan":
        """Span covering the half-open range ``start..stop``."""
        return cls(start, max(0, stop - start))

    @classmethod
    def from_inclusive(cls, start: int, end: int) -> "SourceSpan":
        """Span covering the closed range ``start..=end``."""
        return cls(start, 0 if start > end else end - start + 1)

    def is_empty(self) -> bool:
        """True if the span has a length of zero."""
        return self.length == 0

    def to_json(self) -> dict:
        """Return the JSON representation of this span."""
        return {"offset": self.offset, "length": self.length}

    @classmethod
    def from_json(cls, value: Any) -> "SourceSpan":
        """Build a span from its JSON representation."""
        if not isinstance(value, dict):
            raise ValueError(f"invalid source span: {value!r}")
        try:
            offset, length = value["offset"], value["length"]
        except KeyError as exc:
            raise ValueError(f"source span is missing {exc.args[0]!r}") from None
        for item in (offset, length):
            if isinstance(item, bool) or not isinstance(item, int):
                raise ValueError(f"invalid source span: {value!r}")
        return cls(offset, length)


@dataclass
class LabeledSpan:
    """A source span with an optional label."""

    label: Optional[str]
    span: SourceSpan
    primary: bool = False

    @classmethod
    def new(cls, label: Optional[str], offset: int, length: int) -> "LabeledSpan":
        """Make a labeled span from an offset and a length."""
        return cls(label, SourceSpan(offset, length))

    @classmethod
    def new_with_span(cls, label: Optional[str], span: Any) -> "LabeledSpan":
        """Make a labeled span from anything convertible to a span."""
        return cls(label, SourceSpan.coerce(span))

    @classmethod
    def new_primary_with_span(cls, label: Optional[str], span: Any) -> "LabeledSpan":
        """Make a primary labeled span from anything convertible to a span."""
        return cls(label, SourceSpan.coerce(span), primary=True)

    @classmethod
    def at(cls, span: Any, label: str) -> "LabeledSpan":
        """Make a label at the given span."""
        return cls.new_with_span(label, span)

    @classmethod
    def at_offset(cls, offset: int, label: str) -> "LabeledSpan":
        """Make a label pointing at a single offset."""
        return cls.new(label, offset, 0)

    @classmethod
    def underline(cls, span: Any) -> "LabeledSpan":
        """Make an unlabeled span that underlines the given span."""
        return cls.new_with_span(None, span)

    @property
    def offset(self) -> int:
        """The 0-based starting byte offset."""
        return self.span.offset

    def __len__(self) -> int:
        return self.span.length

    def is_empty(self) -> bool:
        """True if the span has a length of zero."""
        return self.span.is_empty()

    def to_json(self) -> dict:
        """Return the JSON representation, leaving out a missing label."""
        result: dict = {}
        if self.label is not None:
            result["label"] = self.label
        result["span"] = self.span.to_json()
        result["primary"] = self.primary
        return result

    @classmethod
    def from_json(cls, value: Any) -> "LabeledSpan":
        """Build a labeled span from its JSON representation."""
        if not isinstance(value, dict):
            raise ValueError(f"invalid labeled span: {value!r}")
        label = value.get("label")
        if label is not None and not isinstance(label, str):
            raise ValueError(f"invalid label: {label!r}")
        if "span" not in value:
            raise ValueError("labeled span is missing 'span'")
        if "primary" not in value or not isinstance(value["primary"], bool):
            raise ValueError("labeled span needs a boolean 'primary'")
        return cls(label, SourceSpan.from_json(value["span"]), value["primary"])


@dataclass(frozen=True)
class SpanContents:
    """Bytes read from a source for a span, with line and column information."""

    data: bytes
    span: SourceSpan
    line: int
    column: int
    line_count: int


class SourceCode(abc.ABC):
    """Readable source code that spans can be read from."""

    @abc.abstractmethod
    def read_span(
        self, span: SourceSpan, context_lines_before: int, context_lines_after: int
    ) -> SpanContents:
        """Read a span, keeping some lines of context before and after it."""

    def name(self) -> Optional[str]:
        """The name of this source, if it has one."""
        return None

    def language(self) -> Optional[str]:
        """The language of this source, if known."""
        return None


class Diagnostic(Exception):
    """An error carrying metadata for human-friendly reports.

    Subclasses may set ``_source_code`` and ``_related`` to attach source code
    and related diagnostics without overriding the accessors.
    """

    _source_code: Optional[SourceCode] = None
    _related: Tuple["Diagnostic", ...] = ()

    def code(self) -> Optional[str]:
        """Unique code to look up more information about this diagnostic."""
        return None

    def severity(self) -> Optional[Severity]:
        """Severity; ``None`` means ``Severity.ERROR``."""
        return None

    def help(self) -> Optional[str]:
        """Additional help text."""
        return None

    def url(self) -> Optional[str]:
        """URL with a more detailed explanation."""
        return None

    def source_code(self) -> Optional[SourceCode]:
        """Source code the labels apply to, if any is attached."""
        source = self._source_code
        if source is not None and not isinstance(source, SourceCode):
            raise TypeError(
                f"attached source code must be a SourceCode, got {type(source).__name__}"
            )
        return source

    def labels(self) -> Optional[Iterator[LabeledSpan]]:
        """Labels applied to the source code."""
        return None

    def related(self) -> Optional[Iterator["Diagnostic"]]:
        """Additional related diagnostics, or ``None`` when there are none."""
        related = tuple(self._related)
        if not related:
            return None
        return iter(related)

    def diagnostic_source(self) -> Optional["Diagnostic"]:
        """The diagnostic that caused this one, taken from the exception cause."""
        cause = self.__cause__
        return cause if isinstance(cause, Diagnostic) else None


class StringDiagnostic(Diagnostic):
    """A diagnostic holding nothing but a message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return repr(self.message)


class WrappedError(Diagnostic):
    """A plain exception presented as a diagnostic, transparently."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error
        cause = error.__cause__
        if cause is None and not error.__suppress_context__:
            cause = error.__context__
        self.__cause__ = cause

    def __str__(self) -> str:
        return str(self.error)

    def __repr__(self) -> str:
        return repr(self.error)


def to_diagnostic(value: Any) -> Diagnostic:
    """Turn a diagnostic, a message or an exception into a diagnostic."""
    if isinstance(value, Diagnostic):
        return value
    if isinstance(value, str):
        return StringDiagnostic(value)
    if isinstance(value, BaseException):
        return WrappedError(value)
    raise TypeError(f"cannot make a Diagnostic from {type(value).__name__}")