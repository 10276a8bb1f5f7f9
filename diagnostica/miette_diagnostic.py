"""A diagnostic that is assembled at runtime."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional

from diagnostica.protocol import Diagnostic, LabeledSpan, Severity

_UNSET: Any = object()


def _check_label(label: Any) -> LabeledSpan:
    if not isinstance(label, LabeledSpan):
        raise TypeError(f"expected a LabeledSpan, got {type(label).__name__}")
    return label


def _optional_str(value: Any, field: str) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"invalid {field}: {value!r}")
    return value


class MietteDiagnostic(Diagnostic):
    """Diagnostic built from a message plus optional code, severity, help, URL and labels.

    The ``with_*`` and ``and_*`` methods return a new diagnostic and leave the
    original untouched.
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        severity: Optional[Severity] = None,
        help: Optional[str] = None,
        url: Optional[str] = None,
        labels: Optional[Iterable[LabeledSpan]] = None,
    ) -> None:
        message = str(message)
        super().__init__(message)
        if severity is not None and not isinstance(severity, Severity):
            raise TypeError(f"expected a Severity, got {type(severity).__name__}")
        self.message = message
        self._code = None if code is None else str(code)
        self._severity = severity
        self._help = None if help is None else str(help)
        self._url = None if url is None else str(url)
        self._labels: Optional[List[LabeledSpan]] = (
            None if labels is None else [_check_label(label) for label in labels]
        )

    def _replace(
        self,
        code: Any = _UNSET,
        severity: Any = _UNSET,
        help: Any = _UNSET,
        url: Any = _UNSET,
        labels: Any = _UNSET,
    ) -> "MietteDiagnostic":
        return MietteDiagnostic(
            self.message,
            code=self._code if code is _UNSET else code,
            severity=self._severity if severity is _UNSET else severity,
            help=self._help if help is _UNSET else help,
            url=self._url if url is _UNSET else url,
            labels=self._labels if labels is _UNSET else labels,
        )

    def code(self) -> Optional[str]:
        return self._code

    def severity(self) -> Optional[Severity]:
        return self._severity

    def help(self) -> Optional[str]:
        return self._help

    def url(self) -> Optional[str]:
        return self._url

    def labels(self) -> Optional[Iterator[LabeledSpan]]:
        if self._labels is None:
            return None
        return iter(list(self._labels))

    def with_code(self, code: str) -> "MietteDiagnostic":
        """Return a new diagnostic with the given code."""
        return self._replace(code=str(code))

    def with_severity(self, severity: Severity) -> "MietteDiagnostic":
        """Return a new diagnostic with the given severity."""
        return self._replace(severity=severity)

    def with_help(self, help: str) -> "MietteDiagnostic":
        """Return a new diagnostic with the given help text."""
        return self._replace(help=str(help))

    def with_url(self, url: str) -> "MietteDiagnostic":
        """Return a new diagnostic with the given URL."""
        return self._replace(url=str(url))

    def with_label(self, label: LabeledSpan) -> "MietteDiagnostic":
        """Return a new diagnostic with only the given label."""
        return self._replace(labels=[_check_label(label)])

    def with_labels(self, labels: Iterable[LabeledSpan]) -> "MietteDiagnostic":
        """Return a new diagnostic with only the given labels."""
        return self._replace(labels=list(labels))

    def and_label(self, label: LabeledSpan) -> "MietteDiagnostic":
        """Return a new diagnostic with the label added to the existing ones."""
        return self._replace(labels=[*(self._labels or []), _check_label(label)])

    def and_labels(self, labels: Iterable[LabeledSpan]) -> "MietteDiagnostic":
        """Return a new diagnostic with the labels added to the existing ones."""
        return self._replace(labels=[*(self._labels or []), *labels])

    def to_json(self) -> dict:
        """Return the JSON representation, leaving out missing fields."""
        result: dict = {"message": self.message}
        if self._code is not None:
            result["code"] = self._code
        if self._severity is not None:
            result["severity"] = self._severity.to_json()
        if self._help is not None:
            result["help"] = self._help
        if self._url is not None:
            result["url"] = self._url
        if self._labels is not None:
            result["labels"] = [label.to_json() for label in self._labels]
        return result

    @classmethod
    def from_json(cls, value: Any) -> "MietteDiagnostic":
        """Build a diagnostic from its JSON representation."""
        if not isinstance(value, dict):
            raise ValueError(f"invalid diagnostic: {value!r}")
        message = value.get("message")
        if not isinstance(message, str):
            raise ValueError("diagnostic needs a string 'message'")
        severity = value.get("severity")
        labels = value.get("labels")
        if labels is not None and not isinstance(labels, list):
            raise ValueError(f"invalid labels: {labels!r}")
        return cls(
            message,
            code=_optional_str(value.get("code"), "code"),
            severity=None if severity is None else Severity.from_json(severity),
            help=_optional_str(value.get("help"), "help"),
            url=_optional_str(value.get("url"), "url"),
            labels=None if labels is None else [LabeledSpan.from_json(item) for item in labels],
        )

    def _key(self) -> tuple:
        return (self.message, self._code, self._severity, self._help, self._url, self._labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MietteDiagnostic):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"MietteDiagnostic(message={self.message!r}, code={self._code!r}, "
            f"severity={self._severity!r}, help={self._help!r}, url={self._url!r}, "
            f"labels={self._labels!r})"
        )