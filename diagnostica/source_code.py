"""A source-code wrapper that adds a name and a language."""

from __future__ import annotations

import copy
from typing import Any, Optional, Union

from diagnostica.protocol import SourceCode, SpanContents
from diagnostica.source_impls import TextSource


class NamedSource(SourceCode):
    """Wraps source code, overriding its name and language."""

    def __init__(self, source: Union[SourceCode, str, bytes]) -> None:
        if isinstance(source, (str, bytes, bytearray)):
            source = TextSource(bytes(source) if isinstance(source, bytearray) else source)
        if not isinstance(source, SourceCode):
            raise TypeError(f"cannot use {type(source).__name__} as source code")
        self.source = source
        self._name: Optional[str] = None
        self._language: Optional[str] = None

    def with_name(self, name: str) -> "NamedSource":
        """Return a copy with the given name."""
        result = copy.copy(self)
        result._name = str(name)
        return result

    def with_language(self, language: str) -> "NamedSource":
        """Return a copy with the given language name, used for highlighting."""
        result = copy.copy(self)
        result._language = str(language)
        return result

    def read_span(
        self, span: Any, context_lines_before: int, context_lines_after: int
    ) -> SpanContents:
        """Read a span from the wrapped source."""
        return self.source.read_span(span, context_lines_before, context_lines_after)

    def name(self) -> Optional[str]:
        return self._name

    def language(self) -> Optional[str]:
        return self._language

    def _key(self) -> tuple:
        return (self.source, self._name, self._language)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedSource):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"NamedSource(name={self._name!r}, language={self._language!r}, "
            "source='<redacted>')"
        )