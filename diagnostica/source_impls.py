"""Reading spans with surrounding context out of in-memory text and bytes."""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, Union

from diagnostica.protocol import OutOfBoundsError, SourceCode, SourceSpan, SpanContents

_CR = 0x0D
_LF = 0x0A

Readable = Union[str, bytes, bytearray, memoryview, SourceCode]


def _line_aware_bytes(data: bytes) -> Iterator[Tuple[int, bool]]:
    """Yield each byte with a flag telling whether it was a CR folded with a following LF."""
    skip = False
    for byte, following in zip(data, itertools.chain(data[1:], [None])):
        if skip:
            skip = False
            continue
        if byte == _CR and following == _LF:
            skip = True
            yield byte, True
        else:
            yield byte, False


def context_info(
    data: bytes,
    span: Any,
    context_lines_before: int,
    context_lines_after: int,
) -> SpanContents:
    """Locate ``span`` in ``data`` and return it with the requested lines of context.

    Raises ``OutOfBoundsError`` when the span lies past the end of the data.
    """
    data = bytes(data)
    span = SourceSpan.coerce(span)
    span_start = span.offset
    span_last = span.offset + max(span.length - 1, 0)
    span_end_last = max(span.offset + span.length - 1, 0)

    offset = 0
    line_count = 0
    start_line = 0
    start_column = 0
    before_lines_starts: deque = deque()
    current_line_start = 0
    end_lines = 0
    post_span = False
    post_span_got_newline = False

    for byte, folded_crlf in _line_aware_bytes(data):
        if byte in (_CR, _LF):
            line_count += 1
            if folded_crlf:
                offset += 1
            if offset < span_start:
                # Still before the span: remember this line as potential context.
                start_column = 0
                before_lines_starts.append(current_line_start)
                if len(before_lines_starts) > context_lines_before:
                    start_line += 1
                    before_lines_starts.popleft()
            elif offset >= span_last and post_span:
                start_column = 0
                if post_span_got_newline:
                    end_lines += 1
                else:
                    post_span_got_newline = True
                if end_lines >= context_lines_after:
                    offset += 1
                    break
            current_line_start = offset + 1
        elif offset < span_start:
            start_column += 1

        if offset >= span_end_last:
            post_span = True
            if end_lines >= context_lines_after:
                offset += 1
                break

        offset += 1

    if offset < span_end_last:
        raise OutOfBoundsError()

    if before_lines_starts:
        starting_offset = before_lines_starts[0]
    elif context_lines_before == 0:
        starting_offset = span_start
    else:
        starting_offset = 0

    return SpanContents(
        data=data[starting_offset:offset],
        span=SourceSpan(starting_offset, offset - starting_offset),
        line=start_line,
        column=start_column if context_lines_before == 0 else 0,
        line_count=line_count,
    )


def read_span(
    source: Readable,
    span: Any,
    context_lines_before: int,
    context_lines_after: int,
) -> SpanContents:
    """Read a span from text, bytes or any ``SourceCode``."""
    if isinstance(source, SourceCode):
        return source.read_span(SourceSpan.coerce(span), context_lines_before, context_lines_after)
    if isinstance(source, str):
        data = source.encode("utf-8")
    elif isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    else:
        raise TypeError(f"cannot read spans from {type(source).__name__}")
    return context_info(data, span, context_lines_before, context_lines_after)


@dataclass(frozen=True)
class TextSource(SourceCode):
    """Source code held in memory as text or bytes."""

    text: Union[str, bytes]

    def read_span(
        self, span: Any, context_lines_before: int, context_lines_after: int
    ) -> SpanContents:
        """Read a span, keeping some lines of context before and after it."""
        return read_span(self.text, span, context_lines_before, context_lines_after)

    def name(self) -> Optional[str]:
        return None

    def language(self) -> Optional[str]:
        return None