# diagnostica

Structured diagnostics for Python programs. A diagnostic is an exception that
can also carry:

- an error **code** (for example `foo::bar::baz` or `E0123`),
- a **severity** (`Severity.ADVICE`, `Severity.WARNING` or `Severity.ERROR`;
  a missing severity is meant to be read as `ERROR`),
- **help** text and a **URL** with more information,
- **labels** that point at byte spans in some **source code**,
- **related** diagnostics and a **diagnostic source** (its cause).

The package has no third-party dependencies.

## Modules

- `diagnostica.protocol` – `Diagnostic`, `Severity`, `SourceOffset`,
  `SourceSpan`, `LabeledSpan`, `SpanContents`, `SourceCode`,
  `StringDiagnostic`, `WrappedError`, `to_diagnostic`, and the errors
  `MietteError` and `OutOfBoundsError`.
- `diagnostica.source_impls` – `context_info`, `read_span` and `TextSource`
  for reading spans, with context lines, out of in-memory text and bytes.
- `diagnostica.source_code` – `NamedSource`, which wraps source code and gives
  it a name and a language.
- `diagnostica.miette_diagnostic` – `MietteDiagnostic`, a diagnostic assembled
  at runtime.

## Building a diagnostic at runtime

```python
from diagnostica.miette_diagnostic import MietteDiagnostic
from diagnostica.protocol import LabeledSpan, Severity

diag = (
    MietteDiagnostic("Typos in 'hello world!'")
    .with_code("spelling::typo")
    .with_severity(Severity.WARNING)
    .with_help("check the spelling")
    .and_label(LabeledSpan.at_offset(3, "add 'l'"))
    .and_labels([LabeledSpan.at_offset(6, "add 'r'")])
)

str(diag)        # "Typos in 'hello world!'"
diag.code()      # "spelling::typo"
diag.to_json()   # a plain dict, ready for json.dumps
MietteDiagnostic.from_json(diag.to_json()) == diag  # True
```

Each `with_*` and `and_*` method returns a new diagnostic and leaves the
original untouched. `with_label` and `with_labels` replace any existing labels;
`and_label` and `and_labels` append to them. `to_json` leaves out fields that
are not set, and severities are written as `"Advice"`, `"Warning"` or
`"Error"`.

## Spans and offsets

```python
from diagnostica.protocol import LabeledSpan, SourceOffset, SourceSpan

SourceSpan.from_range(0, 3)          # offset 0, length 3
SourceSpan.from_inclusive(2, 4)      # offset 2, length 3
SourceSpan.coerce((9, 4))            # from an (offset, length) pair

LabeledSpan.at((0, 3), "should be something else")
LabeledSpan.underline(range(12, 16)) # a span with no label text

# Turn 1-based line/column positions into a byte offset.
SourceOffset.from_location("f\n\noo\r\nbar", 3, 2)  # offset 4
```

`SourceSpan.coerce` accepts a `SourceSpan`, a `SourceOffset`, an int, an
`(offset, length)` pair or a `range` with a step of 1. Offsets and lengths may
not be negative. `SourceOffset.from_current_location()` returns the calling
file's name and the offset of the call within it.

## Reading source around a span

```python
from diagnostica.source_code import NamedSource
from diagnostica.source_impls import TextSource, read_span

contents = read_span("foo\nbarbar\nbaz\n", (7, 4), 0, 0)
contents.data     # b"bar\n"
contents.line     # 1 (0-based)
contents.column   # 3 (0-based)

src = NamedSource(TextSource("fn f() {}")).with_name("snippet").with_language("Rust")
src.name()        # "snippet"
src.language()    # "Rust"
```

`read_span` works on `str`, `bytes`, `bytearray`, `memoryview` and any
`SourceCode`. Both `\n` and `\r\n` end a line. A span that reaches past the end
of the source raises `OutOfBoundsError`, a subclass of `MietteError`.

## Writing your own diagnostics

Subclass `Diagnostic` and override whichever hooks you need: `code`,
`severity`, `help`, `url`, `source_code`, `labels`, `related` and
`diagnostic_source`. Without overrides most hooks return `None`;
`source_code` returns the instance's `_source_code` attribute, `related`
iterates over `_related` (or returns `None` when it is empty), and
`diagnostic_source` returns the exception's `__cause__` when that is a
`Diagnostic`.

`to_diagnostic` turns a string into a `StringDiagnostic`, any other exception
into a `WrappedError` (which keeps the exception's message and cause), and
returns a diagnostic unchanged.

## What this package does not do

It describes diagnostics and reads source around spans; it does not render
reports. There are no graphical, narrated or JSON report printers, no report
chains or error wrapping helpers, and no hook for formatting uncaught errors.

## Tests

The test suite uses pytest, available through the `test` extra.