"""
Renders OWL front-end errors against the source they came from.

An ``OwlError`` only knows a character-offset span. This module maps the span
back to a 1-based line and column, prints the offending source line, underlines
the span with carets, and finishes with either a verbose or a terse summary:

    let x = "abc
            ^^^^
    error[UnterminatedString]: Unterminated string (line 1, column 9, chars 8..12)

    let x = "abc
            ^^^^
    1:9: Unterminated string

Functions:
    locate(source, offset) -> (line, column)
    render(source, error, style) -> str
    report(source, error, style): print the rendering to stderr and exit with
        EXIT_STATUS. Hosts call this; the library itself never exits.
"""

import logging
import sys
from typing import NoReturn, TextIO

from owl.owl_config import DiagnosticStyle
from owl.owl_errors import OwlError
from owl.owl_lexer import CharacterStream

logger = logging.getLogger(__name__)

EXIT_STATUS = 1


def _as_stream(source: str | CharacterStream) -> CharacterStream:
    if isinstance(source, CharacterStream):
        return source.clone()
    return CharacterStream(source)


def locate(source: str | CharacterStream, offset: int) -> tuple[int, int]:
    """Returns the 1-based (line, column) of ``offset``, counting `\\n` terminators."""
    stream = _as_stream(source)
    line, column = 1, 1
    while stream.position < offset and not stream.end_of_file():
        if stream.next() == "\n":
            line += 1
            column = 1
        else:
            column += 1
    return line, column


def source_line(source: str | CharacterStream, offset: int) -> str:
    """Returns the full line of text containing ``offset``, without its terminator."""
    text = _as_stream(source).source
    offset = min(offset, len(text))
    line_start = text.rfind("\n", 0, offset) + 1
    line_end = text.find("\n", line_start)
    if line_end == -1:
        line_end = len(text)
    return text[line_start:line_end].rstrip("\r")


def render(
    source: str | CharacterStream,
    error: OwlError,
    style: DiagnosticStyle = DiagnosticStyle.VERBOSE,
) -> str:
    """Formats ``error`` as source line, caret underline and summary line."""
    span = error.span
    line, column = locate(source, span.start)
    text = source_line(source, span.start)

    # Tabs are echoed so the carets line up under the same glyphs.
    padding = "".join("\t" if c == "\t" else " " for c in text[: column - 1])
    width = max(1, min(len(span), len(text) - (column - 1)))
    underline = padding + "^" * width

    if style is DiagnosticStyle.TERSE:
        summary = f"{line}:{column}: {error.message}"
    else:
        summary = (
            f"error[{error.kind}]: {error.message} "
            f"(line {line}, column {column}, chars {span.start}..{span.end})"
        )
    return "\n".join([text, underline, summary])


def report(
    source: str | CharacterStream,
    error: OwlError,
    style: DiagnosticStyle = DiagnosticStyle.VERBOSE,
    file: TextIO | None = None,
) -> NoReturn:
    """Prints the rendered diagnostic and terminates with ``EXIT_STATUS``."""
    rendered = render(source, error, style)
    logger.debug("fatal %s at %r", error.kind, error.span)
    print(rendered, file=file or sys.stderr)
    sys.exit(EXIT_STATUS)


__all__ = ["EXIT_STATUS", "locate", "render", "report", "source_line"]
