import io

import pytest

from owl.owl_config import DiagnosticStyle
from owl.owl_diagnostics import EXIT_STATUS, locate, render, report, source_line
from owl.owl_errors import ErrorKind, OwlError, ParseError
from owl.owl_lexer import CharacterStream, tokenize
from owl.owl_parser import parse
from owl.owl_tokens import Span


def error_for(source: str) -> OwlError:
    with pytest.raises(OwlError) as excinfo:
        parse(source)
    return excinfo.value


def test_locate_counts_lines_and_columns() -> None:
    assert locate("abc", 0) == (1, 1)
    assert locate("abc", 2) == (1, 3)
    assert locate("ab\ncd", 3) == (2, 1)
    assert locate("ab\ncd", 4) == (2, 2)


def test_locate_clamps_past_end() -> None:
    assert locate("ab", 10) == (1, 3)


def test_locate_accepts_a_character_stream() -> None:
    stream = CharacterStream("x\ny")
    stream.next()
    assert locate(stream, 2) == (2, 1)
    assert stream.position == 1


def test_source_line() -> None:
    text = "first\nsecond\r\nthird"
    assert source_line(text, 0) == "first"
    assert source_line(text, 8) == "second"
    assert source_line(text, len(text)) == "third"


def test_unterminated_string_verbose() -> None:
    with pytest.raises(OwlError) as excinfo:
        tokenize('"abc')
    assert render('"abc', excinfo.value) == "\n".join(
        [
            '"abc',
            "^^^^",
            "error[UnterminatedString]: Unterminated string "
            "(line 1, column 1, chars 0..4)",
        ]
    )


def test_terse_style() -> None:
    source = "let x = 1;\nlet y = @;"
    err = error_for(source)
    assert render(source, err, DiagnosticStyle.TERSE) == "\n".join(
        ["let y = @;", "        ^", "2:9: Unexpected character '@'"]
    )


def test_parse_error_on_second_line() -> None:
    source = "let a = 1;\nlet b;\n"
    err = error_for(source)
    assert err.kind is ErrorKind.EXPECTED_EXPRESSION
    lines = render(source, err).splitlines()
    assert lines[0] == "let b;"
    assert lines[1] == "     ^"
    assert lines[2].startswith("error[ExpectedExpression]: ")
    assert lines[2].endswith("(line 2, column 6, chars 16..17)")


def test_empty_span_still_gets_a_caret() -> None:
    err = ParseError(ErrorKind.EXPECTED_SEMICOLON, Span(3, 3), "Expected ';'")
    assert render("abc", err, DiagnosticStyle.TERSE).splitlines() == [
        "abc",
        "   ^",
        "1:4: Expected ';'",
    ]


def test_underline_stops_at_end_of_line() -> None:
    err = ParseError(ErrorKind.EXPECTED_CLOSE_BRACE, Span(2, 9), "Expected '}'")
    assert render("{ a\n}", err).splitlines()[1] == "  ^"


def test_tabs_are_kept_in_the_padding() -> None:
    source = "\tx @"
    err = error_for(source)
    assert render(source, err).splitlines()[1] == "\t  ^"


def test_report_prints_and_exits() -> None:
    source = "let x = 1"
    err = error_for(source)
    out = io.StringIO()
    with pytest.raises(SystemExit) as excinfo:
        report(source, err, DiagnosticStyle.TERSE, file=out)
    assert excinfo.value.code == EXIT_STATUS == 1
    assert out.getvalue() == "let x = 1\n        ^\n1:9: Expected ';' after statement\n"


def test_report_defaults_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    err = error_for("(")
    with pytest.raises(SystemExit):
        report("(", err)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error[ExpectedExpression]" in captured.err
