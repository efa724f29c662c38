import json
from collections.abc import Iterable

import pytest

from owl import owl_repl
from owl.owl_config import DiagnosticStyle, Settings


def feed(monkeypatch: pytest.MonkeyPatch, lines: Iterable[str]) -> list[str]:
    """Replace input() with a scripted session; returns the prompts shown."""
    pending = iter(lines)
    prompts: list[str] = []

    def fake_input(prompt: str = "") -> str:
        prompts.append(prompt)
        try:
            return next(pending)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)
    return prompts


def test_prints_statements_until_exit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["let x = 1", "exit()", "let never = 2"])
    owl_repl.start_repl()
    out = capsys.readouterr().out
    assert "VariableDecl(name='x', type=None, value=UnsignedLiteral(value=1))" in out
    assert "never" not in out
    assert out.rstrip().endswith("Exiting OWL REPL.")


def test_multiline_entry_waits_for_closing_brace(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ["function f() {", "  1", "}", "exit()"])
    owl_repl.start_repl()
    assert prompts == [">>> ", "... ", "... ", ">>> "]
    assert "FunctionDecl(name='f'" in capsys.readouterr().out


def test_errors_are_rendered_and_the_loop_continues(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["let x;", "1 + 2", "exit()"])
    owl_repl.start_repl()
    out = capsys.readouterr().out
    assert "[error] >>>" in out
    assert "error[ExpectedExpression]" in out
    assert "ExpressionStatement(expression=Binary(" in out


def test_terse_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["(1"])
    owl_repl.start_repl(settings=Settings(diagnostic_style=DiagnosticStyle.TERSE))
    out = capsys.readouterr().out
    assert "1:3: Expected ')'" in out


def test_verbose_prints_json(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["import a.{b, c}", "exit()"])
    owl_repl.start_repl(verbose=True)
    out = capsys.readouterr().out
    start = out.index("{")
    end = out.rindex("}") + 1
    assert json.loads(out[start:end]) == {
        "kind": "Import",
        "paths": [
            {"kind": "Path", "segments": ["a", "b"]},
            {"kind": "Path", "segments": ["a", "c"]},
        ],
    }


def test_blank_entries_are_skipped(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["", "   ", "// just a comment", "exit()"])
    owl_repl.start_repl()
    out = capsys.readouterr().out
    assert "[error]" not in out
    assert "Exiting OWL REPL." in out


def test_end_of_input_exits(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, [])
    owl_repl.start_repl()
    assert "Exiting OWL REPL." in capsys.readouterr().out


def test_keyboard_interrupt_exits(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def interrupted(prompt: str = "") -> str:
        raise KeyboardInterrupt

    monkeypatch.setattr("builtins.input", interrupted)
    owl_repl.start_repl()
    assert "Exiting OWL REPL." in capsys.readouterr().out


def test_exit_with_arguments_is_an_ordinary_call(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["exit(1)"])
    owl_repl.start_repl()
    out = capsys.readouterr().out
    assert "FunctionCall(path=('exit',), arguments=(UnsignedLiteral(value=1),))" in out


def test_complete_entry() -> None:
    assert owl_repl.complete_entry("1 + 2") == "1 + 2;"
    assert owl_repl.complete_entry("let x = 1;") == "let x = 1;"
    assert owl_repl.complete_entry("{ 1 }") == "{ 1 }"
    assert owl_repl.complete_entry("let x = 1 // note") == "let x = 1; // note"
    assert owl_repl.complete_entry("f() /* c */") == "f(); /* c */"
    assert owl_repl.complete_entry("/* c */") == "/* c */"
    assert owl_repl.complete_entry('"open') == '"open'


def test_brace_inside_string_does_not_continue_entry(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ['let s = "{"', "exit()"])
    owl_repl.start_repl()
    assert prompts == [">>> ", ">>> "]
    out = capsys.readouterr().out
    assert "VariableDecl(name='s', type=None, value=StringLiteral(value='{'))" in out
    assert out.rstrip().endswith("Exiting OWL REPL.")


def test_braces_in_comments_are_ignored(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ["1 // {", "2 /* } */", "exit()"])
    owl_repl.start_repl()
    assert prompts == [">>> ", ">>> ", ">>> "]
    assert "[error]" not in capsys.readouterr().out


def test_open_block_comment_continues_entry(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ["/* open", "still open */ 1", "exit()"])
    owl_repl.start_repl()
    assert prompts == [">>> ", "... ", ">>> "]
    out = capsys.readouterr().out
    assert "ExpressionStatement(expression=UnsignedLiteral(value=1))" in out


def test_open_string_continues_entry(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ['let s = "a', 'b"', "exit()"])
    owl_repl.start_repl()
    assert prompts == [">>> ", "... ", ">>> "]
    assert "StringLiteral(value='a\\nb')" in capsys.readouterr().out


def test_trailing_line_comment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["let x = 1 // note", "/* c */", "exit()"])
    owl_repl.start_repl()
    out = capsys.readouterr().out
    assert "[error]" not in out
    assert "VariableDecl(name='x', type=None, value=UnsignedLiteral(value=1))" in out
