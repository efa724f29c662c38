"""
Interactive read-parse-print loop for OWL.

Each entry is read line by line until its braces balance, parsed, and the
resulting statements are printed (as JSON in verbose mode). Braces are
counted on tokens, so braces inside strings and comments do not hold the
entry open, while an unclosed string or block comment does. Errors are
rendered against the entry and the loop carries on. Entering `exit()` or
closing the input ends the session.
"""

import json
import logging

from owl import owl_diagnostics
from owl.owl_ast import ExpressionStatement, FunctionCall, Statement
from owl.owl_config import Settings
from owl.owl_errors import ErrorKind, LexError, OwlError
from owl.owl_lexer import tokenize
from owl.owl_parser import Parser
from owl.owl_tokens import TokenType

logger = logging.getLogger(__name__)

EXIT_CALL = ExpressionStatement(FunctionCall(("exit",), ()))

# Lex errors that more input can still repair.
UNFINISHED = frozenset({ErrorKind.UNTERMINATED_STRING, ErrorKind.UNTERMINATED_COMMENT})


def needs_more(src: str) -> bool:
    """True while `src` has an unclosed `{`, string or block comment."""
    try:
        tokens = tokenize(src)
    except LexError as e:
        return e.kind in UNFINISHED
    brace_count = 0
    for tok in tokens:
        if tok.type is TokenType.LBRACE:
            brace_count += 1
        elif tok.type is TokenType.RBRACE:
            brace_count -= 1
    return brace_count > 0


def read_entry() -> str:
    """Read one entry, continuing with `... ` prompts while it is unfinished."""
    src_lines: list[str] = []
    while True:
        prompt = ">>> " if not src_lines else "... "
        src_lines.append(input(prompt))
        if not needs_more("\n".join(src_lines)):
            break
    return "\n".join(src_lines).strip()


def complete_entry(src: str) -> str:
    """
    Supply the `;` a one-off entry such as `1 + 2` leaves off.

    The `;` goes right after the last token, ahead of any trailing comment.
    Entries that fail to lex are returned as is for the parser to report.
    """
    try:
        tokens = tokenize(src)
    except LexError:
        return src
    if not tokens or tokens[-1].type in (TokenType.SEMICOLON, TokenType.RBRACE):
        return src
    end = tokens[-1].span.end
    return src[:end] + ";" + src[end:]


def print_statement(stmt: Statement, verbose: bool) -> None:
    if verbose:
        print(json.dumps(stmt.to_dict(), indent=2))
    else:
        print(repr(stmt))


def start_repl(verbose: bool = False, settings: Settings | None = None) -> None:
    if settings is None:
        settings = Settings()
    print("OWL REPL. Type 'exit()' to leave.")

    while True:
        try:
            src = read_entry()
            if not src:
                continue
            src = complete_entry(src)

            try:
                statements = Parser.from_source(
                    src, max_depth=settings.max_depth
                ).parse()
            except OwlError as e:
                logger.debug("entry rejected: %s", e.kind)
                print("[error] >>>")
                print(owl_diagnostics.render(src, e, settings.diagnostic_style))
                continue

            for stmt in statements:
                if stmt == EXIT_CALL:
                    print("Exiting OWL REPL.")
                    return
                print_statement(stmt, verbose)

        except (KeyboardInterrupt, EOFError):
            print("\nExiting OWL REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
