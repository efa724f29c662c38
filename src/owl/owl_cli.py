"""
OWL CLI Entrypoint.

This module provides the command-line interface for parsing OWL source code.
It prints the resulting syntax tree or a located diagnostic, and can start
the interactive REPL.

Features:
    - Read source from `.owl` files or inline strings.
    - Lex and parse the source into statements.
    - Print statements as reprs or as JSON, to the console or a file.
    - Render the first error against the source and exit with status 1.
    - Launch an interactive REPL.

Example usage:
    owl hello.owl
    owl -s "let x = 1 + 2;" --json
    owl program.owl --json -o program.json
    owl --repl --verbose

Functions:
    run_owl(source: str, is_string: bool = False, out: str | None = None,
            as_json: bool = False, settings: Settings | None = None) -> list[Statement]:
        Parses the source and writes the tree. Raises OwlError on bad input.

    main() -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import logging
import sys

from owl import owl_diagnostics
from owl.owl_ast import Statement
from owl.owl_config import (
    DiagnosticStyle,
    Settings,
    parse_log_level,
    parse_max_depth,
    setup_logging,
)
from owl.owl_errors import OwlError
from owl.owl_parser import Parser

logger = logging.getLogger(__name__)


def format_statements(statements: list[Statement], as_json: bool = False) -> str:
    if as_json:
        return json.dumps([stmt.to_dict() for stmt in statements], indent=2)
    return "\n".join(repr(stmt) for stmt in statements)


def run_owl(
    source: str,
    is_string: bool = False,
    out: str | None = None,
    as_json: bool = False,
    settings: Settings | None = None,
) -> list[Statement]:
    """
    Run the OWL front end: lex, parse, and write the resulting tree.

    Args:
        source (str): The OWL source code or path to a `.owl` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        out (str | None): Optional path to write the tree to. If None, prints to stdout.
        as_json (bool): If True, writes the tree as JSON instead of reprs.
        settings (Settings | None): Parser settings. Defaults to the environment.

    Returns:
        list[Statement]: The parsed statements.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.owl'.
        OwlError: If the source cannot be tokenized or parsed.
    """
    if not is_string and not source.endswith(".owl"):
        raise ValueError("Only .owl files are supported.")
    if settings is None:
        settings = Settings.from_env()

    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    statements = Parser.from_source(source, max_depth=settings.max_depth).parse()
    logger.debug("parsed %d statements", len(statements))

    text = format_statements(statements, as_json=as_json)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)
    return statements


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="owl")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print the tree as JSON"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    style = parser.add_mutually_exclusive_group()
    style.add_argument(
        "--terse",
        dest="style",
        action="store_const",
        const=DiagnosticStyle.TERSE,
        help="One-line `line:column: message` diagnostics",
    )
    style.add_argument(
        "--verbose",
        dest="style",
        action="store_const",
        const=DiagnosticStyle.VERBOSE,
        help="Full diagnostics; in the REPL, also print statements as JSON",
    )
    parser.add_argument(
        "--max-depth",
        type=parse_max_depth,
        help="Maximum expression nesting (default: $OWL_MAX_DEPTH or 32)",
    )
    parser.add_argument(
        "--log-level",
        type=parse_log_level,
        help="Logging level (default: $OWL_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing a source",
    )
    return parser


def main() -> None:
    """
    Entry point for the OWL CLI.

    Launches the REPL if no arguments are passed or `--repl` is given;
    otherwise parses the source and prints its tree. A parse failure is
    rendered against the source and ends the process with status 1.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from owl.owl_repl import start_repl

        settings = Settings.from_env()
        setup_logging(settings.log_level)
        start_repl(settings=settings)
        return

    args = build_arg_parser().parse_args()
    settings = Settings.from_env()
    if args.style is not None:
        settings.diagnostic_style = args.style
    if args.max_depth is not None:
        settings.max_depth = args.max_depth
    if args.log_level is not None:
        settings.log_level = args.log_level
    setup_logging(settings.log_level)

    if args.repl or args.source is None:
        from owl.owl_repl import start_repl

        start_repl(
            verbose=args.style is DiagnosticStyle.VERBOSE, settings=settings
        )
        return

    text = args.source
    if not args.string:
        if not text.endswith(".owl"):
            raise SystemExit("owl: only .owl files are supported")
        with open(text, encoding="utf-8") as f:
            text = f.read()

    try:
        run_owl(
            text,
            is_string=True,
            out=args.out,
            as_json=args.as_json,
            settings=settings,
        )
    except OwlError as e:
        owl_diagnostics.report(text, e, settings.diagnostic_style)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
