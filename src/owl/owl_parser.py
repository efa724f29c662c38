"""
OWL Language Parser

Parses OWL tokens into statement and expression trees (see ``owl_ast``).

The token sequence is materialized up front by ``TokenStream`` so the parser
can look one token ahead and step back again. Parsing is recursive descent
with one function per precedence level.

Expression precedence (lowest to highest)
-----------------------------------------
- logical         `&& ||`
- bitwise         `& | ^`
- equality        `== !=`
- comparison      `< <= > >=`
- shift           `<< >>`
- additive        `+ -`
- multiplicative  `* / %`
- power           `**` (right-associative)
- unary           prefix `! -`
- grouping        `( expr )`
- block           `{ statement* }`
- call            `path(arg, ...)`
- path            `a.b.c`
- primary         string, signed, unsigned and float literals

All binary levels other than power are left-associative. The power level
is an addition to the base ten-level OWL grammar, where `a ** b` has no
meaning; here it binds tighter than `* / %` and looser than prefix operators.
Long operator chains count against the nesting limit the same way nested
groups do.

Statements
----------
- `function name(p: Type, ...) -> Type body`
- `class Name { member* }` (members: function and variable declarations)
- `import a.b, c.{d, e};`
- `let name: Type = value;`
- `target op= value;` and bare expression statements

Every statement ends with `;` unless it ends in a brace-delimited body
(function with a block body, class, bare block). The last statement inside a
block or class body may leave the `;` out.

Entry Points
------------
- `parse(source)`: Parse a whole program into a list of statements.
- `Parser.parse_statement()`: Parse the next statement, or return None when
  the tokens are exhausted.
- `Parser.parse_expression()`: Parse one expression, or return None when the
  current token cannot start one.

Raises
------
ParseError
    On the first grammar violation, carrying the error kind and the span of
    the offending token.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from owl.owl_ast import (
    Assign,
    Binary,
    Block,
    ClassDecl,
    Expression,
    ExpressionStatement,
    FloatLiteral,
    FunctionCall,
    FunctionDecl,
    Import,
    Parameter,
    Path,
    SignedLiteral,
    Statement,
    StringLiteral,
    Unary,
    UnsignedLiteral,
    VariableDecl,
)
from owl.owl_config import DEFAULT_MAX_DEPTH
from owl.owl_constants import (
    ADDITIVE_OPS,
    ASSIGNMENT_OPS,
    BITWISE_OPS,
    COMPARISON_OPS,
    EQUALITY_OPS,
    LITERAL_TYPES,
    LOGICAL_OPS,
    MULTIPLICATIVE_OPS,
    OPERATOR_SYMBOLS,
    POWER_OPS,
    SHIFT_OPS,
    UNARY_OPS,
)
from owl.owl_errors import ErrorKind, ParseError
from owl.owl_lexer import CharacterStream, Lexer
from owl.owl_tokens import Keyword, Span, Token, TokenType

logger = logging.getLogger(__name__)


class TokenStream:
    """
    Indexable token sequence with single-step rewind.

    Attributes
    ----------
    tokens : list[Token]
        Every token of the input, drained from the lexer before parsing starts.
    position : int
        Index of the next token to be consumed.
    source : CharacterStream
        Independent copy of the source text, used only for diagnostics.
    """

    def __init__(self, tokens: list[Token], source: CharacterStream) -> None:
        self.tokens = tokens
        self.position = 0
        self.source = source

    @classmethod
    def from_lexer(cls, lexer: Lexer) -> TokenStream:
        source = lexer.stream.clone()
        tokens = list(lexer)
        logger.debug("materialized %d tokens", len(tokens))
        return cls(tokens, source)

    @classmethod
    def from_source(cls, source: str) -> TokenStream:
        return cls.from_lexer(Lexer(CharacterStream(source)))

    def current(self) -> Token | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def advance(self) -> Token | None:
        """Consumes and returns the current token, or None at end."""
        tok = self.current()
        if tok is not None:
            self.position += 1
        return tok

    def peek(self, *types: TokenType) -> bool:
        """Tests the current token's type without consuming it."""
        tok = self.current()
        return tok is not None and tok.type in types

    def peek_keyword(self, keyword: Keyword) -> bool:
        tok = self.current()
        return tok is not None and tok.is_keyword(keyword)

    def rewind(self) -> None:
        """Steps back exactly one token."""
        if self.position == 0:
            raise IndexError("Cannot rewind past the first token")
        self.position -= 1

    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def error_span(self) -> Span:
        """Span to blame for an error at the current position."""
        tok = self.current()
        if tok is not None:
            return tok.span
        if self.tokens:
            return self.tokens[-1].span
        end = len(self.source.source)
        return Span(end, end)

    def span_since(self, index: int) -> Span:
        """Span covering the tokens consumed from ``index`` up to now."""
        if index >= self.position:
            return self.error_span()
        return self.tokens[index].span.to(self.tokens[self.position - 1].span)


class Parser:
    """
    OWL Parser Class

    Turns a ``TokenStream`` into statements. The parser is restartable at
    statement granularity: each ``parse_statement()`` call returns the next
    top-level statement, which lets an interactive host drive it one entry at
    a time.

    Attributes
    ----------
    tokens : TokenStream
        The token cursor being parsed.
    max_depth : int
        Bound on nested groups, blocks, class bodies, calls, unary, power
        and binary operator chains.
    depth : int
        Current nesting depth.

    Methods
    -------
    parse() -> list[Statement]
        Parse every remaining statement.
    parse_statement() -> Statement | None
        Parse the next top-level statement.
    parse_expression() -> Expression | None
        Parse one expression at the lowest precedence level.

    Raises
    ------
    ParseError
        When an invalid construct or malformed syntax is encountered during parsing.
    """

    def __init__(
        self, tokens: TokenStream, max_depth: int = DEFAULT_MAX_DEPTH
    ) -> None:
        self.tokens = tokens
        self.max_depth = max_depth
        self.depth = 0

    @classmethod
    def from_source(cls, source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Parser:
        return cls(TokenStream.from_source(source), max_depth=max_depth)

    @property
    def source(self) -> CharacterStream:
        return self.tokens.source

    # Helpers

    def error(
        self, kind: ErrorKind, message: str, span: Span | None = None
    ) -> ParseError:
        if span is None:
            span = self.tokens.error_span()
        return ParseError(kind, span, message)

    def expect(self, type_: TokenType, kind: ErrorKind, message: str) -> Token:
        if not self.tokens.peek(type_):
            raise self.error(kind, message)
        tok = self.tokens.advance()
        assert tok is not None  # for mypy
        return tok

    def expect_identifier(self, message: str) -> str:
        tok = self.expect(TokenType.IDENT, ErrorKind.EXPECTED_IDENTIFIER, message)
        return str(tok.value)

    @contextmanager
    def nested(self) -> Iterator[None]:
        if self.depth >= self.max_depth:
            raise self.error(
                ErrorKind.NESTING_TOO_DEEP,
                f"Expression nesting exceeds the limit of {self.max_depth}",
            )
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    # Statements

    def parse(self) -> list[Statement]:
        """Parse every remaining statement and return them in order."""
        statements: list[Statement] = []
        while (stmt := self.parse_statement()) is not None:
            statements.append(stmt)
        return statements

    def parse_statement(self) -> Statement | None:
        """Parse the next top-level statement; None once the tokens are exhausted."""
        if self.tokens.at_end():
            return None
        stmt = self._statement(in_block=False)
        logger.debug("parsed %s", type(stmt).__name__)
        return stmt

    def _statement(self, in_block: bool) -> Statement:
        if self.tokens.peek_keyword(Keyword.FUNCTION):
            stmt: Statement = self.parse_function()
        elif self.tokens.peek_keyword(Keyword.CLASS):
            stmt = self.parse_class()
        elif self.tokens.peek_keyword(Keyword.IMPORT):
            stmt = self.parse_import()
        elif self.tokens.peek_keyword(Keyword.LET):
            stmt = self.parse_variable()
        else:
            stmt = self.parse_expression_statement()
        self._expect_terminator(stmt, in_block)
        return stmt

    def _expect_terminator(self, stmt: Statement, in_block: bool) -> None:
        if self.tokens.peek(TokenType.SEMICOLON):
            self.tokens.advance()
            return
        if _ends_with_brace(stmt):
            return
        if in_block and self.tokens.peek(TokenType.RBRACE):
            return
        raise self.error(ErrorKind.EXPECTED_SEMICOLON, "Expected ';' after statement")

    def parse_function(self) -> FunctionDecl:
        """Parse `function name(p: Type, ...) -> Type body`."""
        self.tokens.advance()
        name = self.expect_identifier("Expected function name")
        self.expect(
            TokenType.LPAREN,
            ErrorKind.EXPECTED_OPEN_PAREN,
            f"Expected '(' after function name '{name}'",
        )

        params: list[Parameter] = []
        while not self.tokens.peek(TokenType.RPAREN):
            param_name = self.expect_identifier("Expected parameter name")
            self.expect(
                TokenType.COLON,
                ErrorKind.EXPECTED_COLON,
                f"Expected ':' after parameter '{param_name}'",
            )
            params.append(Parameter(param_name, self.parse_type()))

            if self.tokens.peek(TokenType.COMMA):
                self.tokens.advance()
            elif self.tokens.at_end():
                raise self.error(
                    ErrorKind.EXPECTED_CLOSE_PAREN,
                    "Expected ')' to close parameter list",
                )
            elif not self.tokens.peek(TokenType.RPAREN):
                raise self.error(
                    ErrorKind.EXPECTED_COMMA, "Expected ',' between parameters"
                )
        self.tokens.advance()

        return_type: Expression | None = None
        if self.tokens.peek(TokenType.ARROW):
            self.tokens.advance()
            return_type = self.parse_type()

        # A block body ends the declaration; `{ ... } - x` is not a body.
        if self.tokens.peek(TokenType.LBRACE):
            body = self.parse_block()
        else:
            body = self.parse_expression()
        if body is None:
            raise self.error(
                ErrorKind.EXPECTED_EXPRESSION, f"Expected body for function '{name}'"
            )

        return FunctionDecl(name, return_type, tuple(params), body)

    def parse_class(self) -> ClassDecl:
        """Parse `class Name { member* }` of function and variable declarations."""
        self.tokens.advance()
        name = self.expect_identifier("Expected class name")
        self.expect(
            TokenType.LBRACE,
            ErrorKind.EXPECTED_OPEN_BRACE,
            f"Expected '{{' to open body of class '{name}'",
        )

        members: list[FunctionDecl | VariableDecl] = []
        while not self.tokens.peek(TokenType.RBRACE):
            if self.tokens.at_end():
                raise self.error(
                    ErrorKind.EXPECTED_CLOSE_BRACE,
                    f"Expected '}}' to close class '{name}'",
                )
            start = self.tokens.position
            with self.nested():
                member = self._statement(in_block=True)
            if not isinstance(member, (FunctionDecl, VariableDecl)):
                raise self.error(
                    ErrorKind.INVALID_CLASS_MEMBER,
                    "Class members must be function or variable declarations, "
                    f"got {type(member).__name__}",
                    span=self.tokens.span_since(start),
                )
            members.append(member)
        self.tokens.advance()

        return ClassDecl(name, tuple(members))

    def parse_import(self) -> Import:
        """Parse `import a.b, c.{d, e}` into one Path per imported name."""
        self.tokens.advance()
        paths: list[Path] = []
        while self.tokens.peek(TokenType.IDENT):
            segments, trailing_dot = self._path_segments()
            if trailing_dot:
                paths.extend(self._import_group(segments))
            else:
                paths.append(Path(segments))

            if not self.tokens.peek(TokenType.COMMA):
                break
            self.tokens.advance()

        if not paths:
            raise self.error(
                ErrorKind.EXPECTED_EXPRESSION, "Expected path after 'import'"
            )
        if not self.tokens.peek(TokenType.SEMICOLON):
            raise self.error(ErrorKind.EXPECTED_SEMICOLON, "Expected ';' after import")
        return Import(tuple(paths))

    def _import_group(self, prefix: tuple[str, ...]) -> list[Path]:
        """Expand `prefix.{a, b.c}` into `prefix.a`, `prefix.b.c`."""
        self.expect(
            TokenType.LBRACE,
            ErrorKind.EXPECTED_IDENTIFIER,
            "Expected identifier or '{' after '.'",
        )
        paths: list[Path] = []
        while not self.tokens.peek(TokenType.RBRACE):
            if self.tokens.at_end():
                raise self.error(
                    ErrorKind.EXPECTED_CLOSE_BRACE, "Expected '}' to close import group"
                )
            if not self.tokens.peek(TokenType.IDENT):
                raise self.error(
                    ErrorKind.EXPECTED_PATH, "Expected path inside import group"
                )
            paths.append(Path(prefix + self._path().segments))

            if self.tokens.peek(TokenType.COMMA):
                self.tokens.advance()
            elif not self.tokens.peek(TokenType.RBRACE) and not self.tokens.at_end():
                raise self.error(
                    ErrorKind.EXPECTED_COMMA, "Expected ',' between imported names"
                )
        if not paths:
            raise self.error(ErrorKind.EXPECTED_PATH, "Import group cannot be empty")
        self.tokens.advance()
        return paths

    def parse_variable(self) -> VariableDecl:
        """Parse `let name: Type = value`; the type or the value may be omitted."""
        self.tokens.advance()
        name = self.expect_identifier("Expected variable name after 'let'")

        type_: Expression | None = None
        if self.tokens.peek(TokenType.COLON):
            self.tokens.advance()
            type_ = self.parse_type()

        value: Expression | None = None
        if self.tokens.peek(TokenType.ASSIGN):
            self.tokens.advance()
            value = self.parse_expression()
            if value is None:
                raise self.error(
                    ErrorKind.EXPECTED_EXPRESSION, f"Expected initializer for '{name}'"
                )

        if type_ is None and value is None:
            raise self.error(
                ErrorKind.EXPECTED_EXPRESSION,
                f"Variable '{name}' needs a type annotation or an initializer",
            )
        return VariableDecl(name, type_, value)

    def parse_expression_statement(self) -> Assign | ExpressionStatement:
        if self.tokens.peek(TokenType.LBRACE):
            block = self.parse_block()
            assert block is not None  # for mypy
            return ExpressionStatement(block)

        expr = self.parse_expression()
        if expr is None:
            raise self.error(ErrorKind.EXPECTED_EXPRESSION, "Expected expression")

        tok = self.tokens.current()
        if tok is not None and tok.type in ASSIGNMENT_OPS:
            self.tokens.advance()
            value = self.parse_expression()
            if value is None:
                raise self.error(
                    ErrorKind.EXPECTED_EXPRESSION,
                    f"Expected expression after '{_symbol(tok)}'",
                )
            return Assign(expr, tok.type, value)

        return ExpressionStatement(expr)

    def parse_type(self) -> Path:
        if not self.tokens.peek(TokenType.IDENT):
            raise self.error(ErrorKind.EXPECTED_PATH, "Expected type")
        return self._path()

    # Expressions

    def parse_expression(self) -> Expression | None:
        """Parse one expression; None if the current token cannot start one."""
        return self.parse_logical()

    def _binary(
        self,
        operand: Callable[[], Expression | None],
        operators: frozenset[TokenType],
    ) -> Expression | None:
        left = operand()
        if left is None:
            return None
        # Each wrap deepens the left spine, so it counts against max_depth.
        chained = 0
        try:
            while (tok := self.tokens.current()) is not None and tok.type in operators:
                self.tokens.advance()
                if self.depth >= self.max_depth:
                    raise self.error(
                        ErrorKind.NESTING_TOO_DEEP,
                        f"Operator chain exceeds the nesting limit of {self.max_depth}",
                    )
                self.depth += 1
                chained += 1
                right = operand()
                if right is None:
                    raise self.error(
                        ErrorKind.EXPECTED_EXPRESSION,
                        f"Expected expression after '{_symbol(tok)}'",
                    )
                left = Binary(left, tok.type, right)
        finally:
            self.depth -= chained
        return left

    def parse_logical(self) -> Expression | None:
        return self._binary(self.parse_bitwise, LOGICAL_OPS)

    def parse_bitwise(self) -> Expression | None:
        return self._binary(self.parse_equality, BITWISE_OPS)

    def parse_equality(self) -> Expression | None:
        return self._binary(self.parse_comparison, EQUALITY_OPS)

    def parse_comparison(self) -> Expression | None:
        return self._binary(self.parse_shift, COMPARISON_OPS)

    def parse_shift(self) -> Expression | None:
        return self._binary(self.parse_additive, SHIFT_OPS)

    def parse_additive(self) -> Expression | None:
        return self._binary(self.parse_multiplicative, ADDITIVE_OPS)

    def parse_multiplicative(self) -> Expression | None:
        return self._binary(self.parse_power, MULTIPLICATIVE_OPS)

    def parse_power(self) -> Expression | None:
        left = self.parse_unary()
        if left is None or not self.tokens.peek(*POWER_OPS):
            return left
        tok = self.tokens.advance()
        assert tok is not None  # for mypy
        with self.nested():
            right = self.parse_power()
        if right is None:
            raise self.error(
                ErrorKind.EXPECTED_EXPRESSION, "Expected expression after '**'"
            )
        return Binary(left, tok.type, right)

    def parse_unary(self) -> Expression | None:
        tok = self.tokens.current()
        if tok is None or tok.type not in UNARY_OPS:
            return self.parse_grouping()
        self.tokens.advance()
        with self.nested():
            operand = self.parse_unary()
        if operand is None:
            raise self.error(
                ErrorKind.EXPECTED_EXPRESSION,
                f"Expected operand after unary '{_symbol(tok)}'",
            )
        return Unary(tok.type, operand)

    def parse_grouping(self) -> Expression | None:
        if not self.tokens.peek(TokenType.LPAREN):
            return self.parse_block()
        self.tokens.advance()
        with self.nested():
            expr = self.parse_expression()
        if expr is None:
            raise self.error(
                ErrorKind.EXPECTED_EXPRESSION, "Expected expression inside parentheses"
            )
        self.expect(TokenType.RPAREN, ErrorKind.EXPECTED_CLOSE_PAREN, "Expected ')'")
        return expr

    def parse_block(self) -> Expression | None:
        if not self.tokens.peek(TokenType.LBRACE):
            return self.parse_call()
        self.tokens.advance()
        statements: list[Statement] = []
        with self.nested():
            while not self.tokens.peek(TokenType.RBRACE):
                if self.tokens.at_end():
                    raise self.error(
                        ErrorKind.EXPECTED_CLOSE_BRACE, "Expected '}' to close block"
                    )
                statements.append(self._statement(in_block=True))
        self.tokens.advance()
        return Block(tuple(statements))

    def parse_call(self) -> Expression | None:
        expr = self.parse_path()
        if not isinstance(expr, Path) or not self.tokens.peek(TokenType.LPAREN):
            return expr
        self.tokens.advance()

        args: list[Expression] = []
        with self.nested():
            while not self.tokens.peek(TokenType.RPAREN):
                arg = self.parse_expression()
                if arg is None:
                    break
                args.append(arg)
                if self.tokens.peek(TokenType.COMMA):
                    self.tokens.advance()
                elif not (self.tokens.peek(TokenType.RPAREN) or self.tokens.at_end()):
                    raise self.error(
                        ErrorKind.EXPECTED_COMMA, "Expected ',' between arguments"
                    )
        self.expect(
            TokenType.RPAREN,
            ErrorKind.EXPECTED_CLOSE_PAREN,
            f"Expected closing ')' for call to '{expr}'",
        )
        return FunctionCall(expr.segments, tuple(args))

    def parse_path(self) -> Expression | None:
        """Parse `ident(.ident)*`, or fall through to a literal."""
        if not self.tokens.peek(TokenType.IDENT):
            return self.parse_primary()
        return self._path()

    def _path(self) -> Path:
        segments, trailing_dot = self._path_segments()
        if trailing_dot:
            raise self.error(
                ErrorKind.EXPECTED_IDENTIFIER, "Expected identifier after '.'"
            )
        return Path(segments)

    def _path_segments(self) -> tuple[tuple[str, ...], bool]:
        """Consume a dotted path starting at an identifier.

        Returns the segments and whether the path ended on a dangling `.`,
        which only import groups (`a.b.{c, d}`) accept.
        """
        first = self.tokens.advance()
        assert first is not None  # for mypy
        segments = [str(first.value)]
        had_dot = False
        while (tok := self.tokens.advance()) is not None:
            if tok.type is TokenType.DOT:
                if had_dot:
                    raise self.error(
                        ErrorKind.UNEXPECTED_DOT, "Unexpected '.'", span=tok.span
                    )
                had_dot = True
            elif tok.type is TokenType.IDENT and had_dot:
                segments.append(str(tok.value))
                had_dot = False
            else:
                self.tokens.rewind()
                break
        return tuple(segments), had_dot

    def parse_primary(self) -> Expression | None:
        tok = self.tokens.current()
        if tok is None or tok.type not in LITERAL_TYPES:
            return None
        self.tokens.advance()
        if tok.type is TokenType.STRING_LITERAL:
            return StringLiteral(tok.value)
        if tok.type is TokenType.SIGNED_LITERAL:
            return SignedLiteral(tok.value)
        if tok.type is TokenType.UNSIGNED_LITERAL:
            return UnsignedLiteral(tok.value)
        return FloatLiteral(tok.value)


def _ends_with_brace(stmt: Statement) -> bool:
    if isinstance(stmt, FunctionDecl):
        return isinstance(stmt.body, Block)
    if isinstance(stmt, ClassDecl):
        return True
    if isinstance(stmt, ExpressionStatement):
        return isinstance(stmt.expression, Block)
    return False


def _symbol(tok: Token) -> str:
    return OPERATOR_SYMBOLS.get(tok.type, tok.type.name)


def parse(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Statement]:
    """Convenience function to parse a whole program."""
    return Parser.from_source(source, max_depth=max_depth).parse()


__all__ = ["Parser", "TokenStream", "parse"]
