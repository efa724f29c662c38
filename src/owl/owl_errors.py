"""
Error types raised by the OWL lexer and parser.

Classes:
    ErrorKind: Closed enumeration of lexical and syntactic failure kinds.
    OwlError: Base error carrying kind, span and message.
    LexError: Raised by the lexer.
    ParseError: Raised by the parser.

``OwlError`` subclasses the builtin ``SyntaxError`` so callers that already
catch ``SyntaxError`` keep working. Errors carry offsets only; turning a span
into a line/column and a source excerpt is ``owl_diagnostics``' job.
"""

from enum import Enum

from owl.owl_tokens import Span


class ErrorKind(Enum):
    # Lexical
    UNTERMINATED_STRING = "UnterminatedString"
    INVALID_ESCAPE_SEQUENCE = "InvalidEscapeSequence"
    INVALID_CHARACTER_LITERAL = "InvalidCharacterLiteral"
    UNEXPECTED_END_OF_INPUT = "UnexpectedEndOfInput"
    UNEXPECTED_CHARACTER = "UnexpectedCharacter"
    UNTERMINATED_COMMENT = "UnterminatedComment"
    INTEGER_OVERFLOW = "IntegerOverflow"

    # Syntactic
    EXPECTED_IDENTIFIER = "ExpectedIdentifier"
    EXPECTED_OPEN_PAREN = "ExpectedOpenParen"
    EXPECTED_CLOSE_PAREN = "ExpectedCloseParen"
    EXPECTED_OPEN_BRACE = "ExpectedOpenBrace"
    EXPECTED_CLOSE_BRACE = "ExpectedCloseBrace"
    EXPECTED_COLON = "ExpectedColon"
    EXPECTED_COMMA = "ExpectedComma"
    EXPECTED_SEMICOLON = "ExpectedSemicolon"
    EXPECTED_EXPRESSION = "ExpectedExpression"
    EXPECTED_PATH = "ExpectedPath"
    UNEXPECTED_DOT = "UnexpectedDot"
    INVALID_CLASS_MEMBER = "InvalidClassMember"
    NESTING_TOO_DEEP = "NestingTooDeep"

    def __str__(self) -> str:
        return self.value


class OwlError(SyntaxError):
    """A fatal front-end error anchored to a span of the source.

    Attributes:
        kind (ErrorKind): What went wrong.
        span (Span): Where it went wrong.
        message (str): Human-readable description.
    """

    def __init__(self, kind: ErrorKind, span: Span, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.span = span
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind}, {self.span!r}, {self.message!r})"


class LexError(OwlError):
    """Raised when the lexer encounters invalid input."""


class ParseError(OwlError):
    """Raised when the parser encounters a syntax error."""


__all__ = ["ErrorKind", "LexError", "OwlError", "ParseError"]
