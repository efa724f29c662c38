"""
Token model for the OWL scripting language.

Classes:
    TokenType: Closed enumeration of lexical categories.
    Keyword: Closed enumeration of reserved words.
    Span: Half-open range of character offsets into the original source.
    Token: An immutable (type, value, span) triple produced by the lexer.

A token's ``value`` carries its payload: the identifier text, the ``Keyword``
member, or the decoded literal value. Operators and punctuation carry ``None``.

Example:
    >>> Token(TokenType.SIGNED_LITERAL, -5, Span(0, 2))
    Token(SIGNED_LITERAL, -5, 0..2)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class TokenType(Enum):
    # Identifiers and keywords
    IDENT = auto()
    KEYWORD = auto()

    # Literals
    SIGNED_LITERAL = auto()
    UNSIGNED_LITERAL = auto()
    FLOAT_LITERAL = auto()
    STRING_LITERAL = auto()
    CHAR_LITERAL = auto()

    # Brackets
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACK = auto()
    RBRACK = auto()

    # Arithmetic
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    POW = auto()

    # Bitwise
    BIT_AND = auto()
    BIT_OR = auto()
    BIT_XOR = auto()
    SHL = auto()
    SHR = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()

    # Comparison
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()

    # Assignment
    ASSIGN = auto()
    ADD_ASSIGN = auto()
    SUB_ASSIGN = auto()
    MUL_ASSIGN = auto()
    DIV_ASSIGN = auto()
    MOD_ASSIGN = auto()
    POW_ASSIGN = auto()
    BIT_AND_ASSIGN = auto()
    BIT_OR_ASSIGN = auto()
    BIT_XOR_ASSIGN = auto()
    SHL_ASSIGN = auto()
    SHR_ASSIGN = auto()

    # Punctuation
    ARROW = auto()
    COMMA = auto()
    SEMICOLON = auto()
    COLON = auto()
    DOT = auto()


class Keyword(Enum):
    BREAK = "break"
    CONTINUE = "continue"
    ELSE = "else"
    FALSE = "false"
    LET = "let"
    FUNCTION = "function"
    FOR = "for"
    IF = "if"
    LOOP = "loop"
    MATCH = "match"
    RETURN = "return"
    TRUE = "true"
    WHILE = "while"
    CLASS = "class"
    IMPORT = "import"


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` range of character offsets."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Span end {self.end} precedes start {self.start}")

    def __len__(self) -> int:
        return self.end - self.start

    def __repr__(self) -> str:
        return f"{self.start}..{self.end}"

    def to(self, other: "Span") -> "Span":
        """Returns the span covering this span through ``other``."""
        return Span(self.start, max(self.end, other.end))


@dataclass(frozen=True)
class Token:
    """Represents a single lexical token.

    Equality and hashing use ``type`` and ``value`` only, so tests and callers
    can compare tokens without restating their source location.

    Attributes:
        type (TokenType): The lexical category.
        value (Any): The payload, or None for operators and punctuation.
        span (Span): Where the token was read from.
    """

    type: TokenType
    value: Any = None
    span: Span = field(default=Span(0, 0), compare=False)

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.type.name}, {self.span!r})"
        return f"Token({self.type.name}, {self.value!r}, {self.span!r})"

    def is_keyword(self, keyword: Keyword) -> bool:
        return self.type is TokenType.KEYWORD and self.value is keyword
