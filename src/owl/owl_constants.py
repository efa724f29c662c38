"""
Lookup tables shared by the OWL lexer, parser and AST.

Exports:
    KEYWORDS: Spelling to ``Keyword`` member.
    SIMPLE_TOKENS: Single characters that always form a token on their own.
    LOGICAL_OPS, BITWISE_OPS, EQUALITY_OPS, COMPARISON_OPS, SHIFT_OPS,
    ADDITIVE_OPS, MULTIPLICATIVE_OPS, POWER_OPS, UNARY_OPS:
        Operator token types per precedence level, lowest binding first.
    ASSIGNMENT_OPS: Operators that turn an expression statement into an assignment.
    LITERAL_TYPES: Token types accepted by the primary expression rule.
    OPERATOR_SYMBOLS: Token type to source spelling, used for display and JSON.
"""

from owl.owl_tokens import Keyword, TokenType

KEYWORDS: dict[str, Keyword] = {kw.value: kw for kw in Keyword}

SIMPLE_TOKENS: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACK,
    "]": TokenType.RBRACK,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
}

LOGICAL_OPS: frozenset[TokenType] = frozenset({TokenType.AND, TokenType.OR})

BITWISE_OPS: frozenset[TokenType] = frozenset(
    {TokenType.BIT_AND, TokenType.BIT_OR, TokenType.BIT_XOR}
)

EQUALITY_OPS: frozenset[TokenType] = frozenset({TokenType.EQ, TokenType.NE})

COMPARISON_OPS: frozenset[TokenType] = frozenset(
    {TokenType.LT, TokenType.LE, TokenType.GT, TokenType.GE}
)

SHIFT_OPS: frozenset[TokenType] = frozenset({TokenType.SHL, TokenType.SHR})

ADDITIVE_OPS: frozenset[TokenType] = frozenset({TokenType.ADD, TokenType.SUB})

MULTIPLICATIVE_OPS: frozenset[TokenType] = frozenset(
    {TokenType.MUL, TokenType.DIV, TokenType.MOD}
)

POWER_OPS: frozenset[TokenType] = frozenset({TokenType.POW})

UNARY_OPS: frozenset[TokenType] = frozenset({TokenType.NOT, TokenType.SUB})

ASSIGNMENT_OPS: frozenset[TokenType] = frozenset(
    {
        TokenType.ASSIGN,
        TokenType.ADD_ASSIGN,
        TokenType.SUB_ASSIGN,
        TokenType.MUL_ASSIGN,
        TokenType.DIV_ASSIGN,
        TokenType.MOD_ASSIGN,
        TokenType.POW_ASSIGN,
        TokenType.BIT_AND_ASSIGN,
        TokenType.BIT_OR_ASSIGN,
        TokenType.BIT_XOR_ASSIGN,
        TokenType.SHL_ASSIGN,
        TokenType.SHR_ASSIGN,
    }
)

LITERAL_TYPES: frozenset[TokenType] = frozenset(
    {
        TokenType.STRING_LITERAL,
        TokenType.SIGNED_LITERAL,
        TokenType.UNSIGNED_LITERAL,
        TokenType.FLOAT_LITERAL,
    }
)

OPERATOR_SYMBOLS: dict[TokenType, str] = {
    TokenType.ADD: "+",
    TokenType.SUB: "-",
    TokenType.MUL: "*",
    TokenType.DIV: "/",
    TokenType.MOD: "%",
    TokenType.POW: "**",
    TokenType.BIT_AND: "&",
    TokenType.BIT_OR: "|",
    TokenType.BIT_XOR: "^",
    TokenType.SHL: "<<",
    TokenType.SHR: ">>",
    TokenType.AND: "&&",
    TokenType.OR: "||",
    TokenType.NOT: "!",
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.LT: "<",
    TokenType.LE: "<=",
    TokenType.GT: ">",
    TokenType.GE: ">=",
    TokenType.ASSIGN: "=",
    TokenType.ADD_ASSIGN: "+=",
    TokenType.SUB_ASSIGN: "-=",
    TokenType.MUL_ASSIGN: "*=",
    TokenType.DIV_ASSIGN: "/=",
    TokenType.MOD_ASSIGN: "%=",
    TokenType.POW_ASSIGN: "**=",
    TokenType.BIT_AND_ASSIGN: "&=",
    TokenType.BIT_OR_ASSIGN: "|=",
    TokenType.BIT_XOR_ASSIGN: "^=",
    TokenType.SHL_ASSIGN: "<<=",
    TokenType.SHR_ASSIGN: ">>=",
    TokenType.ARROW: "->",
}

# Limits of the literal types the language targets (i64 / u64).
MAX_UNSIGNED = 2**64 - 1
MIN_SIGNED = -(2**63)

__all__ = [
    "ADDITIVE_OPS",
    "ASSIGNMENT_OPS",
    "BITWISE_OPS",
    "COMPARISON_OPS",
    "EQUALITY_OPS",
    "KEYWORDS",
    "LITERAL_TYPES",
    "LOGICAL_OPS",
    "MAX_UNSIGNED",
    "MIN_SIGNED",
    "MULTIPLICATIVE_OPS",
    "OPERATOR_SYMBOLS",
    "POWER_OPS",
    "SHIFT_OPS",
    "SIMPLE_TOKENS",
    "UNARY_OPS",
]
