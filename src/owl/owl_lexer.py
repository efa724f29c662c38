"""
Lexical analyzer for the OWL scripting language.

This module converts raw source text into a finite stream of spanned tokens:

Classes:
    CharacterStream: Forward-only character cursor with one-character lookahead.
    Lexer: Pulls tokens from a CharacterStream one at a time.

Features:
    - Skips whitespace, `//` line comments and `/* ... */` block comments
    - Longest-match recognition of compound operators (`+=`, `**=`, `<<=`, `&&`, ...)
    - Folds a leading `-` into an immediately following number (`-5` is one token)
    - Recognizes:
        * Identifiers and keywords
        * Unsigned, signed and floating point numbers
        * Strings (with `\\n \\r \\t \\\\ \\"` and `\\uXXXX` escapes)
        * Character literals
        * Operators and punctuation

Raises:
    LexError: On unterminated strings or comments, bad escapes, malformed
    character literals, out-of-range integers and unexpected characters.

Example:
    >>> lexer = Lexer(CharacterStream("let x = -5;"))
    >>> [tok.type.name for tok in lexer]
    ['KEYWORD', 'IDENT', 'ASSIGN', 'SIGNED_LITERAL', 'SEMICOLON']

Exports:
    - CharacterStream
    - Lexer
    - Token
    - tokenize
"""

import logging
import string
from collections.abc import Callable, Iterator

from owl.owl_constants import KEYWORDS, MAX_UNSIGNED, MIN_SIGNED, SIMPLE_TOKENS
from owl.owl_errors import ErrorKind, LexError
from owl.owl_tokens import Span, Token, TokenType

logger = logging.getLogger(__name__)

ESCAPES: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
}


def is_ascii_digit(ch: str) -> bool:
    return ch != "" and "0" <= ch <= "9"


def is_hex_digit(ch: str) -> bool:
    return ch != "" and ch in string.hexdigits


class CharacterStream:
    """
    A forward-only cursor over source text.

    The stream never moves backwards. ``clone()`` hands out an independent
    stream over the same text, positioned at the start, which is how the
    diagnostics layer keeps an untouched copy of the source.

    Attributes:
        source (str): The input source string.
        position (int): Offset of the next character to be read.
    """

    def __init__(self, source: str, position: int = 0) -> None:
        self.source = source
        self.position = position

    def next(self) -> str:
        """Consumes and returns the next character, or "" at end of input."""
        if self.position >= len(self.source):
            return ""
        char = self.source[self.position]
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character ``offset`` places past the current position.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def peek_is(self, predicate: Callable[[str], bool]) -> bool:
        """Tests the next character without consuming it; False at end of input."""
        ch = self.peek()
        return ch != "" and predicate(ch)

    def match_char(self, expected: str) -> bool:
        """Consumes one character only if it equals ``expected``."""
        if self.peek() == expected:
            self.position += 1
            return True
        return False

    def match_string(self, expected: str) -> bool:
        """Consumes ``expected`` only if the input continues with all of it."""
        if self.source.startswith(expected, self.position):
            self.position += len(expected)
            return True
        return False

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)

    def clone(self) -> "CharacterStream":
        """Returns an independent stream over the same text, positioned at the start."""
        return CharacterStream(self.source)


class Lexer:
    """Lexical analyzer for the OWL language.

    The Lexer pulls characters from a CharacterStream and produces Token objects
    on demand. It is a finite, non-restartable iterator: once ``next_token()``
    has returned None it keeps returning None.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        tok = self.next_token()
        if tok is None:
            raise StopIteration
        return tok

    def next_token(self) -> Token | None:
        """Consumes and returns the next Token, or None once the input is exhausted.

        Raises:
            LexError: If a malformed token is encountered.
        """
        while True:
            start = self.stream.position
            ch = self.stream.next()
            if ch == "":
                return None
            if ch.isspace():
                continue
            if ch == "/":
                if self.stream.match_char("/"):
                    self._skip_line_comment()
                    continue
                if self.stream.match_char("*"):
                    self._skip_block_comment(start)
                    continue
                return self._compound(start, TokenType.DIV, TokenType.DIV_ASSIGN)
            return self._dispatch(ch, start)

    def _dispatch(self, ch: str, start: int) -> Token:
        if ch in SIMPLE_TOKENS:
            return self._token(SIMPLE_TOKENS[ch], start)

        # 1. Operators
        if ch == "+":
            return self._compound(start, TokenType.ADD, TokenType.ADD_ASSIGN)
        if ch == "-":
            return self._minus(start)
        if ch == "*":
            if self.stream.match_char("="):
                return self._token(TokenType.MUL_ASSIGN, start)
            if self.stream.match_char("*"):
                return self._compound(start, TokenType.POW, TokenType.POW_ASSIGN)
            return self._token(TokenType.MUL, start)
        if ch == "%":
            return self._compound(start, TokenType.MOD, TokenType.MOD_ASSIGN)
        if ch == "&":
            return self._doubled(
                start, TokenType.BIT_AND, TokenType.BIT_AND_ASSIGN, "&", TokenType.AND
            )
        if ch == "|":
            return self._doubled(
                start, TokenType.BIT_OR, TokenType.BIT_OR_ASSIGN, "|", TokenType.OR
            )
        if ch == "^":
            return self._compound(start, TokenType.BIT_XOR, TokenType.BIT_XOR_ASSIGN)
        if ch == "!":
            return self._compound(start, TokenType.NOT, TokenType.NE)
        if ch == "=":
            return self._compound(start, TokenType.ASSIGN, TokenType.EQ)
        if ch == "<":
            if self.stream.match_char("="):
                return self._token(TokenType.LE, start)
            if self.stream.match_char("<"):
                return self._compound(start, TokenType.SHL, TokenType.SHL_ASSIGN)
            return self._token(TokenType.LT, start)
        if ch == ">":
            if self.stream.match_char("="):
                return self._token(TokenType.GE, start)
            if self.stream.match_char(">"):
                return self._compound(start, TokenType.SHR, TokenType.SHR_ASSIGN)
            return self._token(TokenType.GT, start)

        # 2. Literals
        if ch == '"':
            return self._read_string(start)
        if ch == "'":
            return self._read_char(start)
        if is_ascii_digit(ch):
            return self._read_number(ch, start)

        # 3. Identifier or keyword
        if ch.isalpha():
            word = ch + self._read_while(str.isalnum)
            if word in KEYWORDS:
                return self._token(TokenType.KEYWORD, start, KEYWORDS[word])
            return self._token(TokenType.IDENT, start, word)

        raise LexError(
            ErrorKind.UNEXPECTED_CHARACTER,
            Span(start, self.stream.position),
            f"Unexpected character {ch!r}",
        )

    def _token(self, type_: TokenType, start: int, value: object = None) -> Token:
        return Token(type_, value, Span(start, self.stream.position))

    def _compound(self, start: int, plain: TokenType, with_eq: TokenType) -> Token:
        """Returns ``with_eq`` if the next character is `=`, else ``plain``."""
        if self.stream.match_char("="):
            return self._token(with_eq, start)
        return self._token(plain, start)

    def _doubled(
        self,
        start: int,
        plain: TokenType,
        with_eq: TokenType,
        second: str,
        doubled: TokenType,
    ) -> Token:
        if self.stream.match_char("="):
            return self._token(with_eq, start)
        if self.stream.match_char(second):
            return self._token(doubled, start)
        return self._token(plain, start)

    def _minus(self, start: int) -> Token:
        # A digit right after `-` makes a negative literal, never `Sub`.
        if self.stream.peek_is(is_ascii_digit):
            value = self._scan_number(self.stream.next())
            if isinstance(value, float):
                return self._token(TokenType.FLOAT_LITERAL, start, -value)
            if -value < MIN_SIGNED:
                raise LexError(
                    ErrorKind.INTEGER_OVERFLOW,
                    Span(start, self.stream.position),
                    f"Integer literal -{value} does not fit in a signed 64-bit integer",
                )
            return self._token(TokenType.SIGNED_LITERAL, start, -value)
        if self.stream.match_char("="):
            return self._token(TokenType.SUB_ASSIGN, start)
        if self.stream.match_char(">"):
            return self._token(TokenType.ARROW, start)
        return self._token(TokenType.SUB, start)

    def _read_while(self, predicate: Callable[[str], bool]) -> str:
        chars = []
        while self.stream.peek_is(predicate):
            chars.append(self.stream.next())
        return "".join(chars)

    def _scan_number(self, first: str) -> int | float:
        digits = first + self._read_while(is_ascii_digit)
        if self.stream.peek() == "." and is_ascii_digit(self.stream.peek(1)):
            self.stream.next()
            fraction = self._read_while(is_ascii_digit)
            return float(f"{digits}.{fraction}")
        return int(digits)

    def _read_number(self, first: str, start: int) -> Token:
        value = self._scan_number(first)
        if isinstance(value, float):
            return self._token(TokenType.FLOAT_LITERAL, start, value)
        if value > MAX_UNSIGNED:
            raise LexError(
                ErrorKind.INTEGER_OVERFLOW,
                Span(start, self.stream.position),
                f"Integer literal {value} does not fit in an unsigned 64-bit integer",
            )
        return self._token(TokenType.UNSIGNED_LITERAL, start, value)

    def _read_string(self, start: int) -> Token:
        chars: list[str] = []
        while True:
            ch = self.stream.next()
            if ch == "":
                raise LexError(
                    ErrorKind.UNTERMINATED_STRING,
                    Span(start, self.stream.position),
                    "Unterminated string",
                )
            if ch == '"':
                return self._token(TokenType.STRING_LITERAL, start, "".join(chars))
            if ch == "\\":
                chars.append(self._read_escape(self.stream.position - 1, start))
            else:
                chars.append(ch)

    def _read_escape(self, escape_start: int, string_start: int) -> str:
        ch = self.stream.next()
        if ch == "":
            raise LexError(
                ErrorKind.UNTERMINATED_STRING,
                Span(string_start, self.stream.position),
                "Unterminated string",
            )
        if ch in ESCAPES:
            return ESCAPES[ch]
        if ch == "u":
            hex_digits = ""
            while len(hex_digits) < 4 and self.stream.peek_is(is_hex_digit):
                hex_digits += self.stream.next()
            if len(hex_digits) == 4:
                code = int(hex_digits, 16)
                # Surrogates are not Unicode scalar values.
                if not 0xD800 <= code <= 0xDFFF:
                    return chr(code)
            raise LexError(
                ErrorKind.INVALID_ESCAPE_SEQUENCE,
                Span(escape_start, self.stream.position),
                f"Invalid unicode escape '\\u{hex_digits}'",
            )
        raise LexError(
            ErrorKind.INVALID_ESCAPE_SEQUENCE,
            Span(escape_start, self.stream.position),
            f"Invalid escape sequence '\\{ch}'",
        )

    def _read_char(self, start: int) -> Token:
        ch = self.stream.next()
        if ch == "":
            raise LexError(
                ErrorKind.UNEXPECTED_END_OF_INPUT,
                Span(start, self.stream.position),
                "Unexpected end of input in character literal",
            )
        if not self.stream.match_char("'"):
            raise LexError(
                ErrorKind.INVALID_CHARACTER_LITERAL,
                Span(start, self.stream.position),
                "Invalid character literal",
            )
        return self._token(TokenType.CHAR_LITERAL, start, ch)

    def _skip_line_comment(self) -> None:
        while not self.stream.end_of_file() and self.stream.next() != "\n":
            pass

    def _skip_block_comment(self, start: int) -> None:
        while not self.stream.match_string("*/"):
            if self.stream.next() == "":
                raise LexError(
                    ErrorKind.UNTERMINATED_COMMENT,
                    Span(start, start + 2),
                    "Unterminated block comment",
                )


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize a whole source string."""
    tokens = list(Lexer(CharacterStream(source)))
    logger.debug("tokenized %d characters into %d tokens", len(source), len(tokens))
    return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]
