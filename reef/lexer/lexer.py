"""
Lexer for Reef source text.

Converts raw text into a finite sequence of classified, positioned Tokens.
`Lexer.tokens()` is a generator that starts over from the beginning of the
text every time it is called, so scanning is lazy but restartable.
"""

import logging
from typing import Iterator, List, Optional

from reef.lexer.tokens import (
    COMMENT_START,
    KEYWORDS,
    OPERATORS,
    PUNCTUATION,
    STRING_ESCAPES,
    Token,
    TokenKind,
)
from reef.system.errors import ReefLexicalError
from reef.system.models import SourcePosition

logger = logging.getLogger(__name__)


class Lexer:
    """
    Breaks a compilation unit into tokens.

    The scan state lives in a private cursor object created per call to
    tokens(), never on the Lexer itself.
    """

    def __init__(self, source: str, debug_level: int = 0):
        """
        Args:
            source: The full source text of the compilation unit.
            debug_level: When >= 1 every produced token is traced at DEBUG level.
        """
        if not isinstance(source, str):
            raise TypeError("Input must be a string.")
        self.source = source
        self.debug_level = debug_level

    def tokenize(self) -> List[Token]:
        """Scans the whole source and returns the token list (ending in END_OF_INPUT)."""
        return list(self.tokens())

    def tokens(self) -> Iterator[Token]:
        """
        Yields tokens lazily from the start of the source.

        Raises:
            ReefLexicalError: On a character that starts no valid token, an
                              unknown string escape, or an unterminated string
                              (the latter flagged as incomplete).
        """
        cursor = _Cursor(self.source)
        while True:
            token = cursor.next_token()
            if self.debug_level >= 1:
                logger.debug(f"Token: {token}")
            yield token
            if token.kind == TokenKind.END_OF_INPUT:
                return


class _Cursor:
    """Scan state for one pass over the source text."""

    def __init__(self, text: str):
        self.text = text
        self.current = 0
        self.byte_offset = 0
        self.line = 1
        self.column = 1

    # --- Character helpers ---

    def _peek(self, distance: int = 0) -> Optional[str]:
        index = self.current + distance
        if index < len(self.text):
            return self.text[index]
        return None

    def _advance(self) -> str:
        char = self.text[self.current]
        self.current += 1
        self.byte_offset += len(char.encode("utf-8", "surrogatepass"))
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def _position(self) -> SourcePosition:
        return SourcePosition(line=self.line, column=self.column, offset=self.byte_offset)

    # --- Scanning ---

    def next_token(self) -> Token:
        self._skip_whitespace_and_comments()

        start = self._position()
        char = self._peek()
        if char is None:
            return Token(kind=TokenKind.END_OF_INPUT, lexeme="", position=start)

        if _is_identifier_start(char):
            return self._scan_identifier(start)
        if _is_digit(char):
            return self._scan_number(start)
        if char == '"':
            return self._scan_string(start)
        if char in PUNCTUATION:
            self._advance()
            return Token(kind=TokenKind.PUNCTUATION, lexeme=char, position=start, value=char)

        for operator in OPERATORS:
            if self.text.startswith(operator, self.current):
                for _ in operator:
                    self._advance()
                return Token(kind=TokenKind.OPERATOR, lexeme=operator, position=start, value=operator)

        raise ReefLexicalError(f"Unexpected character {char!r}", start)

    def _skip_whitespace_and_comments(self) -> None:
        while True:
            char = self._peek()
            if char is None:
                return
            if char.isspace():
                self._advance()
            elif self.text.startswith(COMMENT_START, self.current):
                while self._peek() is not None and self._peek() != "\n":
                    self._advance()
            else:
                return

    def _scan_identifier(self, start: SourcePosition) -> Token:
        begin = self.current
        while _is_identifier_part(self._peek()):
            self._advance()
        word = self.text[begin:self.current]
        kind = TokenKind.KEYWORD if word in KEYWORDS else TokenKind.IDENTIFIER
        return Token(kind=kind, lexeme=word, position=start, value=word)

    def _scan_digits(self) -> None:
        while _is_digit(self._peek()) or self._peek() == "_":
            self._advance()

    def _scan_number(self, start: SourcePosition) -> Token:
        begin = self.current
        self._scan_digits()
        # A fraction needs at least one digit after the dot.
        next_char = self._peek(1)
        if self._peek() == "." and _is_digit(next_char):
            self._advance()
            self._scan_digits()
        lexeme = self.text[begin:self.current]
        return Token(kind=TokenKind.NUMBER, lexeme=lexeme, position=start, value=float(lexeme.replace("_", "")))

    def _scan_string(self, start: SourcePosition) -> Token:
        begin = self.current
        self._advance()  # opening quote
        chars: List[str] = []
        while True:
            char = self._peek()
            if char is None:
                raise ReefLexicalError("Unterminated string", start, incomplete=True)
            if char == '"':
                self._advance()
                break
            if char == "\\":
                escape_position = self._position()
                self._advance()
                escaped = self._peek()
                if escaped is None:
                    raise ReefLexicalError("Unterminated string", start, incomplete=True)
                if escaped not in STRING_ESCAPES:
                    raise ReefLexicalError(f"Unknown escape sequence '\\{escaped}'", escape_position)
                self._advance()
                chars.append(STRING_ESCAPES[escaped])
                continue
            chars.append(self._advance())
        lexeme = self.text[begin:self.current]
        return Token(kind=TokenKind.STRING, lexeme=lexeme, position=start, value="".join(chars))


def _is_digit(char: Optional[str]) -> bool:
    return char is not None and "0" <= char <= "9"


def _is_identifier_start(char: Optional[str]) -> bool:
    return char is not None and (char == "_" or "a" <= char <= "z" or "A" <= char <= "Z")


def _is_identifier_part(char: Optional[str]) -> bool:
    return _is_identifier_start(char) or _is_digit(char)
