"""
Token types produced by the Lexer.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from reef.system.models import SourcePosition


class TokenKind(str, Enum):
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    KEYWORD = "keyword"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    END_OF_INPUT = "end of input"


KEYWORDS = frozenset({
    "var", "fun", "return",
    "if", "then", "elseif", "else",
    "while", "for", "do", "break", "continue",
    "true", "false", "nil",
    "and", "or", "not", "typeof",
    "log",
})

# Longest first, so a prefix scan finds the longest match.
OPERATORS = ("==", "!=", "<=", ">=", "+", "-", "*", "/", "%", "<", ">", "=")

PUNCTUATION = frozenset("(){},;")

COMMENT_START = "--"

STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
}


class Token(BaseModel):
    """
    A classified, positioned lexical unit.

    Attributes:
        kind: The token class.
        lexeme: The exact source text of the token.
        position: Where the token starts.
        value: Decoded literal value (float for numbers, unescaped text for
               strings); the lexeme for every other kind.
    """
    model_config = ConfigDict(frozen=True)

    kind: TokenKind
    lexeme: str
    position: SourcePosition
    value: Any = None

    def is_keyword(self, *words: str) -> bool:
        return self.kind == TokenKind.KEYWORD and self.lexeme in words

    def is_operator(self, *symbols: str) -> bool:
        return self.kind == TokenKind.OPERATOR and self.lexeme in symbols

    def is_punctuation(self, *symbols: str) -> bool:
        return self.kind == TokenKind.PUNCTUATION and self.lexeme in symbols

    def describe(self) -> str:
        """Human-readable form used in syntax error messages."""
        if self.kind == TokenKind.END_OF_INPUT:
            return "end of input"
        if self.kind == TokenKind.STRING:
            return f"string {self.lexeme}"
        return f"{self.kind.value} '{self.lexeme}'"

    def __str__(self) -> str:
        return f"(type: {self.kind.name}, value: '{self.lexeme}', at {self.position})"
