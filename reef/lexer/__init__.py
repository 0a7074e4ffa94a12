"""Lexical analysis: source text to tokens."""

from reef.lexer.lexer import Lexer
from reef.lexer.tokens import Token, TokenKind

__all__ = ["Lexer", "Token", "TokenKind"]
