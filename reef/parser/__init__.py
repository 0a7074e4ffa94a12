"""Parsing: tokens to AST."""

from reef.parser.parser import Parser, parse_tokens
from reef.parser.ast_printer import AstPrinter, to_sexp

__all__ = ["Parser", "parse_tokens", "AstPrinter", "to_sexp"]
