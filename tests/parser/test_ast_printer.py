"""
Tests for rendering ASTs as S-expressions.
"""

import pytest
from sexpdata import Symbol, loads

from reef.lexer.lexer import Lexer
from reef.parser import ast_nodes as ast
from reef.parser.ast_printer import AstPrinter, to_sexp
from reef.parser.parser import Parser


def dump(source):
    return to_sexp(Parser(Lexer(source).tokenize()).parse())


def test_arithmetic_precedence_is_visible():
    assert loads(dump("1 + 2 * 3;")) == loads("(program (expr (+ 1 (* 2 3))))")


def test_fractional_numbers_keep_their_fraction():
    assert loads(dump("0.5;")) == [Symbol("program"), [Symbol("expr"), 0.5]]


def test_function_declaration_dump():
    text = dump("fun add(a, b) { return a + b; }")
    assert loads(text) == loads("(program (fun add (a b) (block (return (+ a b)))))")


def test_anonymous_function_and_assignment_dump():
    text = dump("f = fun (x) { };")
    assert loads(text) == loads("(program (expr (set! f (fun (x) (block)))))")


def test_control_flow_dump():
    text = dump("for (;;) do { if x then { break; } else { continue; } }")
    expected = "(program (for nil nil nil (block (if x (block (break)) (block (continue))))))"
    assert loads(text) == loads(expected)


def test_log_strings_and_literals_dump():
    text = dump('log "hi", true, nil;')
    assert loads(text) == loads('(program (log "hi" true nil))')


def test_printer_converts_every_concrete_node_type():
    printer = AstPrinter()
    for node_type in ast.concrete_node_types(ast.Node):
        assert node_type in printer._converters


def test_printer_refuses_to_build_without_full_coverage(monkeypatch):
    class Stray:
        pass

    real = ast.concrete_node_types
    monkeypatch.setattr(ast, "concrete_node_types", lambda base: real(base) + [Stray])
    with pytest.raises(TypeError) as excinfo:
        AstPrinter()
    assert "Stray" in str(excinfo.value)


def test_unknown_node_rejected_by_to_data():
    with pytest.raises(TypeError):
        AstPrinter().to_data("not a node")
