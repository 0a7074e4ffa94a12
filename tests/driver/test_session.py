"""
Tests for Session (compilation units over persistent bindings) and run_file.
"""
import logging
from unittest.mock import patch

import pytest

from reef.driver.session import Session, run_file
from reef.evaluator.values import NativeFunction
from reef.system.models import ExecutionResult, InterpreterConfig

# --- Session.run ---

def test_run_returns_last_expression_value(session):
    result = session.run("var x = 2; x * 21;")
    assert isinstance(result, ExecutionResult)
    assert result.status == "COMPLETE"
    assert result.has_value is True
    assert result.value == 42.0
    assert result.error is None


def test_run_without_trailing_expression_has_no_value(session):
    result = session.run("var x = 2;")
    assert result.ok
    assert result.has_value is False
    assert result.value is None


def test_bindings_persist_across_units(session):
    session.run("fun square(n) { return n * n; }")
    assert session.run("square(9);").value == 81.0


def test_syntax_error_aborts_unit_before_anything_runs(session, output):
    result = session.run('log "first"; var = 1;')
    assert result.status == "FAILED"
    assert result.error.kind == "SyntaxError"
    assert output.getvalue() == ""


def test_lexical_error_reported(session):
    result = session.run("var a = 1 # 2;")
    assert result.error.kind == "LexicalError"
    assert result.error.format() == "LexicalError at 1:11: Unexpected character '#'"


def test_runtime_error_keeps_earlier_bindings(session, output):
    result = session.run('var before = 1; log "ran"; nope; var after = 2;')
    assert result.error.kind == "UndefinedVariableError"
    assert output.getvalue() == "ran\n"
    assert session.run("before;").value == 1.0
    assert session.run("after;").error.kind == "UndefinedVariableError"


def test_parsing_is_independent_of_history(session):
    first = session.parse("x + 1;")
    session.run("var x = 10; fun f() { }")
    assert session.parse("x + 1;") == first


def test_deeply_nested_expression_reports_syntax_error(session):
    depth = 20000
    result = session.run("(" * depth + "1" + ")" * depth + ";")
    assert result.error.kind == "SyntaxError"
    assert result.error.message == "Expression nesting is too deep"

# --- is_complete ---

@pytest.mark.parametrize("source, complete", [
    ("var x = 1;", True),
    ("var x = 1", True),
    ("", True),
    ("fun f() {", False),
    ("if x then {\n log 1;", False),
    ('log "unterminated', False),
    ("var = 1;", True),
    ("@", True),
])
def test_is_complete(session, source, complete):
    assert session.is_complete(source) is complete


def test_is_complete_does_not_evaluate(session, output):
    assert session.is_complete('log "side effect";')
    assert output.getvalue() == ""

# --- reset and inspection ---

def test_reset_discards_bindings_but_keeps_prelude(session):
    session.run("var x = 1;")
    session.reset()
    assert session.run("x;").error.kind == "UndefinedVariableError"
    assert isinstance(session.global_env.lookup("len"), NativeFunction)


def test_user_bindings_hide_untouched_prelude(session):
    session.run("var x = 1; fun str(v) { return v; }")
    bindings = session.user_bindings()
    assert set(bindings) == {"x", "str"}


def test_debug_level_setter_updates_evaluator(session):
    session.debug_level = 2
    assert session.config.debug_level == 2
    assert session.evaluator.debug_level == 2


def test_debug_tracing_logs_ast(caplog):
    session = Session(InterpreterConfig(debug_level=1))
    with caplog.at_level(logging.DEBUG, logger="reef"):
        session.run("1 + 2;")
    assert "AST: (program (expr (+ 1 2)))" in caplog.text


def test_unprintable_ast_does_not_fail_the_unit(caplog):
    """A tree too deep for the AST printer still runs when tracing is on."""
    session = Session(InterpreterConfig(debug_level=1))
    with patch("reef.driver.session.to_sexp", side_effect=RecursionError("maximum recursion depth exceeded")):
        with caplog.at_level(logging.DEBUG, logger="reef"):
            result = session.run("1 + 2;")
    assert result.ok
    assert result.value == 3.0
    assert "AST: <too deeply nested to print>" in caplog.text


def test_trace_level_logs_calls(caplog):
    session = Session(InterpreterConfig(debug_level=2))
    with caplog.at_level(logging.DEBUG, logger="reef"):
        session.run("fun f() { return 1; } f();")
    assert "Call in f called at 1:23" in caplog.text

# --- run_file ---

def test_run_file_success(tmp_path, output, console, console_buffer):
    path = tmp_path / "hello.reef"
    path.write_text('log "hello", 1 + 1;\n', encoding="utf-8")
    assert run_file(str(path), output=output, console=console) == 0
    assert output.getvalue() == "hello 2\n"
    assert console_buffer.getvalue() == ""


def test_run_file_runtime_error_exit_code(tmp_path, output, console, console_buffer):
    path = tmp_path / "bad.reef"
    path.write_text('log "start";\nlog 1 / 0;\nlog "never";\n', encoding="utf-8")
    assert run_file(str(path), output=output, console=console) == 1
    assert output.getvalue() == "start\n"
    assert console_buffer.getvalue().strip() == "ArithmeticError at 2:5: Division by zero"


def test_run_file_syntax_error_exit_code(tmp_path, output, console, console_buffer):
    path = tmp_path / "broken.reef"
    path.write_text("fun f( {", encoding="utf-8")
    assert run_file(str(path), output=output, console=console) == 1
    assert console_buffer.getvalue().startswith("SyntaxError at 1:8:")


def test_run_file_missing_file_exit_code(tmp_path, output, console, console_buffer):
    assert run_file(str(tmp_path / "absent.reef"), output=output, console=console) == 2
    assert "cannot read" in console_buffer.getvalue()


def test_run_file_prints_trace_at_debug_level_two(tmp_path, output, console, console_buffer):
    path = tmp_path / "trace.reef"
    path.write_text("fun boom() { return nil + 1; }\nboom();\n", encoding="utf-8")
    config = InterpreterConfig(debug_level=2)
    assert run_file(str(path), config=config, output=output, console=console) == 1
    assert "  in boom called at 2:1" in console_buffer.getvalue()
