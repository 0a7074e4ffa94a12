"""
Tests for the error taxonomy in reef.system.errors.
"""
import pytest

from reef.system.errors import (
    ArityError,
    ReefArithmeticError,
    ReefError,
    ReefIncompleteInputError,
    ReefLexicalError,
    ReefRuntimeError,
    ReefSyntaxError,
    ReefTypeError,
    StackOverflowError,
    UndefinedVariableError,
)
from reef.system.models import SourcePosition


@pytest.mark.parametrize("error_class, kind", [
    (ReefLexicalError, "LexicalError"),
    (ReefSyntaxError, "SyntaxError"),
    (ReefIncompleteInputError, "SyntaxError"),
    (ReefTypeError, "TypeError"),
    (ReefArithmeticError, "ArithmeticError"),
    (ArityError, "ArityError"),
    (StackOverflowError, "StackOverflowError"),
])
def test_kind_labels(error_class, kind):
    error = error_class("message")
    assert error.kind == kind
    assert isinstance(error, ReefError)


def test_runtime_errors_share_a_base():
    for error_class in (UndefinedVariableError, ReefTypeError, ReefArithmeticError, ArityError, StackOverflowError):
        assert issubclass(error_class, ReefRuntimeError)
    assert not issubclass(ReefSyntaxError, ReefRuntimeError)


def test_format_with_and_without_position():
    positioned = ReefTypeError("bad", SourcePosition(line=2, column=3))
    assert positioned.format() == "TypeError at 2:3: bad"
    assert str(positioned) == "TypeError at 2:3: bad"
    assert ReefTypeError("bad").format() == "TypeError: bad"


def test_incomplete_flag():
    assert ReefIncompleteInputError("Expected '}'").incomplete is True
    assert ReefSyntaxError("Expected '}'").incomplete is False
    assert ReefLexicalError("Unterminated string", incomplete=True).incomplete is True


def test_undefined_variable_error_names_variable():
    error = UndefinedVariableError("speed")
    assert error.name == "speed"
    assert error.format() == "UndefinedVariableError: Undefined variable 'speed'"


def test_trace_and_report():
    error = ArityError("expects 2", SourcePosition(line=5, column=1))
    error.add_frame("in inner called at 3:4")
    error.add_frame("in outer called at 5:1")
    report = error.to_report()
    assert report.kind == "ArityError"
    assert (report.line, report.column) == (5, 1)
    assert report.trace == ["in inner called at 3:4", "in outer called at 5:1"]
    error.add_frame("later")
    assert len(report.trace) == 2
