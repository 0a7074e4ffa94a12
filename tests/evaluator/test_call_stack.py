import pytest

from reef.evaluator.call_stack import CallFrame, CallStack
from reef.system.errors import StackOverflowError
from reef.system.models import SourcePosition


def test_push_and_pop_track_depth():
    stack = CallStack(max_depth=3)
    stack.push(CallFrame(function_name="a"))
    stack.push(CallFrame(function_name="b"))
    assert stack.depth == 2
    assert stack.pop().function_name == "b"
    assert stack.depth == 1


def test_push_beyond_limit_raises_stack_overflow():
    stack = CallStack(max_depth=2)
    stack.push(CallFrame(function_name="f"))
    stack.push(CallFrame(function_name="f"))
    with pytest.raises(StackOverflowError) as excinfo:
        stack.push(CallFrame(function_name="f", call_position=SourcePosition(line=4, column=2)))
    assert excinfo.value.format() == "StackOverflowError at 4:2: Maximum call depth of 2 exceeded in call to 'f'"
    assert stack.depth == 2


def test_frame_description():
    assert CallFrame(function_name="g").describe() == "in g"
    frame = CallFrame(function_name="g", call_position=SourcePosition(line=3, column=7))
    assert frame.describe() == "in g called at 3:7"


def test_invalid_limit_rejected():
    with pytest.raises(ValueError):
        CallStack(max_depth=0)


def test_custom_depth_limit_via_session():
    from reef.driver.session import Session
    from reef.system.models import InterpreterConfig

    session = Session(InterpreterConfig(max_call_depth=5))
    session.run("fun down(n) { if n == 0 then { return 0; } return down(n - 1); }")
    assert session.run("down(4);").ok
    result = session.run("down(5);")
    assert result.error.kind == "StackOverflowError"
