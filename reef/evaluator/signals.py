"""
Control signals produced by statement execution.

Executing a statement yields either None (completed normally) or one of these
signals. Blocks propagate signals outward; loops absorb BREAK and CONTINUE;
function calls turn a ReturnSignal into the call's value.
"""
from typing import Any, Union


class ReturnSignal:
    """A 'return' unwinding towards the enclosing call, carrying its value."""
    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def __repr__(self):
        return f"ReturnSignal({self.value!r})"


class _LoopSignal:
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return self.name


BREAK = _LoopSignal("BREAK")
CONTINUE = _LoopSignal("CONTINUE")

Signal = Union[ReturnSignal, _LoopSignal]
