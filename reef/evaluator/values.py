"""
Runtime values of the Reef language.

Numbers are Python floats, strings are str, booleans are bool and nil is None.
Functions are either user-defined Closures or NativeFunctions from the prelude.
"""
import logging
from typing import Any, Callable, Optional, Tuple

from reef.evaluator.environment import Environment
from reef.parser.ast_nodes import Block

logger = logging.getLogger(__name__)


class Closure:
    def __init__(self, name: Optional[str], parameters: Tuple[str, ...], body: Block, environment: Environment):
        """
        Represents a user-defined function together with the scope it was created in.

        Args:
            name: Declared name, or None for an anonymous function expression.
            parameters: Formal parameter names in declaration order.
            body: The function's body block. Its statements run directly in the call frame.
            environment: The Environment captured at the time of definition.
                         This environment is the parent for every call frame.
        """
        self.name = name
        self.parameters: Tuple[str, ...] = tuple(parameters)
        self.body: Block = body
        self.environment: Environment = environment
        logger.debug(f"Closure created: name={name}, params=({', '.join(self.parameters)}), def_env_id={id(environment)}")

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def display_name(self) -> str:
        return self.name if self.name is not None else "anonymous"

    def __repr__(self):
        return f"<Closure {self.display_name}({', '.join(self.parameters)}) def_env_id={id(self.environment)}>"


class NativeFunction:
    """A prelude function implemented in Python. Called with already-evaluated arguments."""

    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self.arity = arity
        self.fn = fn

    @property
    def display_name(self) -> str:
        return self.name

    def __repr__(self):
        return f"<NativeFunction {self.name}/{self.arity}>"


def is_callable_value(value: Any) -> bool:
    return isinstance(value, (Closure, NativeFunction))


def type_name(value: Any) -> str:
    """Returns the language-level kind of a value, as reported by 'typeof'."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if is_callable_value(value):
        return "function"
    raise TypeError(f"Not a Reef value: {value!r}")


def format_number(value: float) -> str:
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def to_display(value: Any) -> str:
    """Display form used by 'log' and str(): strings are written raw."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Closure):
        return f"<fun {value.display_name}>"
    if isinstance(value, NativeFunction):
        return f"<native fun {value.name}>"
    return str(value)


def to_repr(value: Any) -> str:
    """Form echoed by the REPL: like to_display, but strings are quoted and escaped."""
    if isinstance(value, str):
        escaped = (
            value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\t", "\\t")
            .replace("\r", "\\r")
            .replace("\0", "\\0")
        )
        return f'"{escaped}"'
    return to_display(value)


def values_equal(left: Any, right: Any) -> bool:
    """
    Equality for '==' and '!='. Values of different kinds are never equal and
    functions compare by identity.
    """
    if type_name(left) != type_name(right):
        return False
    if is_callable_value(left):
        return left is right
    return left == right
