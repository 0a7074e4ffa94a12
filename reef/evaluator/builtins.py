"""
Native functions bound in every session's global environment.

Each native receives already-evaluated arguments; the evaluator checks arity
before the call and attaches the call position to any error raised here.
"""
import logging
import math
import re
from typing import Any, Dict, List

from reef.evaluator.environment import Environment
from reef.evaluator.values import NativeFunction, to_display, type_name
from reef.system.errors import ReefTypeError

logger = logging.getLogger(__name__)

_NUMERIC_TEXT = re.compile(r"^-?[0-9][0-9_]*(\.[0-9][0-9_]*)?$")


def _require_number(function_name: str, value: Any) -> float:
    if type_name(value) != "number":
        raise ReefTypeError(f"'{function_name}' expects a number, got {type_name(value)}")
    return value


def _require_string(function_name: str, value: Any) -> str:
    if type_name(value) != "string":
        raise ReefTypeError(f"'{function_name}' expects a string, got {type_name(value)}")
    return value


def native_len(value: Any) -> float:
    """len(s): number of characters in a string."""
    return float(len(_require_string("len", value)))


def native_str(value: Any) -> str:
    """str(v): the display form of any value."""
    return to_display(value)


def native_num(value: Any) -> float:
    """
    num(s): parses a decimal number written the way number literals are,
    with an optional leading '-'. Numbers pass through unchanged.
    """
    if type_name(value) == "number":
        return value
    text = _require_string("num", value).strip()
    if not _NUMERIC_TEXT.match(text):
        raise ReefTypeError(f"'num' cannot convert {value!r} to a number")
    return float(text.replace("_", ""))


def native_abs(value: Any) -> float:
    return abs(_require_number("abs", value))


def native_floor(value: Any) -> float:
    number = _require_number("floor", value)
    if not math.isfinite(number):
        return number
    return float(math.floor(number))


PRELUDE: List[NativeFunction] = [
    NativeFunction("len", 1, native_len),
    NativeFunction("str", 1, native_str),
    NativeFunction("num", 1, native_num),
    NativeFunction("abs", 1, native_abs),
    NativeFunction("floor", 1, native_floor),
]


def prelude_bindings() -> Dict[str, NativeFunction]:
    return {native.name: native for native in PRELUDE}


def install_prelude(env: Environment) -> None:
    """Defines every prelude function in `env`."""
    for name, native in prelude_bindings().items():
        env.define(name, native)
    logger.debug(f"Prelude installed in env id={id(env)}: {list(prelude_bindings())}")
