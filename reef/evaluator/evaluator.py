"""
Tree-walking evaluator for Reef ASTs.

Statements are executed for their effect and return an optional control
signal; expressions are evaluated to values. Runtime errors are raised as
ReefRuntimeError subclasses and travel unchanged to the caller of
execute_program (the Session), recording each unwound call frame on the way.
"""
import logging
import math
import operator
import sys
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple, Type

from reef.evaluator.call_stack import CallFrame, CallStack
from reef.evaluator.environment import Environment
from reef.evaluator.signals import BREAK, CONTINUE, ReturnSignal, Signal
from reef.evaluator.values import (
    Closure,
    NativeFunction,
    is_callable_value,
    to_display,
    type_name,
    values_equal,
)
from reef.parser import ast_nodes as ast
from reef.system.errors import (
    ArityError,
    ReefArithmeticError,
    ReefRuntimeError,
    ReefTypeError,
    StackOverflowError,
    UndefinedVariableError,
)
from reef.system.models import MAX_CALL_DEPTH, SourcePosition

logger = logging.getLogger(__name__)

# Host stack frames used per language-level call, with generous headroom for
# calls nested inside blocks, loops and compound expressions.
HOST_FRAMES_PER_CALL = 30
HOST_FRAME_RESERVE = 1000

def _modulo(left: float, right: float) -> float:
    # math.fmod rejects an infinite dividend; IEEE remainder of inf is nan.
    if math.isinf(left):
        return math.nan
    return math.fmod(left, right)


_ARITHMETIC: Dict[str, Callable[[float, float], float]] = {
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": _modulo,
}

_COMPARISON: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class Evaluator:
    """
    Executes Reef statements and evaluates expressions against Environments.

    Dispatch goes through two tables keyed by node class. The constructor
    checks that the tables cover every concrete node class.
    """

    def __init__(self, max_call_depth: int = 200, debug_level: int = 0, output: Optional[TextIO] = None):
        """
        Initializes the Evaluator.

        Args:
            max_call_depth: Maximum number of simultaneously active calls.
            debug_level: >= 2 traces every call and error unwinding at DEBUG level.
            output: Stream that 'log' statements write to. Defaults to sys.stdout.
        """
        self.debug_level = debug_level
        self.output = output if output is not None else sys.stdout
        self.call_stack = CallStack(max_call_depth)

        self._statement_handlers: Dict[Type[ast.Statement], Callable[[Any, Environment], Optional[Signal]]] = {
            ast.ExpressionStatement: self._execute_expression_statement,
            ast.VarDeclaration: self._execute_var_declaration,
            ast.FunctionDeclaration: self._execute_function_declaration,
            ast.Block: self._execute_block_statement,
            ast.If: self._execute_if,
            ast.While: self._execute_while,
            ast.For: self._execute_for,
            ast.Return: self._execute_return,
            ast.Break: lambda node, env: BREAK,
            ast.Continue: lambda node, env: CONTINUE,
            ast.Log: self._execute_log,
        }
        self._expression_handlers: Dict[Type[ast.Expression], Callable[[Any, Environment], Any]] = {
            ast.NumberLiteral: lambda node, env: node.value,
            ast.StringLiteral: lambda node, env: node.value,
            ast.BooleanLiteral: lambda node, env: node.value,
            ast.NilLiteral: lambda node, env: None,
            ast.Identifier: self._evaluate_identifier,
            ast.Grouping: lambda node, env: self.evaluate(node.expression, env),
            ast.Unary: self._evaluate_unary,
            ast.Binary: self._evaluate_binary,
            ast.Logical: self._evaluate_logical,
            ast.Assignment: self._evaluate_assignment,
            ast.Call: self._evaluate_call,
            ast.FunctionExpression: self._evaluate_function_expression,
        }
        self._check_dispatch_coverage()
        self._ensure_host_recursion_limit(max_call_depth)
        logger.debug(f"Evaluator initialized: max_call_depth={max_call_depth}, debug_level={debug_level}")

    def _check_dispatch_coverage(self) -> None:
        missing = [t.__name__ for t in ast.concrete_node_types(ast.Statement) if t not in self._statement_handlers]
        missing += [t.__name__ for t in ast.concrete_node_types(ast.Expression) if t not in self._expression_handlers]
        if missing:
            raise TypeError(f"Evaluator has no handler for node types: {missing}")

    @staticmethod
    def _ensure_host_recursion_limit(max_call_depth: int) -> None:
        if max_call_depth > MAX_CALL_DEPTH:
            raise ValueError(f"max_call_depth must be at most {MAX_CALL_DEPTH}, got {max_call_depth}")
        needed = max_call_depth * HOST_FRAMES_PER_CALL + HOST_FRAME_RESERVE
        if sys.getrecursionlimit() < needed:
            logger.debug(f"Raising host recursion limit from {sys.getrecursionlimit()} to {needed}")
            sys.setrecursionlimit(needed)

    # --- Entry points ---

    def execute_program(self, program: ast.Program, env: Environment) -> Tuple[Any, bool]:
        """
        Runs the top-level statements of one compilation unit in order.

        Args:
            program: The parsed compilation unit.
            env: The session-global environment; bindings made here persist.

        Returns:
            (value, has_value): the value of the final statement and whether that
            statement was an expression statement.

        Raises:
            ReefRuntimeError: The first runtime error; statements after it do not run.
        """
        value: Any = None
        has_value = False
        for statement in program.statements:
            if self.debug_level >= 1:
                logger.info(f"Executing {type(statement).__name__} at {statement.position}")
            try:
                if isinstance(statement, ast.ExpressionStatement):
                    value = self.evaluate(statement.expression, env)
                    has_value = True
                else:
                    self.execute(statement, env)
                    value, has_value = None, False
            except RecursionError:
                self.call_stack.clear()
                raise StackOverflowError("Host recursion limit reached", statement.position) from None
        return value, has_value

    def execute(self, statement: ast.Statement, env: Environment) -> Optional[Signal]:
        """Executes one statement; returns the control signal it produced, if any."""
        return self._statement_handlers[type(statement)](statement, env)

    def evaluate(self, expression: ast.Expression, env: Environment) -> Any:
        """Evaluates one expression to a value."""
        return self._expression_handlers[type(expression)](expression, env)

    def execute_block(self, statements: Tuple[ast.Statement, ...], env: Environment) -> Optional[Signal]:
        """Runs statements in `env`, stopping at the first control signal."""
        for statement in statements:
            signal = self.execute(statement, env)
            if signal is not None:
                return signal
        return None

    # --- Statements ---

    def _execute_expression_statement(self, node: ast.ExpressionStatement, env: Environment) -> None:
        self.evaluate(node.expression, env)

    def _execute_var_declaration(self, node: ast.VarDeclaration, env: Environment) -> None:
        value = self.evaluate(node.initializer, env) if node.initializer is not None else None
        env.define(node.name, value)

    def _execute_function_declaration(self, node: ast.FunctionDeclaration, env: Environment) -> None:
        function = node.function
        env.define(function.name, Closure(function.name, function.parameters, function.body, env))

    def _execute_block_statement(self, node: ast.Block, env: Environment) -> Optional[Signal]:
        return self.execute_block(node.statements, env.child())

    def _execute_if(self, node: ast.If, env: Environment) -> Optional[Signal]:
        if self._condition(node.condition, env, "if"):
            return self.execute(node.then_branch, env)
        if node.else_branch is not None:
            return self.execute(node.else_branch, env)
        return None

    def _execute_while(self, node: ast.While, env: Environment) -> Optional[Signal]:
        while self._condition(node.condition, env, "while"):
            signal = self.execute(node.body, env)
            if signal is BREAK:
                break
            if isinstance(signal, ReturnSignal):
                return signal
        return None

    def _execute_for(self, node: ast.For, env: Environment) -> Optional[Signal]:
        loop_env = env.child()
        if node.initializer is not None:
            self.execute(node.initializer, loop_env)
        while node.condition is None or self._condition(node.condition, loop_env, "for"):
            signal = self.execute(node.body, loop_env)
            if signal is BREAK:
                break
            if isinstance(signal, ReturnSignal):
                return signal
            if node.increment is not None:
                self.evaluate(node.increment, loop_env)
        return None

    def _execute_return(self, node: ast.Return, env: Environment) -> ReturnSignal:
        value = self.evaluate(node.value, env) if node.value is not None else None
        return ReturnSignal(value)

    def _execute_log(self, node: ast.Log, env: Environment) -> None:
        parts = [to_display(self.evaluate(value, env)) for value in node.values]
        print(" ".join(parts), file=self.output)

    def _condition(self, expression: ast.Expression, env: Environment, construct: str) -> bool:
        value = self.evaluate(expression, env)
        if not isinstance(value, bool):
            raise ReefTypeError(
                f"Condition of '{construct}' must be a boolean, got {type_name(value)}", expression.position
            )
        return value

    # --- Expressions ---

    def _evaluate_identifier(self, node: ast.Identifier, env: Environment) -> Any:
        try:
            return env.lookup(node.name)
        except UndefinedVariableError as e:
            if e.position is None:
                e.position = node.position
            raise

    def _evaluate_assignment(self, node: ast.Assignment, env: Environment) -> Any:
        value = self.evaluate(node.value, env)
        try:
            env.assign(node.name, value)
        except UndefinedVariableError as e:
            if e.position is None:
                e.position = node.position
            raise
        return value

    def _evaluate_unary(self, node: ast.Unary, env: Environment) -> Any:
        operand = self.evaluate(node.operand, env)
        if node.operator == "typeof":
            return type_name(operand)
        if node.operator == "-":
            if type_name(operand) != "number":
                raise ReefTypeError(f"Operand of '-' must be a number, got {type_name(operand)}", node.position)
            return -operand
        if node.operator == "not":
            if not isinstance(operand, bool):
                raise ReefTypeError(f"Operand of 'not' must be a boolean, got {type_name(operand)}", node.position)
            return not operand
        raise ReefRuntimeError(f"Unknown unary operator '{node.operator}'", node.position)

    def _evaluate_binary(self, node: ast.Binary, env: Environment) -> Any:
        left = self.evaluate(node.left, env)
        right = self.evaluate(node.right, env)
        op = node.operator
        left_kind, right_kind = type_name(left), type_name(right)

        if op == "==":
            return values_equal(left, right)
        if op == "!=":
            return not values_equal(left, right)

        if op == "+":
            if left_kind == right_kind and left_kind in ("number", "string"):
                return left + right
            raise ReefTypeError(
                f"Operands of '+' must be two numbers or two strings, got {left_kind} and {right_kind}",
                node.position,
            )

        if op in _ARITHMETIC:
            if left_kind != "number" or right_kind != "number":
                raise ReefTypeError(
                    f"Operands of '{op}' must be numbers, got {left_kind} and {right_kind}", node.position
                )
            if op in ("/", "%") and right == 0:
                raise ReefArithmeticError("Division by zero" if op == "/" else "Modulo by zero", node.position)
            return _ARITHMETIC[op](left, right)

        if op in _COMPARISON:
            if left_kind != right_kind or left_kind not in ("number", "string"):
                raise ReefTypeError(
                    f"Operands of '{op}' must be two numbers or two strings, got {left_kind} and {right_kind}",
                    node.position,
                )
            return _COMPARISON[op](left, right)

        raise ReefRuntimeError(f"Unknown binary operator '{op}'", node.position)

    def _evaluate_logical(self, node: ast.Logical, env: Environment) -> bool:
        left = self._logical_operand(node, node.left, env)
        if node.operator == "or" and left:
            return True
        if node.operator == "and" and not left:
            return False
        return self._logical_operand(node, node.right, env)

    def _logical_operand(self, node: ast.Logical, operand: ast.Expression, env: Environment) -> bool:
        value = self.evaluate(operand, env)
        if not isinstance(value, bool):
            raise ReefTypeError(
                f"Operands of '{node.operator}' must be booleans, got {type_name(value)}", operand.position
            )
        return value

    def _evaluate_function_expression(self, node: ast.FunctionExpression, env: Environment) -> Closure:
        return Closure(node.name, node.parameters, node.body, env)

    def _evaluate_call(self, node: ast.Call, env: Environment) -> Any:
        callee = self.evaluate(node.callee, env)
        arguments = [self.evaluate(argument, env) for argument in node.arguments]
        return self.call(callee, arguments, node.position)

    # --- Calls ---

    def call(self, callee: Any, arguments: List[Any], position: Optional[SourcePosition] = None) -> Any:
        """
        Applies a function value to already-evaluated arguments.

        Args:
            callee: A Closure or NativeFunction.
            arguments: Argument values, left to right.
            position: Position of the call expression, used in errors and traces.

        Returns:
            The value of the executed 'return', or None when the body runs off its end.

        Raises:
            ReefTypeError: If callee is not a function.
            ArityError: If the argument count differs from the callee's parameter count.
            StackOverflowError: If the call would exceed the maximum call depth.
        """
        if not is_callable_value(callee):
            raise ReefTypeError(f"Can only call functions, got {type_name(callee)}", position)
        if len(arguments) != callee.arity:
            raise ArityError(
                f"Function '{callee.display_name}' expects {callee.arity} argument(s) but got {len(arguments)}",
                position,
            )

        frame = CallFrame(function_name=callee.display_name, call_position=position)
        self.call_stack.push(frame)
        if self.debug_level >= 2:
            logger.debug(f"Call {frame.describe()} (depth {self.call_stack.depth}) with args {arguments}")
        try:
            result = self._invoke(callee, arguments, position)
        except ReefRuntimeError as e:
            e.add_frame(frame.describe())
            if self.debug_level >= 2:
                logger.debug(f"Unwinding {frame.describe()}: {e.kind}: {e.message}")
            raise
        finally:
            self.call_stack.pop()
        if self.debug_level >= 2:
            logger.debug(f"Return from {callee.display_name}: {result!r}")
        return result

    def _invoke(self, callee: Any, arguments: List[Any], position: Optional[SourcePosition]) -> Any:
        if isinstance(callee, NativeFunction):
            try:
                return callee.fn(*arguments)
            except ReefRuntimeError as e:
                if e.position is None:
                    e.position = position
                raise

        call_env = callee.environment.extend(dict(zip(callee.parameters, arguments)))
        signal = self.execute_block(callee.body.statements, call_env)
        if isinstance(signal, ReturnSignal):
            return signal.value
        return None
