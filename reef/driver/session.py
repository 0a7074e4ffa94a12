"""
Session: runs compilation units against a persistent global environment.

A Session is the single recovery boundary for Reef errors. Lexical and syntax
errors abort a unit before it runs; a runtime error aborts the rest of the
unit, but bindings made by statements that already completed are kept.
"""
import logging
import sys
from typing import Any, Dict, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from reef.evaluator.builtins import install_prelude, prelude_bindings
from reef.evaluator.environment import Environment
from reef.evaluator.evaluator import Evaluator
from reef.lexer.lexer import Lexer
from reef.parser.ast_nodes import Program
from reef.parser.ast_printer import to_sexp
from reef.parser.parser import Parser
from reef.system.errors import ReefError, ReefSyntaxError
from reef.system.models import ExecutionResult, InterpreterConfig

logger = logging.getLogger(__name__)


class Session:
    """
    Owns the global environment and the evaluator for one interpreter run
    (a REPL session or a single file).
    """

    def __init__(self, config: Optional[InterpreterConfig] = None, output: Optional[TextIO] = None):
        """
        Args:
            config: Interpreter settings. Defaults to InterpreterConfig().
            output: Stream that 'log' statements write to. Defaults to sys.stdout.
        """
        self.config = config if config is not None else InterpreterConfig()
        self.output = output if output is not None else sys.stdout
        self.evaluator = Evaluator(
            max_call_depth=self.config.max_call_depth,
            debug_level=self.config.debug_level,
            output=self.output,
        )
        self.global_env = self._new_global_env()

    @staticmethod
    def _new_global_env() -> Environment:
        env = Environment()
        install_prelude(env)
        return env

    @property
    def debug_level(self) -> int:
        return self.config.debug_level

    @debug_level.setter
    def debug_level(self, level: int) -> None:
        self.config.debug_level = level  # validated by pydantic
        self.evaluator.debug_level = level

    def parse(self, source: str, trace: bool = True) -> Program:
        """
        Lexes and parses one compilation unit.

        Args:
            source: The complete text of the unit.
            trace: When False, nothing is traced even at debug level >= 1.

        Raises:
            ReefLexicalError, ReefSyntaxError: On the first error in the unit.
        """
        debug_level = self.debug_level if trace else 0
        tokens = Lexer(source, debug_level=debug_level).tokenize()
        try:
            program = Parser(tokens).parse()
        except RecursionError:
            raise ReefSyntaxError("Expression nesting is too deep") from None
        if debug_level >= 1:
            try:
                logger.info(f"AST: {to_sexp(program)}")
            except RecursionError:
                logger.info("AST: <too deeply nested to print>")
        return program

    def run(self, source: str, unit_name: str = "<input>") -> ExecutionResult:
        """
        Lexes, parses and evaluates one compilation unit.

        Args:
            source: The complete text of the unit.
            unit_name: File name or '<repl>', used in diagnostics.

        Returns:
            An ExecutionResult. Errors are reported in it, never raised.
        """
        logger.debug(f"Running unit {unit_name} ({len(source)} chars)")
        try:
            program = self.parse(source)
            value, has_value = self.evaluator.execute_program(program, self.global_env)
        except ReefError as e:
            logger.info(f"Unit {unit_name} failed: {e}")
            if self.debug_level >= 2 and e.trace:
                logger.debug(f"Call trace for {unit_name}: {e.trace}")
            return ExecutionResult(status="FAILED", error=e.to_report())
        return ExecutionResult(status="COMPLETE", value=value, has_value=has_value)

    def is_complete(self, source: str) -> bool:
        """
        True unless the text stops in the middle of a construct.

        Any other lexical or syntax error counts as complete, so that it is
        reported immediately instead of waiting for more input.
        """
        try:
            self.parse(source, trace=False)
        except ReefError as e:
            return not e.incomplete
        return True

    def reset(self) -> None:
        """Discards every binding made so far; the prelude is reinstalled."""
        self.global_env = self._new_global_env()
        self.evaluator.call_stack.clear()
        logger.info("Session reset")

    def user_bindings(self) -> Dict[str, Any]:
        """Global bindings other than untouched prelude functions."""
        prelude = prelude_bindings()
        return {
            name: value
            for name, value in self.global_env.get_local_bindings().items()
            if prelude.get(name) is not value
        }


def run_file(
    path: str,
    config: Optional[InterpreterConfig] = None,
    output: Optional[TextIO] = None,
    console: Optional[Console] = None,
) -> int:
    """
    Runs a source file as a single compilation unit.

    Args:
        path: File to run.
        config: Interpreter settings.
        output: Stream for 'log' output. Defaults to sys.stdout.
        console: Console that errors are reported on. Defaults to a stderr console.

    Returns:
        0 on success, 1 on a lexical, syntax or runtime error, 2 if the file cannot be read.
    """
    console = console if console is not None else Console(stderr=True)
    try:
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.info(f"Cannot read {path}: {e}")
        console.print(f"[red]Error: cannot read '{escape(path)}': {escape(str(e))}[/red]", highlight=False, soft_wrap=True)
        return 2

    session = Session(config, output=output)
    result = session.run(source, unit_name=path)
    if result.ok:
        return 0

    console.print(f"[red]{escape(result.error.format())}[/red]", highlight=False, soft_wrap=True)
    if session.debug_level >= 2:
        for frame in result.error.trace:
            console.print(f"  {escape(frame)}", highlight=False, soft_wrap=True)
    return 1
