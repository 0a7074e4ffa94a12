"""REPL interface for interactive Reef sessions."""
import logging
from enum import Enum
from typing import Callable, List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from reef.config.logging_config import level_for_debug
from reef.driver.session import Session
from reef.evaluator.values import to_repr
from reef.system.models import ExecutionResult

logger = logging.getLogger(__name__)


class ReplState(Enum):
    COLLECTING = "collecting"
    EVALUATING = "evaluating"
    REPORTING = "reporting"


class Repl:
    """Interactive REPL (Read-Eval-Print Loop) interface.

    Lines are collected into a buffer until they form a complete submission,
    which is then evaluated against the session's persistent bindings.
    """

    def __init__(
        self,
        session: Session,
        input_func: Callable[[str], str] = input,
        console: Optional[Console] = None,
    ):
        """Initialize the REPL interface.

        Args:
            session: The Session that owns the global bindings
            input_func: Reads one line given a prompt (defaults to input())
            console: Optional rich Console for output (defaults to stdout)
        """
        self.session = session
        self.input_func = input_func
        self.console = console or Console()
        self.state = ReplState.COLLECTING
        self.buffer: List[str] = []
        self.running = False
        self.commands = {
            "/help": self._cmd_help,
            "/exit": self._cmd_exit,
            "/reset": self._cmd_reset,
            "/env": self._cmd_env,
            "/debug": self._cmd_debug,
            "/abort": self._cmd_abort,
        }

    @property
    def prompt(self) -> str:
        config = self.session.config
        return config.continuation_prompt if self.buffer else config.prompt

    def _print(self, text: str, style: Optional[str] = None) -> None:
        if style:
            text = f"[{style}]{escape(text)}[/{style}]"
        else:
            text = escape(text)
        self.console.print(text, highlight=False, soft_wrap=True)

    def start(self) -> None:
        """Start the REPL interface.

        Reads lines until /exit or end of input. Ctrl-C discards the pending
        submission and keeps the session running.
        """
        self._print("Reef REPL. Type /help for commands, /exit to quit.")
        self.running = True
        while self.running:
            try:
                line = self.input_func(self.prompt)
            except KeyboardInterrupt:
                if self.buffer:
                    self._discard_buffer()
                    self._print("Submission aborted", style="yellow")
                else:
                    self._print("")
                continue
            except EOFError:
                self._print("\nExiting...")
                break
            self.process_line(line)
        self.running = False

    def process_line(self, line: str) -> None:
        """Process one line of user input.

        Args:
            line: Input from the user, without the trailing newline
        """
        stripped = line.strip()

        if not self.buffer:
            if not stripped:
                return
            if stripped.startswith("/"):
                self._handle_command(stripped)
                return
        elif stripped == "/abort":
            self._handle_command(stripped)
            return

        self.buffer.append(line)
        source = "\n".join(self.buffer)
        if not self.session.is_complete(source):
            logger.debug(f"Submission incomplete after {len(self.buffer)} line(s); collecting")
            return

        self.state = ReplState.EVALUATING
        result = self.session.run(source, unit_name="<repl>")
        self.state = ReplState.REPORTING
        self._report(result)
        self._discard_buffer()

    def _discard_buffer(self) -> None:
        self.buffer = []
        self.state = ReplState.COLLECTING

    def _report(self, result: ExecutionResult) -> None:
        if result.ok:
            if result.has_value and result.value is not None:
                self._print(to_repr(result.value), style="green")
            return
        self._print(result.error.format(), style="red")
        if self.session.debug_level >= 2:
            for frame in result.error.trace:
                self._print(f"  {frame}")

    def _handle_command(self, command: str) -> None:
        """Handle a command input.

        Args:
            command: Command from the user
        """
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        if cmd in self.commands:
            self.commands[cmd](args)
        else:
            self._print(f"Unknown command: {cmd}")
            self._print("Type /help for available commands")

    def _cmd_help(self, args: str) -> None:
        self._print("Available commands:")
        self._print("  /help - Show this help")
        self._print("  /env - List global bindings")
        self._print("  /reset - Discard all bindings")
        self._print("  /debug [N] - Show or set the debug level")
        self._print("  /abort - Discard a pending multi-line submission")
        self._print("  /exit - Exit the REPL")

    def _cmd_exit(self, args: str) -> None:
        self._print("Exiting...")
        self.running = False

    def _cmd_reset(self, args: str) -> None:
        self.session.reset()
        self._print("Session reset")

    def _cmd_env(self, args: str) -> None:
        bindings = self.session.user_bindings()
        if not bindings:
            self._print("No bindings")
            return
        for name in sorted(bindings):
            self._print(f"  {name} = {to_repr(bindings[name])}")

    def _cmd_debug(self, args: str) -> None:
        """Handle the debug command.

        Args:
            args: Optional new debug level
        """
        if not args:
            self._print(f"Debug level: {self.session.debug_level}")
            return
        try:
            level = int(args)
            self.session.debug_level = level
        except (ValueError, ValidationError):
            self._print(f"Invalid debug level: {args}")
            self._print("Usage: /debug [N] with N >= 0")
            return
        logging.getLogger().setLevel(level_for_debug(level))
        self._print(f"Debug level set to {level}")

    def _cmd_abort(self, args: str) -> None:
        if not self.buffer:
            self._print("Nothing to abort")
            return
        self._discard_buffer()
        self._print("Submission aborted", style="yellow")
