"""
System-wide custom error types.

Every error raised by the lexer, parser or evaluator derives from ReefError and
carries the kind label used in user-facing messages, an optional source
position and, for runtime errors, the language-level call trace.
"""

from typing import List, Optional

from reef.system.models import ErrorReport, SourcePosition


class ReefError(Exception):
    """
    Base class for all errors reported to Reef users.

    Formats as '<ErrorKind> at line:col: <message>' when a position is known.
    """
    kind = "Error"

    def __init__(
        self,
        message: str,
        position: Optional[SourcePosition] = None,
        error_details: str = "",
        incomplete: bool = False,
    ):
        """
        Initializes the ReefError.

        Args:
            message: A high-level error message.
            position: Source position of the offending token or node, if known.
            error_details: Extra diagnostic details (shown only in debug output).
            incomplete: True when the input ended in the middle of a construct.
        """
        super().__init__(message)
        self.message = message
        self.position = position
        self.error_details = error_details
        self.incomplete = incomplete
        self.trace: List[str] = []

    def format(self) -> str:
        if self.position is not None:
            return f"{self.kind} at {self.position.line}:{self.position.column}: {self.message}"
        return f"{self.kind}: {self.message}"

    def to_report(self) -> ErrorReport:
        return ErrorReport(
            kind=self.kind,
            message=self.message,
            line=self.position.line if self.position else None,
            column=self.position.column if self.position else None,
            incomplete=self.incomplete,
            trace=list(self.trace),
        )

    def __str__(self) -> str:
        return self.format()


class ReefLexicalError(ReefError):
    """Raised by the Lexer for a character that starts no valid token."""
    kind = "LexicalError"


class ReefSyntaxError(ReefError):
    """Raised by the Parser for an unexpected or missing token."""
    kind = "SyntaxError"


class ReefIncompleteInputError(ReefSyntaxError):
    """
    Raised when the parser runs out of tokens in the middle of a construct.

    The REPL treats this as a request for more input rather than a failure.
    """

    def __init__(self, message: str, position: Optional[SourcePosition] = None, error_details: str = ""):
        super().__init__(message, position, error_details=error_details, incomplete=True)


class ReefRuntimeError(ReefError):
    """
    Base for errors raised while evaluating an AST.
    Indicates unbound names, type mismatches, bad arity and similar failures.
    """
    kind = "RuntimeError"

    def add_frame(self, frame_description: str) -> None:
        """Records one unwound call frame (innermost frames are added first)."""
        self.trace.append(frame_description)


class UndefinedVariableError(ReefRuntimeError):
    """Lookup of, or assignment to, a name that is bound in no enclosing scope."""
    kind = "UndefinedVariableError"

    def __init__(self, name: str, position: Optional[SourcePosition] = None):
        super().__init__(f"Undefined variable '{name}'", position)
        self.name = name


class ReefTypeError(ReefRuntimeError):
    """An operator, condition or call applied to a value of the wrong kind."""
    kind = "TypeError"


class ReefArithmeticError(ReefRuntimeError):
    """Division or modulo by zero."""
    kind = "ArithmeticError"


class ArityError(ReefRuntimeError):
    """A call supplied a different number of arguments than the callee declares."""
    kind = "ArityError"


class StackOverflowError(ReefRuntimeError):
    """The call depth limit was exceeded."""
    kind = "StackOverflowError"
