"""
System-wide Pydantic models shared by the lexer, parser, evaluator and drivers.
"""

import logging
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt

# Configure logger
logger = logging.getLogger(__name__)

# The host recursion limit grows with the call depth; past this the C stack
# of older interpreters can overflow before a StackOverflowError is raised.
MAX_CALL_DEPTH = 1000

# --- Source Positions ---

class SourcePosition(BaseModel):
    """
    Location of a token or node inside one compilation unit.

    Lines and columns are 1-based; offset is the 0-based byte offset
    into the UTF-8 encoded source text of the unit.
    """
    model_config = ConfigDict(frozen=True)

    line: PositiveInt = 1
    column: PositiveInt = 1
    offset: NonNegativeInt = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


# --- Configuration ---

class InterpreterConfig(BaseModel):
    """
    Settings consulted by the Session, Evaluator and REPL.

    debug_level 0 disables tracing; 1 traces tokens, the AST dump and each
    top-level statement; 2 and above also trace calls and error unwinding.
    """
    model_config = ConfigDict(validate_assignment=True)

    debug_level: NonNegativeInt = 0
    max_call_depth: PositiveInt = Field(200, le=MAX_CALL_DEPTH)
    prompt: str = "reef> "
    continuation_prompt: str = "...> "
    log_file: Optional[str] = None


# --- Execution Results ---

ExecutionStatus = Literal["COMPLETE", "FAILED"]
"""
Outcome of running one compilation unit.
"""

class ErrorReport(BaseModel):
    """Serializable description of a lexical, syntax or runtime error."""
    kind: str = Field(description="Error kind label, e.g. 'TypeError' or 'ArityError'.")
    message: str
    line: Optional[PositiveInt] = None
    column: Optional[PositiveInt] = None
    incomplete: bool = Field(False, description="True when the unit simply ran out of input mid-construct.")
    trace: List[str] = Field(default_factory=list, description="Language-level call frames, innermost first.")

    def format(self) -> str:
        """Renders the report as '<ErrorKind> at line:col: <message>'."""
        if self.line is not None and self.column is not None:
            return f"{self.kind} at {self.line}:{self.column}: {self.message}"
        return f"{self.kind}: {self.message}"


class ExecutionResult(BaseModel):
    """
    Result of evaluating one compilation unit through a Session.

    `value` is the value of the final statement when that statement was an
    expression statement (`has_value` is then True); otherwise it is None.
    """
    status: ExecutionStatus
    value: Any = None
    has_value: bool = False
    error: Optional[ErrorReport] = None

    @property
    def ok(self) -> bool:
        return self.status == "COMPLETE"
