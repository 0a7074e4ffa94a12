"""
Bounded stack of active function calls.
"""
import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from reef.system.errors import StackOverflowError
from reef.system.models import SourcePosition

logger = logging.getLogger(__name__)


class CallFrame(BaseModel):
    """One active call: which function, and where it was called from."""
    model_config = ConfigDict(frozen=True)

    function_name: str
    call_position: Optional[SourcePosition] = None

    def describe(self) -> str:
        if self.call_position is None:
            return f"in {self.function_name}"
        return f"in {self.function_name} called at {self.call_position}"


class CallStack:
    """
    Tracks call depth and refuses to grow past `max_depth` frames.
    """

    def __init__(self, max_depth: int):
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        self.max_depth = max_depth
        self._frames: List[CallFrame] = []

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> List[CallFrame]:
        return list(self._frames)

    def push(self, frame: CallFrame) -> None:
        """
        Pushes a frame for a new call.

        Raises:
            StackOverflowError: If the stack already holds max_depth frames.
        """
        if len(self._frames) >= self.max_depth:
            raise StackOverflowError(
                f"Maximum call depth of {self.max_depth} exceeded in call to '{frame.function_name}'",
                frame.call_position,
            )
        self._frames.append(frame)

    def pop(self) -> CallFrame:
        return self._frames.pop()

    def clear(self) -> None:
        self._frames.clear()
