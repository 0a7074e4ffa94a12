"""Interactive read-eval-print loop."""

from reef.repl.repl import Repl, ReplState

__all__ = ["Repl", "ReplState"]
