from reef.evaluator.environment import Environment
from reef.evaluator.evaluator import Evaluator
from reef.evaluator.values import Closure, NativeFunction

__all__ = ["Environment", "Evaluator", "Closure", "NativeFunction"]
