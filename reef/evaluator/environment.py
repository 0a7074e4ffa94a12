"""
Lexical scoping environment for Reef evaluation.

An Environment is one scope frame: a mapping from names to values plus a
reference to the enclosing frame. The parent is fixed at construction, so a
chain of frames can never become cyclic. Closures keep frames alive simply by
holding a reference to them.
"""

import logging
from typing import Any, Dict, Iterator, Optional

from reef.system.errors import UndefinedVariableError

logger = logging.getLogger(__name__)


class Environment:
    """
    Represents one lexical scope frame, supporting lookup, definition,
    assignment and nested scopes.

    define() always binds in this frame (shadowing outer bindings);
    assign() only ever rebinds an existing name, so assignment never creates
    globals by accident.
    """

    def __init__(
        self,
        bindings: Optional[Dict[str, Any]] = None,
        parent: Optional['Environment'] = None
    ):
        """
        Initializes a new Environment.

        Args:
            bindings: An optional dictionary of initial variable bindings for this scope.
            parent: An optional parent environment for creating nested scopes.
                    Defaults to None, indicating a top-level scope.
        """
        self._bindings: Dict[str, Any] = dict(bindings) if bindings is not None else {}
        self._parent: Optional['Environment'] = parent

    @property
    def parent(self) -> Optional['Environment']:
        return self._parent

    @property
    def depth(self) -> int:
        """Number of frames between this one and the top-level frame."""
        depth = 0
        env = self._parent
        while env is not None:
            depth += 1
            env = env._parent
        return depth

    def _frames(self) -> Iterator['Environment']:
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env._parent

    def lookup(self, name: str) -> Any:
        """
        Looks up a variable name in the environment and its parent scopes.

        Args:
            name: The name of the variable to look up.

        Returns:
            The value associated with the nearest binding of the name.

        Raises:
            UndefinedVariableError: If the name is not found in this environment
                                    or any of its ancestor environments.
        """
        for env in self._frames():
            if name in env._bindings:
                return env._bindings[name]
        raise UndefinedVariableError(name)

    def define(self, name: str, value: Any) -> None:
        """
        Defines or redefines a variable in the *current* environment scope.
        This does not affect parent scopes.

        Args:
            name: The name of the variable to define.
            value: The evaluated value to associate with the name.
        """
        self._bindings[name] = value

    def assign(self, name: str, value: Any) -> None:
        """Sets the value of an *existing* variable in the current or an ancestor scope.

        Searches for the variable 'name' starting from the current environment
        and going up the parent chain. The first binding found is updated.

        Args:
            name: The name of the variable to update.
            value: The new value for the variable.

        Raises:
            UndefinedVariableError: If the name is not bound in any accessible scope.
        """
        for env in self._frames():
            if name in env._bindings:
                env._bindings[name] = value
                return
        raise UndefinedVariableError(name)

    def contains(self, name: str) -> bool:
        """True if the name is bound in this frame or any ancestor."""
        return any(name in env._bindings for env in self._frames())

    def child(self) -> 'Environment':
        """Creates an empty child scope whose parent is this environment."""
        return Environment(parent=self)

    def extend(self, bindings: Dict[str, Any]) -> 'Environment':
        """
        Creates a new child environment that extends the current environment.

        Args:
            bindings: Names and values to place in the child's local scope.

        Returns:
            A new Environment instance representing the child scope.
        """
        return Environment(bindings=bindings, parent=self)

    # --- Helper methods for inspection ---

    def get_local_bindings(self) -> Dict[str, Any]:
        """Returns a copy of the bindings defined directly in this scope."""
        return self._bindings.copy()

    def __repr__(self) -> str:
        parent_id = id(self._parent) if self._parent else None
        return f"<Environment id={id(self)} parent={parent_id} bindings={list(self._bindings.keys())}>"
