"""AST node definitions for Reef programs.

Nodes are frozen Pydantic models: pure data with no behavior. The family is
closed; consumers that dispatch on node classes call `concrete_node_types`
to verify they handle every kind, so a new node class cannot be silently
ignored.
"""
from typing import List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict

from reef.system.models import SourcePosition


class Node(BaseModel):
    """
    Base of every AST node.

    Attributes:
        position: Source position of the node's first token.
    """
    model_config = ConfigDict(frozen=True)

    position: SourcePosition


class Expression(Node):
    """Base of nodes that produce a value."""


class Statement(Node):
    """Base of nodes executed for their effect."""


# --- Expressions ---

class NumberLiteral(Expression):
    value: float


class StringLiteral(Expression):
    value: str


class BooleanLiteral(Expression):
    value: bool


class NilLiteral(Expression):
    pass


class Identifier(Expression):
    name: str


class Grouping(Expression):
    """A parenthesized expression, kept so the tree mirrors the source."""
    expression: Expression


class Unary(Expression):
    """Prefix operator application: '-', 'not' or 'typeof'."""
    operator: str
    operand: Expression


class Binary(Expression):
    """Arithmetic, comparison or equality operator application."""
    operator: str
    left: Expression
    right: Expression


class Logical(Expression):
    """Short-circuiting 'and' / 'or'."""
    operator: str
    left: Expression
    right: Expression


class Assignment(Expression):
    """Rebinding of an existing name: name = value."""
    name: str
    value: Expression


class Call(Expression):
    callee: Expression
    arguments: Tuple[Expression, ...] = ()


# --- Statements ---

class ExpressionStatement(Statement):
    expression: Expression


class VarDeclaration(Statement):
    name: str
    initializer: Optional[Expression] = None


class Block(Statement):
    statements: Tuple[Statement, ...] = ()


class FunctionExpression(Expression):
    """
    A function literal. Named when it comes from a 'fun name(...)' declaration,
    anonymous (name None) when written inline as an expression.
    """
    name: Optional[str] = None
    parameters: Tuple[str, ...] = ()
    body: Block


class FunctionDeclaration(Statement):
    function: FunctionExpression

    @property
    def name(self) -> str:
        return self.function.name


class If(Statement):
    condition: Expression
    then_branch: Block
    else_branch: Optional[Statement] = None  # a Block, or a nested If for 'elseif'


class While(Statement):
    condition: Expression
    body: Block


class For(Statement):
    """C-style loop; the condition-only form leaves initializer and increment empty."""
    initializer: Optional[Statement] = None
    condition: Optional[Expression] = None
    increment: Optional[Expression] = None
    body: Block


class Return(Statement):
    value: Optional[Expression] = None


class Break(Statement):
    pass


class Continue(Statement):
    pass


class Log(Statement):
    values: Tuple[Expression, ...]


class Program(Node):
    """Root of one compilation unit."""
    statements: Tuple[Statement, ...] = ()


def concrete_node_types(base: Type[Node]) -> List[Type[Node]]:
    """
    Returns every concrete (leaf) node class deriving from `base`.

    Args:
        base: Node, Expression or Statement.

    Returns:
        Leaf subclasses in definition order.
    """
    leaves: List[Type[Node]] = []
    for subclass in base.__subclasses__():
        if subclass.__subclasses__():
            leaves.extend(concrete_node_types(subclass))
        else:
            leaves.append(subclass)
    return leaves
