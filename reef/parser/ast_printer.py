"""
Renders Reef ASTs as S-expressions using the 'sexpdata' library.

Used for debug tracing of parsed programs and for structural assertions in
tests. Every concrete node class must have a converter; the printer refuses to
construct otherwise.
"""

from typing import Any, Callable, Dict, List, Type

from sexpdata import Symbol, dumps

from reef.parser import ast_nodes as ast


def _number(value: float) -> Any:
    # Integral floats print as integers so the dump reads like the source.
    if value == value and value not in (float("inf"), float("-inf")) and value.is_integer():
        return int(value)
    return value


class AstPrinter:
    """
    Converts AST nodes into nested lists of sexpdata Symbols and atoms.
    """

    def __init__(self):
        self._converters: Dict[Type[ast.Node], Callable[[Any], Any]] = {
            ast.Program: lambda n: [Symbol("program")] + [self.to_data(s) for s in n.statements],
            ast.NumberLiteral: lambda n: _number(n.value),
            ast.StringLiteral: lambda n: n.value,
            ast.BooleanLiteral: lambda n: Symbol("true" if n.value else "false"),
            ast.NilLiteral: lambda n: Symbol("nil"),
            ast.Identifier: lambda n: Symbol(n.name),
            ast.Grouping: lambda n: [Symbol("group"), self.to_data(n.expression)],
            ast.Unary: lambda n: [Symbol(n.operator), self.to_data(n.operand)],
            ast.Binary: lambda n: [Symbol(n.operator), self.to_data(n.left), self.to_data(n.right)],
            ast.Logical: lambda n: [Symbol(n.operator), self.to_data(n.left), self.to_data(n.right)],
            ast.Assignment: lambda n: [Symbol("set!"), Symbol(n.name), self.to_data(n.value)],
            ast.Call: lambda n: [Symbol("call"), self.to_data(n.callee)] + [self.to_data(a) for a in n.arguments],
            ast.FunctionExpression: self._function,
            ast.ExpressionStatement: lambda n: [Symbol("expr"), self.to_data(n.expression)],
            ast.VarDeclaration: self._var,
            ast.FunctionDeclaration: lambda n: self._function(n.function),
            ast.Block: lambda n: [Symbol("block")] + [self.to_data(s) for s in n.statements],
            ast.If: self._if,
            ast.While: lambda n: [Symbol("while"), self.to_data(n.condition), self.to_data(n.body)],
            ast.For: self._for,
            ast.Return: lambda n: [Symbol("return")] + ([self.to_data(n.value)] if n.value is not None else []),
            ast.Break: lambda n: [Symbol("break")],
            ast.Continue: lambda n: [Symbol("continue")],
            ast.Log: lambda n: [Symbol("log")] + [self.to_data(v) for v in n.values],
        }
        missing = [t.__name__ for t in ast.concrete_node_types(ast.Node) if t not in self._converters]
        if missing:
            raise TypeError(f"AstPrinter has no converter for node types: {missing}")

    def to_data(self, node: ast.Node) -> Any:
        """Converts a node into sexpdata-compatible Python data."""
        try:
            converter = self._converters[type(node)]
        except KeyError:
            raise TypeError(f"Cannot print unknown node type {type(node).__name__}") from None
        return converter(node)

    def dumps(self, node: ast.Node) -> str:
        """Returns the S-expression text for `node`."""
        return dumps(self.to_data(node))

    def _function(self, node: ast.FunctionExpression) -> List[Any]:
        head = [Symbol("fun")]
        if node.name is not None:
            head.append(Symbol(node.name))
        return head + [[Symbol(p) for p in node.parameters], self.to_data(node.body)]

    def _var(self, node: ast.VarDeclaration) -> List[Any]:
        data = [Symbol("var"), Symbol(node.name)]
        if node.initializer is not None:
            data.append(self.to_data(node.initializer))
        return data

    def _if(self, node: ast.If) -> List[Any]:
        data = [Symbol("if"), self.to_data(node.condition), self.to_data(node.then_branch)]
        if node.else_branch is not None:
            data.append(self.to_data(node.else_branch))
        return data

    def _for(self, node: ast.For) -> List[Any]:
        def optional(child):
            return self.to_data(child) if child is not None else Symbol("nil")

        return [
            Symbol("for"),
            optional(node.initializer),
            optional(node.condition),
            optional(node.increment),
            self.to_data(node.body),
        ]


_default_printer = None


def to_sexp(node: ast.Node) -> str:
    """Module-level shortcut: S-expression text for `node`."""
    global _default_printer
    if _default_printer is None:
        _default_printer = AstPrinter()
    return _default_printer.dumps(node)
