"""
Recursive-descent parser for Reef.

Consumes the token list of one compilation unit and produces a Program AST.
Statements are parsed by recursive descent, binary operators by precedence
climbing. The first error aborts the parse; there is no recovery.
"""

import logging
from typing import Dict, List, NoReturn, Optional

from reef.lexer.tokens import Token, TokenKind
from reef.parser.ast_nodes import (
    Assignment,
    Binary,
    Block,
    BooleanLiteral,
    Break,
    Call,
    Continue,
    Expression,
    ExpressionStatement,
    For,
    FunctionDeclaration,
    FunctionExpression,
    Grouping,
    Identifier,
    If,
    Log,
    Logical,
    NilLiteral,
    NumberLiteral,
    Program,
    Return,
    Statement,
    StringLiteral,
    Unary,
    VarDeclaration,
    While,
)
from reef.system.errors import ReefIncompleteInputError, ReefSyntaxError

logger = logging.getLogger(__name__)

# Binding power of binary operators; all of them are left-associative.
BINARY_PRECEDENCE: Dict[str, int] = {
    "or": 1,
    "and": 2,
    "==": 3, "!=": 3,
    "<": 4, "<=": 4, ">": 4, ">=": 4,
    "+": 5, "-": 5,
    "*": 6, "/": 6, "%": 6,
}

LOGICAL_OPERATORS = frozenset({"and", "or"})
UNARY_OPERATORS = frozenset({"-", "not", "typeof"})
MAX_PARAMETERS = 255


class Parser:
    """
    Builds a Program from tokens.

    Tracks how many loops and functions enclose the current position so that
    misplaced 'break', 'continue' and 'return' are rejected at parse time.
    """

    def __init__(self, tokens: List[Token]):
        """
        Args:
            tokens: Token list ending with an END_OF_INPUT token (as produced by Lexer.tokenize()).
        """
        if not tokens or tokens[-1].kind != TokenKind.END_OF_INPUT:
            raise ValueError("Token list must end with an END_OF_INPUT token.")
        self.tokens = tokens
        self.current = 0
        self._loop_depth = 0
        self._function_depth = 0

    def parse(self) -> Program:
        """
        Parses the whole token list.

        Returns:
            The Program node for this compilation unit.

        Raises:
            ReefSyntaxError: On the first unexpected token.
            ReefIncompleteInputError: When the tokens run out in the middle of a construct.
        """
        start = self._peek().position
        statements: List[Statement] = []
        while not self._at_end():
            statements.append(self._statement())
        program = Program(position=start, statements=tuple(statements))
        logger.debug(f"Parsed program with {len(statements)} top-level statements")
        return program

    # --- Statements ---

    def _statement(self) -> Statement:
        token = self._peek()
        if token.kind == TokenKind.KEYWORD:
            handler = {
                "var": self._var_declaration,
                "if": self._if_statement,
                "while": self._while_statement,
                "for": self._for_statement,
                "return": self._return_statement,
                "break": self._break_statement,
                "continue": self._continue_statement,
                "log": self._log_statement,
            }.get(token.lexeme)
            if handler is not None:
                return handler()
            # 'fun name(' declares; 'fun (' is an anonymous function expression statement.
            if token.lexeme == "fun" and self._peek(1).kind == TokenKind.IDENTIFIER:
                return self._function_declaration()
        if token.is_punctuation("{"):
            return self._block()
        return self._expression_statement()

    def _var_declaration(self) -> VarDeclaration:
        keyword = self._advance()
        name = self._consume_identifier("variable name")
        initializer = None
        if self._match_operator("="):
            initializer = self._expression()
        self._consume_terminator("variable declaration")
        return VarDeclaration(position=keyword.position, name=name.lexeme, initializer=initializer)

    def _function_declaration(self) -> FunctionDeclaration:
        keyword = self._advance()
        name = self._consume_identifier("function name")
        function = self._function_rest(keyword, name.lexeme)
        return FunctionDeclaration(position=keyword.position, function=function)

    def _function_rest(self, keyword: Token, name: Optional[str]) -> FunctionExpression:
        """Parses '(params) block' after 'fun' or 'fun name'."""
        self._consume_punctuation("(", "'(' after function name" if name else "'(' after 'fun'")
        parameters: List[str] = []
        if not self._check_punctuation(")"):
            while True:
                if len(parameters) >= MAX_PARAMETERS:
                    raise ReefSyntaxError(f"Cannot have more than {MAX_PARAMETERS} parameters", self._peek().position)
                parameter = self._consume_identifier("parameter name")
                if parameter.lexeme in parameters:
                    raise ReefSyntaxError(f"Duplicate parameter '{parameter.lexeme}'", parameter.position)
                parameters.append(parameter.lexeme)
                if not self._match_punctuation(","):
                    break
        self._consume_punctuation(")", "')' after parameters")

        # A function body is a fresh control context: loops outside it cannot be broken from inside.
        enclosing_loops = self._loop_depth
        self._loop_depth = 0
        self._function_depth += 1
        try:
            body = self._block()
        finally:
            self._function_depth -= 1
            self._loop_depth = enclosing_loops
        return FunctionExpression(position=keyword.position, name=name, parameters=tuple(parameters), body=body)

    def _block(self) -> Block:
        opening = self._consume_punctuation("{", "'{'")
        statements: List[Statement] = []
        while not self._check_punctuation("}"):
            if self._at_end():
                self._error_at_current("'}' to close block")
            statements.append(self._statement())
        self._advance()
        return Block(position=opening.position, statements=tuple(statements))

    def _if_statement(self) -> If:
        keyword = self._advance()
        condition = self._expression()
        self._consume_keyword("then", "'then' after if condition")
        then_branch = self._block()
        else_branch: Optional[Statement] = None
        if self._check_keyword("elseif"):
            # 'elseif' chains become nested If nodes in the else position.
            else_branch = self._if_statement()
        elif self._match_keyword("else"):
            else_branch = self._block()
        return If(position=keyword.position, condition=condition, then_branch=then_branch, else_branch=else_branch)

    def _while_statement(self) -> While:
        keyword = self._advance()
        condition = self._expression()
        self._consume_keyword("do", "'do' after loop condition")
        body = self._loop_body()
        return While(position=keyword.position, condition=condition, body=body)

    def _for_statement(self) -> For:
        keyword = self._advance()
        if not self._is_clause_header():
            # Condition loop: for condition do { ... }
            condition = self._expression()
            self._consume_keyword("do", "'do' after loop condition")
            body = self._loop_body()
            return For(position=keyword.position, condition=condition, body=body)

        self._consume_punctuation("(", "'(' after 'for'")
        initializer: Optional[Statement] = None
        if self._match_punctuation(";"):
            initializer = None
        elif self._check_keyword("var"):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition: Optional[Expression] = None
        if not self._check_punctuation(";"):
            condition = self._expression()
        self._consume_punctuation(";", "';' after loop condition")

        increment: Optional[Expression] = None
        if not self._check_punctuation(")"):
            increment = self._expression()
        self._consume_punctuation(")", "')' after for clauses")
        self._consume_keyword("do", "'do' after for clauses")
        body = self._loop_body()
        return For(
            position=keyword.position,
            initializer=initializer,
            condition=condition,
            increment=increment,
            body=body,
        )

    def _is_clause_header(self) -> bool:
        """
        True when the tokens after 'for' are '(' ... ';' ... ')' at the same nesting level.

        Unfinished input counts as a clause header so that the parse runs into
        end of input (and reports it as incomplete) instead of a misleading error.
        """
        if not self._check_punctuation("("):
            return False
        depth = 0
        index = self.current
        while index < len(self.tokens):
            token = self.tokens[index]
            if token.kind == TokenKind.END_OF_INPUT:
                return True
            if token.is_punctuation("(", "{"):
                depth += 1
            elif token.is_punctuation(")", "}"):
                depth -= 1
                if depth == 0:
                    return False
            elif token.is_punctuation(";") and depth == 1:
                return True
            index += 1
        return False

    def _loop_body(self) -> Block:
        self._loop_depth += 1
        try:
            return self._block()
        finally:
            self._loop_depth -= 1

    def _return_statement(self) -> Return:
        keyword = self._advance()
        if self._function_depth == 0:
            raise ReefSyntaxError("'return' outside of a function", keyword.position)
        value = None
        if not self._check_punctuation(";") and not self._at_end():
            value = self._expression()
        self._consume_terminator("return value")
        return Return(position=keyword.position, value=value)

    def _break_statement(self) -> Break:
        keyword = self._advance()
        if self._loop_depth == 0:
            raise ReefSyntaxError("'break' outside of a loop", keyword.position)
        self._consume_terminator("'break'")
        return Break(position=keyword.position)

    def _continue_statement(self) -> Continue:
        keyword = self._advance()
        if self._loop_depth == 0:
            raise ReefSyntaxError("'continue' outside of a loop", keyword.position)
        self._consume_terminator("'continue'")
        return Continue(position=keyword.position)

    def _log_statement(self) -> Log:
        keyword = self._advance()
        values = [self._expression()]
        while self._match_punctuation(","):
            values.append(self._expression())
        self._consume_terminator("log values")
        return Log(position=keyword.position, values=tuple(values))

    def _expression_statement(self) -> ExpressionStatement:
        expression = self._expression()
        self._consume_terminator("expression")
        return ExpressionStatement(position=expression.position, expression=expression)

    # --- Expressions ---

    def _expression(self) -> Expression:
        return self._assignment()

    def _assignment(self) -> Expression:
        target = self._binary(1)
        if self._check_operator("="):
            equals = self._advance()
            value = self._assignment()  # right-associative
            if isinstance(target, Identifier):
                return Assignment(position=target.position, name=target.name, value=value)
            raise ReefSyntaxError("Invalid assignment target", equals.position)
        return target

    def _binary(self, min_precedence: int) -> Expression:
        """Precedence climbing over BINARY_PRECEDENCE."""
        left = self._unary()
        while True:
            operator = self._binary_operator()
            if operator is None:
                return left
            precedence = BINARY_PRECEDENCE[operator]
            if precedence < min_precedence:
                return left
            self._advance()
            right = self._binary(precedence + 1)
            node_class = Logical if operator in LOGICAL_OPERATORS else Binary
            left = node_class(position=left.position, operator=operator, left=left, right=right)

    def _binary_operator(self) -> Optional[str]:
        token = self._peek()
        if token.kind == TokenKind.OPERATOR and token.lexeme in BINARY_PRECEDENCE:
            return token.lexeme
        if token.is_keyword("and", "or"):
            return token.lexeme
        return None

    def _unary(self) -> Expression:
        token = self._peek()
        if token.is_operator("-") or token.is_keyword("not", "typeof"):
            self._advance()
            operand = self._unary()
            return Unary(position=token.position, operator=token.lexeme, operand=operand)
        return self._call()

    def _call(self) -> Expression:
        expression = self._primary()
        while self._check_punctuation("("):
            self._advance()
            arguments: List[Expression] = []
            if not self._check_punctuation(")"):
                while True:
                    if len(arguments) >= MAX_PARAMETERS:
                        raise ReefSyntaxError(f"Cannot have more than {MAX_PARAMETERS} arguments", self._peek().position)
                    arguments.append(self._expression())
                    if not self._match_punctuation(","):
                        break
            self._consume_punctuation(")", "')' after arguments")
            expression = Call(position=expression.position, callee=expression, arguments=tuple(arguments))
        return expression

    def _primary(self) -> Expression:
        token = self._peek()
        if token.kind == TokenKind.NUMBER:
            self._advance()
            return NumberLiteral(position=token.position, value=token.value)
        if token.kind == TokenKind.STRING:
            self._advance()
            return StringLiteral(position=token.position, value=token.value)
        if token.kind == TokenKind.IDENTIFIER:
            self._advance()
            return Identifier(position=token.position, name=token.lexeme)
        if token.is_keyword("true", "false"):
            self._advance()
            return BooleanLiteral(position=token.position, value=token.lexeme == "true")
        if token.is_keyword("nil"):
            self._advance()
            return NilLiteral(position=token.position)
        if token.is_keyword("fun"):
            self._advance()
            return self._function_rest(token, None)
        if token.is_punctuation("("):
            self._advance()
            inner = self._expression()
            self._consume_punctuation(")", "')' after expression")
            return Grouping(position=token.position, expression=inner)
        self._error_at_current("expression")

    # --- Token helpers ---

    def _peek(self, distance: int = 0) -> Token:
        index = min(self.current + distance, len(self.tokens) - 1)
        return self.tokens[index]

    def _at_end(self) -> bool:
        return self._peek().kind == TokenKind.END_OF_INPUT

    def _advance(self) -> Token:
        token = self._peek()
        if not self._at_end():
            self.current += 1
        return token

    def _check_punctuation(self, symbol: str) -> bool:
        return self._peek().is_punctuation(symbol)

    def _check_keyword(self, word: str) -> bool:
        return self._peek().is_keyword(word)

    def _check_operator(self, symbol: str) -> bool:
        return self._peek().is_operator(symbol)

    def _match_punctuation(self, symbol: str) -> bool:
        if self._check_punctuation(symbol):
            self._advance()
            return True
        return False

    def _match_keyword(self, word: str) -> bool:
        if self._check_keyword(word):
            self._advance()
            return True
        return False

    def _match_operator(self, symbol: str) -> bool:
        if self._check_operator(symbol):
            self._advance()
            return True
        return False

    def _consume_punctuation(self, symbol: str, expected: str) -> Token:
        if self._check_punctuation(symbol):
            return self._advance()
        self._error_at_current(expected)

    def _consume_keyword(self, word: str, expected: str) -> Token:
        if self._check_keyword(word):
            return self._advance()
        self._error_at_current(expected)

    def _consume_identifier(self, expected: str) -> Token:
        if self._peek().kind == TokenKind.IDENTIFIER:
            return self._advance()
        self._error_at_current(expected)

    def _consume_terminator(self, after: str) -> None:
        """Consumes ';'. The terminator may be left out when nothing follows."""
        if self._match_punctuation(";") or self._at_end():
            return
        self._error_at_current(f"';' after {after}")

    def _error_at_current(self, expected: str) -> NoReturn:
        token = self._peek()
        message = f"Expected {expected} but found {token.describe()}"
        if token.kind == TokenKind.END_OF_INPUT:
            raise ReefIncompleteInputError(message, token.position)
        raise ReefSyntaxError(message, token.position)


def parse_tokens(tokens: List[Token]) -> Program:
    """Convenience wrapper: Parser(tokens).parse()."""
    return Parser(tokens).parse()
