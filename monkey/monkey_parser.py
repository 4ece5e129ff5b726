"""
Pratt (operator-precedence) parser for Monkey.

The parser never raises. Every problem is recorded as a message in
`Parser.errors` and the construct being parsed yields None; parsing then
carries on with the next token so that one run reports as many problems as
possible. Callers must check `errors` before evaluating the program.
"""
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Tuple

from monkey.monkey_ast import (
    ArrayLiteral, AssignStatement, BlockStatement, BooleanLiteral, CallExpression,
    Expression, ExpressionStatement, FunctionLiteral, Identifier, IfExpression,
    IndexExpression, InfixExpression, IntegerLiteral, LetStatement, PrefixExpression,
    Program, ReturnStatement, Statement, StringLiteral, WhileExpression,
)
from monkey.monkey_lexer import Lexer
from monkey.monkey_token import Token, TokenType

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2        # == !=
    LESS_GREATER = 3  # < >
    SUM = 4           # + -
    PRODUCT = 5       # * /
    PREFIX = 6        # !x -x
    CALL = 7          # f(x)
    INDEX = 8         # a[i]


PRECEDENCES: Dict[TokenType, Precedence] = {
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOT_EQ: Precedence.EQUALS,
    TokenType.LT: Precedence.LESS_GREATER,
    TokenType.GT: Precedence.LESS_GREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.LPAREN: Precedence.CALL,
    TokenType.LBRACKET: Precedence.INDEX,
}

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class Parser:
    """Builds a Program from the tokens of a Lexer."""

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.errors: List[str] = []

        self.cur_token: Token = Token(TokenType.EOF, "")
        self.peek_token: Token = Token(TokenType.EOF, "")

        self.prefix_parse_fns: Dict[TokenType, PrefixParseFn] = {
            TokenType.IDENT: self.parse_identifier,
            TokenType.INT: self.parse_integer_literal,
            TokenType.STRING: self.parse_string_literal,
            TokenType.TRUE: self.parse_boolean,
            TokenType.FALSE: self.parse_boolean,
            TokenType.BANG: self.parse_prefix_expression,
            TokenType.MINUS: self.parse_prefix_expression,
            TokenType.LPAREN: self.parse_grouped_expression,
            TokenType.LBRACKET: self.parse_array_literal,
            TokenType.IF: self.parse_if_expression,
            TokenType.WHILE: self.parse_while_expression,
            TokenType.FUNCTION: self.parse_function_literal,
        }
        self.infix_parse_fns: Dict[TokenType, InfixParseFn] = {
            TokenType.PLUS: self.parse_infix_expression,
            TokenType.MINUS: self.parse_infix_expression,
            TokenType.SLASH: self.parse_infix_expression,
            TokenType.ASTERISK: self.parse_infix_expression,
            TokenType.EQ: self.parse_infix_expression,
            TokenType.NOT_EQ: self.parse_infix_expression,
            TokenType.LT: self.parse_infix_expression,
            TokenType.GT: self.parse_infix_expression,
            TokenType.LPAREN: self.parse_call_expression,
            TokenType.LBRACKET: self.parse_index_expression,
        }

        # Fill cur_token and peek_token.
        self.next_token()
        self.next_token()

    # --- Token cursor ---

    def next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, t: TokenType) -> bool:
        return self.cur_token.type is t

    def peek_token_is(self, t: TokenType) -> bool:
        return self.peek_token.type is t

    def expect_peek(self, t: TokenType) -> bool:
        """Advances when the next token is `t`; records an error otherwise."""
        if self.peek_token_is(t):
            self.next_token()
            return True
        self.peek_error(t)
        return False

    def peek_error(self, t: TokenType):
        self.errors.append(f"expected next token to be {t}, got {self.peek_token.type} instead")

    def no_prefix_parse_fn_error(self, t: TokenType):
        self.errors.append(f"no prefix parse function for {t} found")

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    def _skip_optional_semicolon(self):
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

    # --- Statements ---

    def parse_program(self) -> Program:
        statements: List[Statement] = []
        while not self.cur_token_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()
        return Program(tuple(statements))

    def parse_statement(self) -> Optional[Statement]:
        if self.cur_token_is(TokenType.IDENT) and self.peek_token_is(TokenType.ASSIGN):
            return self.parse_assign_statement()
        match self.cur_token.type:
            case TokenType.LET:
                return self.parse_let_statement()
            case TokenType.RETURN:
                return self.parse_return_statement()
            case _:
                return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        token = self.cur_token
        if not self.expect_peek(TokenType.IDENT):
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)
        if not self.expect_peek(TokenType.ASSIGN):
            return None
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        self._skip_optional_semicolon()
        return LetStatement(token, name, value)

    def parse_assign_statement(self) -> AssignStatement:
        token = self.cur_token
        name = Identifier(token, token.literal)
        # cur_token: IDENT, peek_token: ASSIGN (checked by parse_statement)
        self.next_token()
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        self._skip_optional_semicolon()
        return AssignStatement(token, name, value)

    def parse_return_statement(self) -> ReturnStatement:
        token = self.cur_token
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        self._skip_optional_semicolon()
        return ReturnStatement(token, value)

    def parse_expression_statement(self) -> ExpressionStatement:
        token = self.cur_token
        expression = self.parse_expression(Precedence.LOWEST)
        self._skip_optional_semicolon()
        return ExpressionStatement(token, expression)

    def parse_block_statement(self) -> Optional[BlockStatement]:
        """Parses `{ ... }`; cur_token is the opening brace."""
        token = self.cur_token
        statements: List[Statement] = []
        self.next_token()
        while not self.cur_token_is(TokenType.RBRACE):
            if self.cur_token_is(TokenType.EOF):
                self.errors.append(f"expected next token to be {TokenType.RBRACE}, got {TokenType.EOF} instead")
                return None
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()
        return BlockStatement(token, tuple(statements))

    # --- Expressions ---

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None
        left = prefix()

        while not self.peek_token_is(TokenType.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)
        return left

    def parse_identifier(self) -> Identifier:
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[IntegerLiteral]:
        literal = self.cur_token.literal
        value = int(literal)
        if not INT64_MIN <= value <= INT64_MAX:
            self.errors.append(f"could not parse {literal} as integer")
            return None
        return IntegerLiteral(self.cur_token, value)

    def parse_string_literal(self) -> StringLiteral:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> BooleanLiteral:
        return BooleanLiteral(self.cur_token, self.cur_token_is(TokenType.TRUE))

    def parse_prefix_expression(self) -> PrefixExpression:
        token = self.cur_token
        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        return PrefixExpression(token, token.literal, right)

    def parse_infix_expression(self, left: Expression) -> InfixExpression:
        token = self.cur_token
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        return InfixExpression(token, left, token.literal, right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()
        expression = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(TokenType.RPAREN):
            return None
        return expression

    def _parse_condition(self) -> Tuple[bool, Optional[Expression]]:
        """Parses `( expr )` following an if/while keyword."""
        if not self.expect_peek(TokenType.LPAREN):
            return False, None
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(TokenType.RPAREN):
            return False, None
        return True, condition

    def parse_if_expression(self) -> Optional[IfExpression]:
        token = self.cur_token
        ok, condition = self._parse_condition()
        if not ok or not self.expect_peek(TokenType.LBRACE):
            return None
        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            if not self.expect_peek(TokenType.LBRACE):
                return None
            alternative = self.parse_block_statement()
            if alternative is None:
                return None
        return IfExpression(token, condition, consequence, alternative)

    def parse_while_expression(self) -> Optional[WhileExpression]:
        token = self.cur_token
        ok, condition = self._parse_condition()
        if not ok or not self.expect_peek(TokenType.LBRACE):
            return None
        body = self.parse_block_statement()
        if body is None:
            return None
        return WhileExpression(token, condition, body)

    def parse_function_literal(self) -> Optional[FunctionLiteral]:
        token = self.cur_token
        if not self.expect_peek(TokenType.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None or not self.expect_peek(TokenType.LBRACE):
            return None
        body = self.parse_block_statement()
        if body is None:
            return None
        return FunctionLiteral(token, parameters, body)

    def parse_function_parameters(self) -> Optional[Tuple[Identifier, ...]]:
        identifiers: List[Identifier] = []
        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return ()

        if not self.expect_peek(TokenType.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))
        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            if not self.expect_peek(TokenType.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return tuple(identifiers)

    def parse_call_expression(self, function: Expression) -> Optional[CallExpression]:
        token = self.cur_token
        arguments = self.parse_expression_list(TokenType.RPAREN)
        if arguments is None:
            return None
        return CallExpression(token, function, arguments)

    def parse_array_literal(self) -> Optional[ArrayLiteral]:
        token = self.cur_token
        elements = self.parse_expression_list(TokenType.RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(token, elements)

    def parse_index_expression(self, left: Expression) -> Optional[IndexExpression]:
        token = self.cur_token
        self.next_token()
        index = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(TokenType.RBRACKET):
            return None
        return IndexExpression(token, left, index)

    def parse_expression_list(self, end: TokenType) -> Optional[Tuple[Optional[Expression], ...]]:
        """Parses comma separated expressions up to the `end` token."""
        items: List[Optional[Expression]] = []
        if self.peek_token_is(end):
            self.next_token()
            return ()

        self.next_token()
        items.append(self.parse_expression(Precedence.LOWEST))
        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            items.append(self.parse_expression(Precedence.LOWEST))

        if not self.expect_peek(end):
            return None
        return tuple(items)


def parse(source: str) -> Tuple[Program, List[str]]:
    """Tokenizes and parses `source`, returning the program and its parse errors."""
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors
