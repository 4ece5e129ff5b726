"""
Defines the abstract syntax tree built by the Monkey parser.

Every node is a frozen dataclass: the parser assembles a node once, with
all of its children, and nothing mutates it afterwards. Sequences are held
as tuples for the same reason. `str(node)` produces the debug rendering,
which is also valid Monkey source for expression-only programs.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Optional, Tuple

from monkey.monkey_token import Token


def _render(node) -> str:
    # Failed sub-parses leave None placeholders behind.
    return "" if node is None else str(node)


def _join(nodes, sep: str = ", ") -> str:
    return sep.join(_render(n) for n in nodes)


class Node(ABC):
    """Base class for every AST node."""
    token: Token

    def token_literal(self) -> str:
        return self.token.literal


class Statement(Node):
    pass


class Expression(Node):
    pass


# =================================================================
# Root
# =================================================================

@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        return self.statements[0].token_literal() if self.statements else ""

    def __str__(self) -> str:
        return _join(self.statements, "; ")


# =================================================================
# Expressions
# =================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    token: Token
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    token: Token
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expression):
    token: Token
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    token: Token
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class PrefixExpression(Expression):
    """`!x` or `-x`."""
    token: Token
    operator: str
    right: Optional[Expression]

    def __str__(self) -> str:
        return f"({self.operator}{_render(self.right)})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    """A binary operation such as `5 + 5`."""
    token: Token
    left: Optional[Expression]
    operator: str
    right: Optional[Expression]

    def __str__(self) -> str:
        return f"({_render(self.left)} {self.operator} {_render(self.right)})"


@dataclass(frozen=True)
class IfExpression(Expression):
    token: Token
    condition: Optional[Expression]
    consequence: "BlockStatement"
    alternative: Optional["BlockStatement"] = None

    def __str__(self) -> str:
        out = f"if ({_render(self.condition)}) {self.consequence}"
        if self.alternative is not None:
            out += f" else {self.alternative}"
        return out


@dataclass(frozen=True)
class WhileExpression(Expression):
    token: Token
    condition: Optional[Expression]
    body: "BlockStatement"

    def __str__(self) -> str:
        return f"while ({_render(self.condition)}) {self.body}"


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    """`fn(a, b) { ... }`.

    The body is shared by reference with every Function object created by
    evaluating this literal.
    """
    token: Token
    parameters: Tuple[Identifier, ...]
    body: "BlockStatement"

    def __str__(self) -> str:
        return f"fn({_join(self.parameters)}) {self.body}"


@dataclass(frozen=True)
class CallExpression(Expression):
    token: Token
    function: Expression
    arguments: Tuple[Optional[Expression], ...]

    def __str__(self) -> str:
        return f"{self.function}({_join(self.arguments)})"


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    token: Token
    elements: Tuple[Optional[Expression], ...]

    def __str__(self) -> str:
        return f"[{_join(self.elements)}]"


@dataclass(frozen=True)
class IndexExpression(Expression):
    token: Token
    left: Expression
    index: Optional[Expression]

    def __str__(self) -> str:
        return f"({self.left}[{_render(self.index)}])"


# =================================================================
# Statements
# =================================================================

@dataclass(frozen=True)
class LetStatement(Statement):
    token: Token
    name: Identifier
    value: Optional[Expression]

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.name} = {_render(self.value)}"


@dataclass(frozen=True)
class AssignStatement(Statement):
    """`x = value` without `let`."""
    token: Token
    name: Identifier
    value: Optional[Expression]

    def __str__(self) -> str:
        return f"{self.name} = {_render(self.value)}"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    token: Token
    return_value: Optional[Expression]

    def __str__(self) -> str:
        return f"{self.token_literal()} {_render(self.return_value)}"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    token: Token
    expression: Optional[Expression]

    def __str__(self) -> str:
        return _render(self.expression)


@dataclass(frozen=True)
class BlockStatement(Statement):
    token: Token
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + _join(self.statements, "; ") + " }"
