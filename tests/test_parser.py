import pytest

from monkey.monkey_ast import (
    ArrayLiteral, AssignStatement, BooleanLiteral, CallExpression, ExpressionStatement,
    FunctionLiteral, Identifier, IfExpression, IndexExpression, InfixExpression,
    IntegerLiteral, LetStatement, PrefixExpression, ReturnStatement, StringLiteral,
    WhileExpression,
)
from monkey.monkey_lexer import Lexer
from monkey.monkey_parser import Parser, parse


def parse_ok(source):
    program, errors = parse(source)
    assert errors == []
    return program


def single_expression(source):
    program = parse_ok(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExpressionStatement)
    return stmt.expression


def test_let_statements():
    program = parse_ok("let x = 5; let y = true; let foobar = y;")
    assert [type(s) for s in program.statements] == [LetStatement] * 3
    assert [s.name.value for s in program.statements] == ["x", "y", "foobar"]
    assert isinstance(program.statements[0].value, IntegerLiteral)
    assert isinstance(program.statements[1].value, BooleanLiteral)
    assert isinstance(program.statements[2].value, Identifier)


def test_assign_statement():
    stmt = parse_ok("x = x + 1").statements[0]
    assert isinstance(stmt, AssignStatement)
    assert stmt.name.value == "x"
    assert str(stmt.value) == "(x + 1)"


def test_return_statement():
    stmt = parse_ok("return 5;").statements[0]
    assert isinstance(stmt, ReturnStatement)
    assert stmt.return_value.value == 5


def test_semicolons_are_optional():
    program = parse_ok("let a = 1\nlet b = 2\na + b")
    assert len(program.statements) == 3


@pytest.mark.parametrize("source, expected", [
    ("-a * b", "((-a) * b)"),
    ("!-a", "(!(-a))"),
    ("a + b + c", "((a + b) + c)"),
    ("a + b - c", "((a + b) - c)"),
    ("a * b * c", "((a * b) * c)"),
    ("a + b / c", "(a + (b / c))"),
    ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
    ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
    ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
    ("true == !false", "(true == (!false))"),
    ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
    ("-(5 + 5)", "(-(5 + 5))"),
    ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
    ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))", "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
    ("a * [1, 2, 3, 4][b * c] * d", "((a * ([1, 2, 3, 4][(b * c)])) * d)"),
    ("add(a * b[2], b[1], 2 * [1, 2][1])", "add((a * (b[2])), (b[1]), (2 * ([1, 2][1])))"),
])
def test_operator_precedence(source, expected):
    assert str(parse_ok(source)) == expected


def test_literals():
    assert single_expression("42").value == 42
    assert single_expression('"hello world"').value == "hello world"
    assert isinstance(single_expression('"x"'), StringLiteral)
    assert single_expression("false").value is False


def test_prefix_and_infix_shapes():
    prefix = single_expression("!5")
    assert isinstance(prefix, PrefixExpression)
    assert prefix.operator == "!"
    infix = single_expression("5 != 6")
    assert isinstance(infix, InfixExpression)
    assert (infix.left.value, infix.operator, infix.right.value) == (5, "!=", 6)


def test_if_else_expression():
    expr = single_expression("if (x < y) { x } else { y }")
    assert isinstance(expr, IfExpression)
    assert str(expr.condition) == "(x < y)"
    assert str(expr.consequence) == "{ x }"
    assert str(expr.alternative) == "{ y }"


def test_if_without_else():
    expr = single_expression("if (x) { x }")
    assert expr.alternative is None


def test_while_expression():
    expr = single_expression("while (i < 3) { i = i + 1; }")
    assert isinstance(expr, WhileExpression)
    assert str(expr) == "while ((i < 3)) { i = (i + 1) }"


@pytest.mark.parametrize("source, params", [
    ("fn() {}", []),
    ("fn(x) {}", ["x"]),
    ("func(x, y, z) {}", ["x", "y", "z"]),
], ids=["none", "one", "three"])
def test_function_parameters(source, params):
    expr = single_expression(source)
    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == params


def test_function_literal_body():
    expr = single_expression("fn(x, y) { x + y; }")
    assert str(expr.body) == "{ (x + y) }"


def test_call_expression():
    expr = single_expression("add(1, 2 * 3, 4 + 5)")
    assert isinstance(expr, CallExpression)
    assert str(expr.function) == "add"
    assert [str(a) for a in expr.arguments] == ["1", "(2 * 3)", "(4 + 5)"]


def test_array_and_index():
    array = single_expression("[1, 2 * 2, 3 + 3]")
    assert isinstance(array, ArrayLiteral)
    assert len(array.elements) == 3
    assert single_expression("[]").elements == ()
    index = single_expression("myArray[1 + 1]")
    assert isinstance(index, IndexExpression)
    assert str(index.index) == "(1 + 1)"


def test_ast_is_immutable():
    program = parse_ok("let x = 1")
    with pytest.raises(AttributeError):
        program.statements[0].name = None


# --- Errors ---

def test_missing_tokens_are_reported_in_order():
    _, errors = parse("let = 10; let 838383;")
    assert errors == [
        "expected next token to be IDENT, got = instead",
        "no prefix parse function for = found",
        "expected next token to be IDENT, got INT instead",
    ]


def test_unmatched_parenthesis_is_a_parse_error():
    _, errors = parse("(1 + 2")
    assert errors == ["expected next token to be ), got EOF instead"]


def test_unterminated_block_reports_eof():
    _, errors = parse("if (x) { 1")
    assert "expected next token to be }, got EOF instead" in errors


def test_integer_out_of_range():
    _, errors = parse("9223372036854775808")
    assert errors == ["could not parse 9223372036854775808 as integer"]
    assert parse("9223372036854775807")[1] == []


def test_function_parameters_must_be_identifiers():
    _, errors = parse("fn(1) {}")
    assert errors[0] == "expected next token to be IDENT, got INT instead"


def test_illegal_token_has_no_prefix_function():
    _, errors = parse("@")
    assert errors == ["no prefix parse function for ILLEGAL found"]


def test_parser_keeps_going_after_an_error():
    program, errors = parse("let = 1; let y = 2;")
    assert errors
    assert any(isinstance(s, LetStatement) and s.name.value == "y" for s in program.statements)


def test_parser_class_exposes_errors():
    parser = Parser(Lexer("[1, 2"))
    parser.parse_program()
    assert parser.errors == ["expected next token to be ], got EOF instead"]
