import pytest

from monkey.monkey_lexer import Lexer, tokenize
from monkey.monkey_token import Token, TokenType, lookup_ident


def _types(source):
    return [tok.type for tok in tokenize(source)]


def test_next_token_full_program():
    source = '''let five = 5;
let add = fn(x, y) {
  x + y;
};
let result = add(five, 10);
!-/*5;
5 < 10 > 5;
if (5 < 10) { return true; } else { return false; }
10 == 10; 10 != 9;
"foo bar" [1, 2];
while (x) { x = x - 1 }
'''
    expected = [
        (TokenType.LET, "let"), (TokenType.IDENT, "five"), (TokenType.ASSIGN, "="),
        (TokenType.INT, "5"), (TokenType.SEMICOLON, ";"),
        (TokenType.LET, "let"), (TokenType.IDENT, "add"), (TokenType.ASSIGN, "="),
        (TokenType.FUNCTION, "fn"), (TokenType.LPAREN, "("), (TokenType.IDENT, "x"),
        (TokenType.COMMA, ","), (TokenType.IDENT, "y"), (TokenType.RPAREN, ")"),
        (TokenType.LBRACE, "{"), (TokenType.IDENT, "x"), (TokenType.PLUS, "+"),
        (TokenType.IDENT, "y"), (TokenType.SEMICOLON, ";"), (TokenType.RBRACE, "}"),
        (TokenType.SEMICOLON, ";"),
        (TokenType.LET, "let"), (TokenType.IDENT, "result"), (TokenType.ASSIGN, "="),
        (TokenType.IDENT, "add"), (TokenType.LPAREN, "("), (TokenType.IDENT, "five"),
        (TokenType.COMMA, ","), (TokenType.INT, "10"), (TokenType.RPAREN, ")"),
        (TokenType.SEMICOLON, ";"),
        (TokenType.BANG, "!"), (TokenType.MINUS, "-"), (TokenType.SLASH, "/"),
        (TokenType.ASTERISK, "*"), (TokenType.INT, "5"), (TokenType.SEMICOLON, ";"),
        (TokenType.INT, "5"), (TokenType.LT, "<"), (TokenType.INT, "10"),
        (TokenType.GT, ">"), (TokenType.INT, "5"), (TokenType.SEMICOLON, ";"),
        (TokenType.IF, "if"), (TokenType.LPAREN, "("), (TokenType.INT, "5"),
        (TokenType.LT, "<"), (TokenType.INT, "10"), (TokenType.RPAREN, ")"),
        (TokenType.LBRACE, "{"), (TokenType.RETURN, "return"), (TokenType.TRUE, "true"),
        (TokenType.SEMICOLON, ";"), (TokenType.RBRACE, "}"), (TokenType.ELSE, "else"),
        (TokenType.LBRACE, "{"), (TokenType.RETURN, "return"), (TokenType.FALSE, "false"),
        (TokenType.SEMICOLON, ";"), (TokenType.RBRACE, "}"),
        (TokenType.INT, "10"), (TokenType.EQ, "=="), (TokenType.INT, "10"),
        (TokenType.SEMICOLON, ";"), (TokenType.INT, "10"), (TokenType.NOT_EQ, "!="),
        (TokenType.INT, "9"), (TokenType.SEMICOLON, ";"),
        (TokenType.STRING, "foo bar"), (TokenType.LBRACKET, "["), (TokenType.INT, "1"),
        (TokenType.COMMA, ","), (TokenType.INT, "2"), (TokenType.RBRACKET, "]"),
        (TokenType.SEMICOLON, ";"),
        (TokenType.WHILE, "while"), (TokenType.LPAREN, "("), (TokenType.IDENT, "x"),
        (TokenType.RPAREN, ")"), (TokenType.LBRACE, "{"), (TokenType.IDENT, "x"),
        (TokenType.ASSIGN, "="), (TokenType.IDENT, "x"), (TokenType.MINUS, "-"),
        (TokenType.INT, "1"), (TokenType.RBRACE, "}"),
        (TokenType.EOF, ""),
    ]
    lexer = Lexer(source)
    for want_type, want_literal in expected:
        tok = lexer.next_token()
        assert tok == Token(want_type, want_literal)


def test_eof_is_returned_forever():
    lexer = Lexer("x")
    assert lexer.next_token().type is TokenType.IDENT
    for _ in range(3):
        assert lexer.next_token() == Token(TokenType.EOF, "")


def test_func_is_a_keyword_alias():
    assert lookup_ident("func") is TokenType.FUNCTION
    assert lookup_ident("fn") is TokenType.FUNCTION
    assert lookup_ident("funky") is TokenType.IDENT


def test_unknown_characters_are_illegal():
    assert tokenize("@ 1") == [
        Token(TokenType.ILLEGAL, "@"),
        Token(TokenType.INT, "1"),
        Token(TokenType.EOF, ""),
    ]


def test_string_has_no_escape_processing():
    assert tokenize(r'"a\nb"')[0] == Token(TokenType.STRING, r"a\nb")


def test_unterminated_string_stops_at_end_of_input():
    assert tokenize('"abc') == [Token(TokenType.STRING, "abc"), Token(TokenType.EOF, "")]


def test_identifiers_allow_underscores_but_not_digits():
    assert _types("my_var1") == [TokenType.IDENT, TokenType.INT, TokenType.EOF]


def test_whitespace_variants_are_skipped():
    assert _types("\t1\r\n 2 ") == [TokenType.INT, TokenType.INT, TokenType.EOF]


def test_iteration_stops_before_eof():
    assert [tok.literal for tok in Lexer("a + b")] == ["a", "+", "b"]
    assert list(Lexer("")) == []


@pytest.mark.parametrize("source, expected", [
    ("=", TokenType.ASSIGN),
    ("==", TokenType.EQ),
    ("!", TokenType.BANG),
    ("!=", TokenType.NOT_EQ),
], ids=["assign", "eq", "bang", "not_eq"])
def test_one_and_two_char_operators(source, expected):
    assert tokenize(source)[0].type is expected
