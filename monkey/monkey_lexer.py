"""
Converts Monkey source text into a lazy stream of tokens.
"""
from typing import Iterator, List, Optional

from monkey.monkey_token import Token, TokenType, lookup_ident

_WHITESPACE = (" ", "\t", "\n", "\r")

# Single-character tokens that never start a two-character operator.
_SINGLE_CHAR = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    "<": TokenType.LT,
    ">": TokenType.GT,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
}


def _is_letter(ch: Optional[str]) -> bool:
    return ch is not None and (("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_")


def _is_digit(ch: Optional[str]) -> bool:
    return ch is not None and "0" <= ch <= "9"


class Lexer:
    """Hands out one token per `next_token()` call.

    The lexer never fails: characters it does not recognize come back as
    ILLEGAL tokens and are reported by the parser. Once the input is
    exhausted every further call returns an EOF token.
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0        # index of self.ch
        self.read_position = 0   # index of the next character
        self.ch: Optional[str] = None
        self._read_char()

    def _read_char(self):
        if self.read_position >= len(self.source):
            self.ch = None
        else:
            self.ch = self.source[self.read_position]
        self.position = self.read_position
        self.read_position += 1

    def _peek_char(self) -> Optional[str]:
        if self.read_position >= len(self.source):
            return None
        return self.source[self.read_position]

    def _skip_whitespace(self):
        while self.ch in _WHITESPACE:
            self._read_char()

    def next_token(self) -> Token:
        self._skip_whitespace()
        ch = self.ch

        if ch is None:
            return Token(TokenType.EOF, "")

        if _is_letter(ch):
            literal = self._read_while(_is_letter)
            return Token(lookup_ident(literal), literal)
        if _is_digit(ch):
            return Token(TokenType.INT, self._read_while(_is_digit))

        match ch:
            case "=" if self._peek_char() == "=":
                self._read_char()
                tok = Token(TokenType.EQ, "==")
            case "=":
                tok = Token(TokenType.ASSIGN, ch)
            case "!" if self._peek_char() == "=":
                self._read_char()
                tok = Token(TokenType.NOT_EQ, "!=")
            case "!":
                tok = Token(TokenType.BANG, ch)
            case '"':
                tok = Token(TokenType.STRING, self._read_string())
            case _ if ch in _SINGLE_CHAR:
                tok = Token(_SINGLE_CHAR[ch], ch)
            case _:
                tok = Token(TokenType.ILLEGAL, ch)

        self._read_char()
        return tok

    def _read_while(self, predicate) -> str:
        start = self.position
        while predicate(self.ch):
            self._read_char()
        return self.source[start:self.position]

    def _read_string(self) -> str:
        # Verbatim up to the closing quote or the end of input; no escapes.
        start = self.position + 1
        self._read_char()
        while self.ch is not None and self.ch != '"':
            self._read_char()
        return self.source[start:self.position]

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            if tok.type is TokenType.EOF:
                return
            yield tok


def tokenize(source: str) -> List[Token]:
    """Returns every token of `source`, ending with the EOF token."""
    tokens = list(Lexer(source))
    tokens.append(Token(TokenType.EOF, ""))
    return tokens
