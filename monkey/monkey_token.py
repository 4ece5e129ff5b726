"""
Token types and the keyword table for the Monkey lexer.
"""
from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Closed set of token kinds. The value is the name used in parse errors."""
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    ASTERISK = "*"
    SLASH = "/"
    BANG = "!"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    IF = "IF"
    ELSE = "ELSE"
    WHILE = "WHILE"
    RETURN = "RETURN"
    TRUE = "TRUE"
    FALSE = "FALSE"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    type: TokenType
    literal: str

    def __repr__(self) -> str:
        return f"Token<{self.type.name} {self.literal!r}>"


KEYWORDS = {
    "fn": TokenType.FUNCTION,
    "func": TokenType.FUNCTION,
    "let": TokenType.LET,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "return": TokenType.RETURN,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
}


def lookup_ident(ident: str) -> TokenType:
    """Maps a letter run to its keyword type, or IDENT."""
    return KEYWORDS.get(ident, TokenType.IDENT)
