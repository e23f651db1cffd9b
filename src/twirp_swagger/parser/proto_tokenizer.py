"""Tokenizer for protobuf (.proto) files.

Unlike a plain lexer, comments are kept as COMMENT tokens so the parser can
attach documentation to the declarations that follow them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


class ProtoTokenType(Enum):
    # Keywords
    SYNTAX = auto()
    EDITION = auto()
    PACKAGE = auto()
    IMPORT = auto()
    OPTION = auto()
    MESSAGE = auto()
    ENUM = auto()
    SERVICE = auto()
    RPC = auto()
    RETURNS = auto()
    STREAM = auto()
    REPEATED = auto()
    OPTIONAL = auto()
    REQUIRED = auto()
    MAP = auto()
    ONEOF = auto()
    RESERVED = auto()
    EXTENSIONS = auto()
    EXTEND = auto()

    # Delimiters
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LANGLE = auto()
    RANGLE = auto()
    SEMICOLON = auto()
    EQUALS = auto()
    COMMA = auto()

    # Literals
    IDENT = auto()
    NUMBER = auto()
    STRING_LIT = auto()

    # Special
    COMMENT = auto()
    EOF = auto()


_KEYWORDS = {
    "syntax": ProtoTokenType.SYNTAX,
    "edition": ProtoTokenType.EDITION,
    "package": ProtoTokenType.PACKAGE,
    "import": ProtoTokenType.IMPORT,
    "option": ProtoTokenType.OPTION,
    "message": ProtoTokenType.MESSAGE,
    "enum": ProtoTokenType.ENUM,
    "service": ProtoTokenType.SERVICE,
    "rpc": ProtoTokenType.RPC,
    "returns": ProtoTokenType.RETURNS,
    "stream": ProtoTokenType.STREAM,
    "repeated": ProtoTokenType.REPEATED,
    "optional": ProtoTokenType.OPTIONAL,
    "required": ProtoTokenType.REQUIRED,
    "map": ProtoTokenType.MAP,
    "oneof": ProtoTokenType.ONEOF,
    "reserved": ProtoTokenType.RESERVED,
    "extensions": ProtoTokenType.EXTENSIONS,
    "extend": ProtoTokenType.EXTEND,
}

KEYWORD_TYPES = frozenset(_KEYWORDS.values())

_DELIMITERS = {
    "{": ProtoTokenType.LBRACE,
    "}": ProtoTokenType.RBRACE,
    "(": ProtoTokenType.LPAREN,
    ")": ProtoTokenType.RPAREN,
    "[": ProtoTokenType.LBRACKET,
    "]": ProtoTokenType.RBRACKET,
    "<": ProtoTokenType.LANGLE,
    ">": ProtoTokenType.RANGLE,
    ";": ProtoTokenType.SEMICOLON,
    "=": ProtoTokenType.EQUALS,
    ",": ProtoTokenType.COMMA,
}


@dataclass
class ProtoToken:
    type: ProtoTokenType
    value: str
    line: int
    col: int
    # Last line covered by the token; only block comments span several.
    end_line: int = 0
    # True for a // comment, False for a /* */ comment.
    line_comment: bool = False

    def __post_init__(self) -> None:
        if not self.end_line:
            self.end_line = self.line


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def tokenize_proto(text: str) -> List[ProtoToken]:
    """Tokenize a protobuf source string into a list of tokens."""
    tokens: List[ProtoToken] = []
    i = 0
    line = 1
    col = 1
    n = len(text)

    while i < n:
        ch = text[i]

        # Whitespace
        if ch in (" ", "\t", "\r", "\f", "\v"):
            i += 1
            col += 1
            continue

        if ch == "\n":
            i += 1
            line += 1
            col = 1
            continue

        # Single-line comment
        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            start = i + 2
            start_col = col
            while i < n and text[i] != "\n":
                i += 1
                col += 1
            tokens.append(
                ProtoToken(
                    ProtoTokenType.COMMENT,
                    text[start:i].rstrip("\r"),
                    line,
                    start_col,
                    line_comment=True,
                )
            )
            continue

        # Multi-line comment
        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            start_line = line
            start_col = col
            i += 2
            col += 2
            start = i
            end = n
            while i < n:
                if text[i] == "\n":
                    line += 1
                    col = 1
                elif text[i] == "*" and i + 1 < n and text[i + 1] == "/":
                    end = i
                    i += 2
                    col += 2
                    break
                else:
                    col += 1
                i += 1
            tokens.append(
                ProtoToken(
                    ProtoTokenType.COMMENT,
                    text[start:end],
                    start_line,
                    start_col,
                    end_line=line,
                )
            )
            continue

        # Single-character tokens
        if ch in _DELIMITERS:
            tokens.append(ProtoToken(_DELIMITERS[ch], ch, line, col))
            i += 1
            col += 1
            continue

        # String literal, single or double quoted
        if ch in ('"', "'"):
            quote = ch
            start_col = col
            i += 1
            col += 1
            start = i
            while i < n and text[i] != quote and text[i] != "\n":
                if text[i] == "\\":
                    i += 1
                    col += 1
                i += 1
                col += 1
            value = text[start:i]
            if i < n and text[i] == quote:
                i += 1  # consume closing quote
                col += 1
            tokens.append(ProtoToken(ProtoTokenType.STRING_LIT, value, line, start_col))
            continue

        # Number: decimal, hex, octal, float and signed literals
        if ch.isdigit() or (
            ch in "+-." and i + 1 < n and text[i + 1].isdigit()
        ):
            start = i
            start_col = col
            i += 1
            col += 1
            while i < n and (_is_ident_char(text[i]) or text[i] == "."):
                # exponent sign, e.g. 1e-5
                if text[i] in "eE" and i + 1 < n and text[i + 1] in "+-":
                    i += 1
                    col += 1
                i += 1
                col += 1
            tokens.append(ProtoToken(ProtoTokenType.NUMBER, text[start:i], line, start_col))
            continue

        # Identifier / keyword / dotted full identifier (foo.bar.Baz, .foo.Baz)
        if ch.isalpha() or ch == "_" or (
            ch == "." and i + 1 < n and (text[i + 1].isalpha() or text[i + 1] == "_")
        ):
            start = i
            start_col = col
            i += 1
            col += 1
            while i < n and (
                _is_ident_char(text[i])
                or (text[i] == "." and i + 1 < n and (text[i + 1].isalpha() or text[i + 1] == "_"))
            ):
                i += 1
                col += 1
            word = text[start:i]
            tok_type = _KEYWORDS.get(word, ProtoTokenType.IDENT)
            tokens.append(ProtoToken(tok_type, word, line, start_col))
            continue

        # Skip any other character
        i += 1
        col += 1

    tokens.append(ProtoToken(ProtoTokenType.EOF, "", line, col))
    return tokens
