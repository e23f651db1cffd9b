"""Recursive descent parser for protobuf (.proto) files.

Consumes a token stream from proto_tokenizer and produces proto AST nodes.
A comment block that ends on the line right above a declaration becomes
that declaration's documentation; any other comment is kept as a
standalone Comment element of the enclosing container.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .proto_ast import (
    RPC,
    Comment,
    Enum,
    EnumField,
    Import,
    MapField,
    Message,
    NormalField,
    OneOf,
    OneOfField,
    Option,
    Package,
    ProtoFile,
    Reserved,
    Service,
)
from .proto_tokenizer import KEYWORD_TYPES, ProtoToken, ProtoTokenType

_FIELD_LABELS = (
    ProtoTokenType.REPEATED,
    ProtoTokenType.OPTIONAL,
    ProtoTokenType.REQUIRED,
)

_OPENERS = {
    ProtoTokenType.LBRACE: ProtoTokenType.RBRACE,
    ProtoTokenType.LBRACKET: ProtoTokenType.RBRACKET,
    ProtoTokenType.LPAREN: ProtoTokenType.RPAREN,
}


class ProtoParseError(Exception):
    """Raised when the parser encounters unexpected input."""

    def __init__(self, message: str, token: ProtoToken | None = None):
        if token:
            super().__init__(f"Line {token.line}:{token.col}: {message}")
        else:
            super().__init__(message)


def _parse_int(tok: ProtoToken) -> int:
    text = tok.value
    sign = 1
    if text[:1] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    try:
        if text.lower().startswith("0x"):
            return sign * int(text, 16)
        if len(text) > 1 and text.startswith("0"):
            return sign * int(text, 8)
        return sign * int(text)
    except ValueError:
        raise ProtoParseError(f"Invalid integer literal {tok.value!r}", tok) from None


class ProtoParser:
    """Recursive descent parser for .proto files."""

    def __init__(self, tokens: List[ProtoToken], filename: str = ""):
        self._tokens = tokens
        self._pos = 0
        self._filename = filename
        self._pending: Optional[Comment] = None
        self._pending_is_line_comment = False

    # -- public API --

    def parse(self) -> ProtoFile:
        """Parse the full token stream into a ProtoFile AST."""
        result = ProtoFile(filename=self._filename)
        elements = result.elements
        self._pending = None

        while not self._at_end():
            tok = self._peek()
            tt = tok.type

            if tt == ProtoTokenType.COMMENT:
                self._collect_comment(elements)
            elif tt in (ProtoTokenType.SYNTAX, ProtoTokenType.EDITION):
                self._take_doc(tok, elements)
                result.syntax = self._parse_syntax()
            elif tt == ProtoTokenType.PACKAGE:
                elements.append(self._parse_package(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.IMPORT:
                elements.append(self._parse_import(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.MESSAGE:
                elements.append(self._parse_message(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.ENUM:
                elements.append(self._parse_enum(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.SERVICE:
                elements.append(self._parse_service(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.EXTEND:
                self._take_doc(tok, elements)
                self._skip_block()
            else:
                # Skip any unrecognised top-level token (e.g. stray semicolons)
                self._advance()

        self._flush_comment(elements)
        return result

    # -- comments --

    def _collect_comment(self, elements: list) -> None:
        """Consume one COMMENT token, merging adjacent // lines."""
        tok = self._advance()
        lines = tok.value.split("\n")
        pending = self._pending
        if (
            pending is not None
            and tok.line_comment
            and self._pending_is_line_comment
            and tok.line == pending.end_line + 1
        ):
            pending.lines.extend(lines)
            pending.end_line = tok.end_line
            return
        self._flush_comment(elements)
        self._pending = Comment(lines=lines, line=tok.line, end_line=tok.end_line)
        self._pending_is_line_comment = tok.line_comment

    def _flush_comment(self, elements: list) -> None:
        if self._pending is not None:
            elements.append(self._pending)
            self._pending = None

    def _take_doc(self, tok: ProtoToken, elements: list) -> Optional[Comment]:
        """Return the pending comment if it documents the declaration at ``tok``."""
        pending = self._pending
        if pending is None:
            return None
        if pending.end_line in (tok.line - 1, tok.line):
            self._pending = None
            return pending
        self._flush_comment(elements)
        return None

    def _inline_comment(self, line: int) -> Optional[Comment]:
        """Consume a trailing comment that starts on ``line``, if any."""
        tok = self._peek()
        if tok.type != ProtoTokenType.COMMENT or tok.line != line:
            return None
        self._advance()
        return Comment(lines=tok.value.split("\n"), line=tok.line, end_line=tok.end_line)

    def _skip_inline_comment(self) -> None:
        """Drop a trailing comment on the line of the token just consumed."""
        self._inline_comment(self._tokens[self._pos - 1].line)

    # -- top-level statements --

    def _parse_syntax(self) -> str:
        """Parse: SYNTAX|EDITION EQUALS STRING_LIT SEMICOLON"""
        self._advance()
        self._expect(ProtoTokenType.EQUALS)
        value = self._expect(ProtoTokenType.STRING_LIT).value
        self._expect(ProtoTokenType.SEMICOLON)
        self._skip_inline_comment()
        return value

    def _parse_package(self, doc: Optional[Comment]) -> Package:
        """Parse: PACKAGE IDENT SEMICOLON"""
        self._expect(ProtoTokenType.PACKAGE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.SEMICOLON)
        self._skip_inline_comment()
        return Package(name=name_tok.value, comment=doc)

    def _parse_import(self, doc: Optional[Comment]) -> Import:
        """Parse: IMPORT [public|weak] STRING_LIT SEMICOLON"""
        self._expect(ProtoTokenType.IMPORT)
        kind = ""
        if self._peek().type == ProtoTokenType.IDENT and self._peek().value in ("public", "weak"):
            kind = self._advance().value
        filename = self._expect(ProtoTokenType.STRING_LIT).value
        self._expect(ProtoTokenType.SEMICOLON)
        self._skip_inline_comment()
        return Import(filename=filename, kind=kind, comment=doc)

    def _parse_option(self, doc: Optional[Comment]) -> Option:
        """Parse: OPTION name EQUALS constant SEMICOLON"""
        self._expect(ProtoTokenType.OPTION)
        name_parts: List[str] = []
        while not self._at_end() and self._peek().type not in (
            ProtoTokenType.EQUALS,
            ProtoTokenType.SEMICOLON,
        ):
            name_parts.append(self._advance().value)
        self._skip_statement()
        self._skip_inline_comment()
        return Option(name="".join(name_parts), comment=doc)

    # -- message parsing --

    def _parse_message(self, doc: Optional[Comment]) -> Message:
        """Parse: MESSAGE IDENT LBRACE body RBRACE"""
        self._expect(ProtoTokenType.MESSAGE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        message = Message(name=name_tok.value, comment=doc)
        self._parse_message_body(message)
        self._expect(ProtoTokenType.RBRACE)
        return message

    def _parse_message_body(self, message: Message) -> None:
        """Parse the contents between { and } of a message."""
        elements = message.elements
        self._pending = None

        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tok = self._peek()
            tt = tok.type

            if tt == ProtoTokenType.COMMENT:
                self._collect_comment(elements)
            elif tt == ProtoTokenType.MESSAGE:
                nested = self._parse_message(self._take_doc(tok, elements))
                elements.append(nested)
                self._pending = None
            elif tt == ProtoTokenType.ENUM:
                elements.append(self._parse_enum(self._take_doc(tok, elements)))
                self._pending = None
            elif tt == ProtoTokenType.ONEOF:
                elements.append(self._parse_oneof(self._take_doc(tok, elements)))
                self._pending = None
            elif tt == ProtoTokenType.MAP and self._peek(1).type == ProtoTokenType.LANGLE:
                elements.append(self._parse_map_field(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option(self._take_doc(tok, elements)))
            elif tt in (ProtoTokenType.RESERVED, ProtoTokenType.EXTENSIONS):
                doc = self._take_doc(tok, elements)
                self._skip_statement()
                elements.append(Reserved(comment=doc))
            elif tt == ProtoTokenType.EXTEND:
                self._take_doc(tok, elements)
                self._skip_block()
            elif tt in _FIELD_LABELS or tt == ProtoTokenType.IDENT or tt in KEYWORD_TYPES:
                elements.append(self._parse_field(self._take_doc(tok, elements)))
            else:
                self._advance()

        self._flush_comment(elements)

    def _parse_field(self, doc: Optional[Comment]) -> NormalField:
        """Parse: [label] IDENT(type) IDENT(name) EQUALS NUMBER [options] SEMICOLON"""
        labels = set()
        while self._peek().type in _FIELD_LABELS and self._peek(1).type != ProtoTokenType.EQUALS:
            labels.add(self._advance().type)

        type_tok = self._expect_name()
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.EQUALS)
        number = _parse_int(self._expect(ProtoTokenType.NUMBER))
        self._skip_field_options()
        end_tok = self._expect(ProtoTokenType.SEMICOLON)

        return NormalField(
            name=name_tok.value,
            type_name=type_tok.value,
            number=number,
            comment=doc,
            inline_comment=self._inline_comment(end_tok.line),
            repeated=ProtoTokenType.REPEATED in labels,
            optional=ProtoTokenType.OPTIONAL in labels,
            required=ProtoTokenType.REQUIRED in labels,
        )

    def _parse_map_field(self, doc: Optional[Comment]) -> MapField:
        """Parse: MAP LANGLE key COMMA value RANGLE IDENT EQUALS NUMBER [options] SEMICOLON"""
        self._expect(ProtoTokenType.MAP)
        self._expect(ProtoTokenType.LANGLE)
        key_tok = self._expect_name()
        self._expect(ProtoTokenType.COMMA)
        value_tok = self._expect_name()
        self._expect(ProtoTokenType.RANGLE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.EQUALS)
        number = _parse_int(self._expect(ProtoTokenType.NUMBER))
        self._skip_field_options()
        end_tok = self._expect(ProtoTokenType.SEMICOLON)

        return MapField(
            name=name_tok.value,
            type_name=value_tok.value,
            number=number,
            comment=doc,
            inline_comment=self._inline_comment(end_tok.line),
            key_type=key_tok.value,
        )

    def _parse_oneof(self, doc: Optional[Comment]) -> OneOf:
        """Parse: ONEOF IDENT LBRACE { field | option } RBRACE"""
        self._expect(ProtoTokenType.ONEOF)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        oneof = OneOf(name=name_tok.value, comment=doc)
        elements = oneof.elements
        self._pending = None

        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tok = self._peek()
            tt = tok.type
            if tt == ProtoTokenType.COMMENT:
                self._collect_comment(elements)
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                doc = self._take_doc(tok, elements)
                type_tok = self._expect_name()
                name_tok = self._expect_name()
                self._expect(ProtoTokenType.EQUALS)
                number = _parse_int(self._expect(ProtoTokenType.NUMBER))
                self._skip_field_options()
                end_tok = self._expect(ProtoTokenType.SEMICOLON)
                elements.append(
                    OneOfField(
                        name=name_tok.value,
                        type_name=type_tok.value,
                        number=number,
                        comment=doc,
                        inline_comment=self._inline_comment(end_tok.line),
                    )
                )

        self._flush_comment(elements)
        self._expect(ProtoTokenType.RBRACE)
        return oneof

    # -- enum parsing --

    def _parse_enum(self, doc: Optional[Comment]) -> Enum:
        """Parse: ENUM IDENT LBRACE { IDENT EQUALS NUMBER [options] SEMICOLON } RBRACE"""
        self._expect(ProtoTokenType.ENUM)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        enum = Enum(name=name_tok.value, comment=doc)
        elements = enum.elements
        self._pending = None

        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tok = self._peek()
            tt = tok.type
            if tt == ProtoTokenType.COMMENT:
                self._collect_comment(elements)
            elif tt == ProtoTokenType.OPTION and self._peek(1).type != ProtoTokenType.EQUALS:
                elements.append(self._parse_option(self._take_doc(tok, elements)))
            elif tt == ProtoTokenType.RESERVED and self._peek(1).type != ProtoTokenType.EQUALS:
                doc = self._take_doc(tok, elements)
                self._skip_statement()
                elements.append(Reserved(comment=doc))
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                doc = self._take_doc(tok, elements)
                name_tok = self._expect_name()
                self._expect(ProtoTokenType.EQUALS)
                value = _parse_int(self._expect(ProtoTokenType.NUMBER))
                self._skip_field_options()
                end_tok = self._expect(ProtoTokenType.SEMICOLON)
                elements.append(
                    EnumField(
                        name=name_tok.value,
                        value=value,
                        comment=doc,
                        inline_comment=self._inline_comment(end_tok.line),
                    )
                )

        self._flush_comment(elements)
        self._expect(ProtoTokenType.RBRACE)
        return enum

    # -- service parsing --

    def _parse_service(self, doc: Optional[Comment]) -> Service:
        """Parse: SERVICE IDENT LBRACE { rpc | option } RBRACE"""
        self._expect(ProtoTokenType.SERVICE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        service = Service(name=name_tok.value, comment=doc)
        elements = service.elements
        self._pending = None

        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tok = self._peek()
            tt = tok.type
            if tt == ProtoTokenType.COMMENT:
                self._collect_comment(elements)
            elif tt == ProtoTokenType.RPC:
                rpc = self._parse_rpc(self._take_doc(tok, elements))
                rpc.parent = service
                elements.append(rpc)
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option(self._take_doc(tok, elements)))
            else:
                self._advance()

        self._flush_comment(elements)
        self._expect(ProtoTokenType.RBRACE)
        return service

    def _parse_rpc(self, doc: Optional[Comment]) -> RPC:
        """Parse: RPC IDENT (type) RETURNS (type) (SEMICOLON | LBRACE options RBRACE)"""
        self._expect(ProtoTokenType.RPC)
        name_tok = self._expect_name()
        streams_request, request_type = self._parse_rpc_type()
        self._expect(ProtoTokenType.RETURNS)
        streams_returns, returns_type = self._parse_rpc_type()

        end_tok = self._peek()
        if end_tok.type == ProtoTokenType.LBRACE:
            self._skip_braces()
            end_tok = self._tokens[self._pos - 1]
            if self._peek().type == ProtoTokenType.SEMICOLON:
                end_tok = self._advance()
        else:
            end_tok = self._expect(ProtoTokenType.SEMICOLON)

        return RPC(
            name=name_tok.value,
            request_type=request_type,
            returns_type=returns_type,
            streams_request=streams_request,
            streams_returns=streams_returns,
            comment=doc,
            inline_comment=self._inline_comment(end_tok.line),
        )

    def _parse_rpc_type(self) -> Tuple[bool, str]:
        self._expect(ProtoTokenType.LPAREN)
        streams = False
        if self._peek().type == ProtoTokenType.STREAM and self._peek(1).type != ProtoTokenType.RPAREN:
            self._advance()
            streams = True
        type_tok = self._expect_name()
        self._expect(ProtoTokenType.RPAREN)
        return streams, type_tok.value

    # -- skip helpers --

    def _skip_statement(self) -> None:
        """Skip tokens until (and including) the next top-level semicolon."""
        while not self._at_end():
            tt = self._peek().type
            if tt in _OPENERS:
                self._skip_braces()
                continue
            tok = self._advance()
            if tok.type == ProtoTokenType.SEMICOLON:
                return

    def _skip_field_options(self) -> None:
        """Skip a bracketed option list: [deprecated = true, json_name = "x"]"""
        if self._peek().type == ProtoTokenType.LBRACKET:
            self._skip_braces()

    def _skip_braces(self) -> None:
        """Skip a balanced group starting at the current opening token."""
        opener = self._advance()
        closer = _OPENERS[opener.type]
        depth = 1
        while not self._at_end() and depth > 0:
            tok = self._advance()
            if tok.type == opener.type:
                depth += 1
            elif tok.type == closer:
                depth -= 1
        if depth > 0:
            raise ProtoParseError(f"Unterminated {opener.value!r}", opener)

    def _skip_block(self) -> None:
        """Skip a keyword + IDENT + braced block (e.g. extend)."""
        self._advance()  # keyword
        # Skip until opening brace
        while not self._at_end() and self._peek().type != ProtoTokenType.LBRACE:
            self._advance()
        if not self._at_end():
            self._skip_braces()

    # -- token helpers --

    def _peek(self, offset: int = 0) -> ProtoToken:
        pos = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[pos]

    def _advance(self) -> ProtoToken:
        tok = self._tokens[self._pos]
        if tok.type != ProtoTokenType.EOF:
            self._pos += 1
        return tok

    def _expect(self, expected: ProtoTokenType) -> ProtoToken:
        tok = self._peek()
        if tok.type != expected:
            raise ProtoParseError(
                f"Expected {expected.name}, got {tok.type.name} ({tok.value!r})",
                tok,
            )
        return self._advance()

    def _expect_name(self) -> ProtoToken:
        """Expect an identifier; keywords are valid names in most positions."""
        tok = self._peek()
        if tok.type != ProtoTokenType.IDENT and tok.type not in KEYWORD_TYPES:
            raise ProtoParseError(
                f"Expected IDENT, got {tok.type.name} ({tok.value!r})",
                tok,
            )
        return self._advance()

    def _at_end(self) -> bool:
        return self._tokens[self._pos].type == ProtoTokenType.EOF
