from __future__ import annotations

import os
from pathlib import Path

from .proto_ast import ProtoFile
from .proto_ast_parser import ProtoParser
from .proto_tokenizer import tokenize_proto


def parse_proto_text(text: str, filename: str = "") -> ProtoFile:
    """Parse protobuf source text into a ProtoFile AST."""
    return ProtoParser(tokenize_proto(text), filename=filename).parse()


def load_proto_file(filename: str, proto_dir: str = "") -> ProtoFile:
    """Read and parse ``filename`` relative to ``proto_dir``.

    Raises OSError when the file cannot be read and ProtoParseError when
    it is not valid protobuf.
    """
    text = Path(os.path.join(proto_dir, filename)).read_text(encoding="utf-8")
    return parse_proto_text(text, filename=filename)
