"""Documentation comment conventions.

A comment's first paragraph is ``Title; example``: the text before the
first semicolon is the schema title and the text after it becomes the
schema example. Every line may carry such a ``; example`` suffix, which is
dropped from the description.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Tuple

from twirp_swagger.parser.proto_ast import Comment

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def parse_example(text: str) -> Any:
    """Interpret an example literal as int, then float, else keep the string."""
    if _INT_RE.fullmatch(text):
        return int(text)
    if _FLOAT_RE.fullmatch(text):
        return float(text)
    return text


def title_and_example(comment: Optional[Comment]) -> Tuple[str, Any]:
    """Return (title, example) from the first paragraph of ``comment``.

    The example is None when the comment carries none.
    """
    if comment is None:
        return "", None

    parts = []
    for line in comment.lines:
        line = line.strip()
        if not line:
            break
        parts.append(line)
    text = " ".join(parts)
    if not text:
        return "", None

    segments = text.split(";")
    title = segments[0].strip()
    if len(segments) == 1:
        return title, None
    example = segments[1].strip()
    if not example:
        return title, None
    return title, parse_example(example)


def description(comment: Optional[Comment]) -> str:
    """Join all comment lines, each cut at its first semicolon."""
    if comment is None:
        return ""
    lines = []
    for line in comment.lines:
        line = line.strip()
        if ";" in line:
            line = line.split(";", 1)[0].rstrip()
        lines.append(line)
    return "\n".join(lines)
