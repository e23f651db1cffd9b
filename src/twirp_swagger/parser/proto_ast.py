"""AST node definitions for protobuf (.proto) files.

The tree is a closed set of node kinds. Containers (ProtoFile, Message,
OneOf, Enum, Service) keep their children in declaration order in
``elements`` so consumers can reproduce the textual layout of a file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union


@dataclass
class Comment:
    """A // or /* */ comment; ``lines`` have the comment markers removed."""

    lines: List[str] = field(default_factory=list)
    line: int = 0
    end_line: int = 0


@dataclass
class Package:
    name: str
    comment: Optional[Comment] = None


@dataclass
class Import:
    filename: str
    kind: str = ""  # "", "public" or "weak"
    comment: Optional[Comment] = None


@dataclass
class Option:
    name: str
    comment: Optional[Comment] = None


@dataclass
class Reserved:
    comment: Optional[Comment] = None


@dataclass
class Field:
    """Common part of every field declaration: Type name = number;"""

    name: str
    type_name: str
    number: int
    comment: Optional[Comment] = None
    inline_comment: Optional[Comment] = None


@dataclass
class NormalField(Field):
    repeated: bool = False
    optional: bool = False
    required: bool = False


@dataclass
class MapField(Field):
    """map<key_type, type_name> name = number;"""

    key_type: str = ""


@dataclass
class OneOfField(Field):
    pass


@dataclass
class OneOf:
    name: str
    elements: List[OneOfElement] = field(default_factory=list)
    comment: Optional[Comment] = None


@dataclass
class EnumField:
    name: str
    value: int
    comment: Optional[Comment] = None
    inline_comment: Optional[Comment] = None


@dataclass
class Enum:
    name: str
    elements: List[EnumElement] = field(default_factory=list)
    comment: Optional[Comment] = None


@dataclass
class Message:
    name: str
    elements: List[MessageElement] = field(default_factory=list)
    comment: Optional[Comment] = None


@dataclass
class RPC:
    name: str
    request_type: str
    returns_type: str
    streams_request: bool = False
    streams_returns: bool = False
    comment: Optional[Comment] = None
    inline_comment: Optional[Comment] = None
    parent: Optional[object] = field(default=None, repr=False, compare=False)


@dataclass
class Service:
    name: str
    elements: List[ServiceElement] = field(default_factory=list)
    comment: Optional[Comment] = None


@dataclass
class ProtoFile:
    """Top-level parsed representation of a .proto file."""

    filename: str = ""
    syntax: str = ""
    elements: List[TopLevelElement] = field(default_factory=list)


OneOfElement = Union[OneOfField, Option, Comment]
EnumElement = Union[EnumField, Option, Reserved, Comment]
MessageElement = Union[
    NormalField, MapField, OneOf, Message, Enum, Option, Reserved, Comment
]
ServiceElement = Union[RPC, Option, Comment]
TopLevelElement = Union[Package, Import, Option, Message, Enum, Service, Comment]

Node = Union[
    ProtoFile,
    Package,
    Import,
    Option,
    Reserved,
    Comment,
    Message,
    Enum,
    EnumField,
    Service,
    RPC,
    NormalField,
    MapField,
    OneOf,
    OneOfField,
]

_CONTAINERS = (ProtoFile, Message, OneOf, Enum, Service)


def walk(container: Node) -> Iterator[Node]:
    """Yield every node below ``container`` depth first.

    A container is yielded before its own children, so a message comes
    before the messages nested in it.
    """
    if not isinstance(container, _CONTAINERS):
        return
    for element in container.elements:
        yield element
        yield from walk(element)
