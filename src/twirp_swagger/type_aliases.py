from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional


class TypeAlias(NamedTuple):
    type: str
    format: str = ""


# Proto scalar and well-known type -> Swagger primitive type and format.
# Any field type not in this table is a message or enum reference.
TYPE_ALIASES: Mapping[str, TypeAlias] = MappingProxyType({
    "double": TypeAlias("number", "double"),
    "float": TypeAlias("number", "float"),
    "int32": TypeAlias("integer", "int32"),
    "sint32": TypeAlias("integer", "int32"),
    "sfixed32": TypeAlias("integer", "int32"),
    "uint32": TypeAlias("integer", "int64"),
    "fixed32": TypeAlias("integer", "int64"),
    # 64-bit integers are strings in the protobuf JSON mapping
    "int64": TypeAlias("string", "int64"),
    "sint64": TypeAlias("string", "int64"),
    "sfixed64": TypeAlias("string", "int64"),
    "uint64": TypeAlias("string", "uint64"),
    "fixed64": TypeAlias("string", "uint64"),
    "bool": TypeAlias("boolean"),
    "string": TypeAlias("string"),
    "bytes": TypeAlias("string", "byte"),

    "google.protobuf.Timestamp": TypeAlias("string", "date-time"),
    "google.protobuf.Duration": TypeAlias("string"),
    "google.protobuf.DoubleValue": TypeAlias("number", "double"),
    "google.protobuf.FloatValue": TypeAlias("number", "float"),
    "google.protobuf.Int64Value": TypeAlias("string", "int64"),
    "google.protobuf.UInt64Value": TypeAlias("string", "uint64"),
    "google.protobuf.Int32Value": TypeAlias("integer", "int32"),
    "google.protobuf.UInt32Value": TypeAlias("integer", "int64"),
    "google.protobuf.BoolValue": TypeAlias("boolean"),
    "google.protobuf.StringValue": TypeAlias("string"),
    "google.protobuf.BytesValue": TypeAlias("string", "byte"),
})


def lookup(type_name: str) -> Optional[TypeAlias]:
    """Return the primitive mapping for ``type_name``, or None for rich types."""
    return TYPE_ALIASES.get(type_name.lstrip("."))
