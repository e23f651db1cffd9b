"""Swagger 2.0 document model.

Each object renders itself with ``to_dict()``. Empty strings, ``None`` and
empty collections are left out of the output, so a schema only carries the
keys that were actually set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SWAGGER_VERSION = "2.0"


def _prune(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None and v != "" and v != [] and v != {}}


@dataclass
class Schema:
    title: str = ""
    description: str = ""
    type: str = ""
    format: str = ""
    ref: str = ""
    items: Optional[Schema] = None
    additional_properties: Optional[Schema] = None
    properties: Dict[str, Schema] = field(default_factory=dict)
    enum: List[str] = field(default_factory=list)
    # None means "no example"; 0 and 0.0 are valid examples.
    example: Any = None
    extensions: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "$ref": self.ref,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "format": self.format,
            "items": self.items.to_dict() if self.items else None,
            "additionalProperties": (
                self.additional_properties.to_dict() if self.additional_properties else None
            ),
            "properties": {name: prop.to_dict() for name, prop in self.properties.items()},
            "enum": list(self.enum),
        }
        result = _prune(data)
        if self.example is not None:
            result["example"] = self.example
        result.update(self.extensions)
        return result


def ref_schema(qualified_name: str) -> Schema:
    return Schema(ref=f"#/definitions/{qualified_name}")


@dataclass
class Tag:
    name: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _prune({"name": self.name, "description": self.description})


@dataclass
class Operation:
    """A POST operation with one JSON body parameter and one 200 response."""

    operation_id: str
    tag: str
    request_type: str
    response_type: str
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        operation = {
            "operationId": self.operation_id,
            "tags": [self.tag],
            "summary": self.summary,
            "parameters": [
                {
                    "name": "body",
                    "in": "body",
                    "required": True,
                    "schema": ref_schema(self.request_type).to_dict(),
                }
            ],
            "responses": {
                "200": {
                    "description": "A successful response.",
                    "schema": ref_schema(self.response_type).to_dict(),
                }
            },
        }
        return {"post": _prune(operation)}


@dataclass
class SecurityScheme:
    type: str
    flow: str = ""
    token_url: str = ""
    description: str = ""
    scopes: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = _prune(
            {
                "description": self.description,
                "type": self.type,
                "flow": self.flow,
                "tokenUrl": self.token_url,
            }
        )
        # scopes is required for oauth2 even when empty
        data["scopes"] = dict(self.scopes)
        return data


@dataclass
class Info:
    title: str = ""
    version: str = ""
    description: str = ""
    extensions: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = _prune(
            {
                "title": self.title,
                "version": self.version,
                "description": self.description,
            }
        )
        data.update(self.extensions)
        return data


@dataclass
class SwaggerDocument:
    swagger: str = SWAGGER_VERSION
    host: str = ""
    schemes: List[str] = field(default_factory=list)
    produces: List[str] = field(default_factory=list)
    consumes: List[str] = field(default_factory=list)
    security: List[Dict[str, List[str]]] = field(default_factory=list)
    security_definitions: Dict[str, SecurityScheme] = field(default_factory=dict)
    info: Info = field(default_factory=Info)
    definitions: Dict[str, Schema] = field(default_factory=dict)
    paths: Dict[str, Operation] = field(default_factory=dict)
    tags: List[Tag] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "swagger": self.swagger,
            "host": self.host,
            "schemes": list(self.schemes),
            "produces": list(self.produces),
            "consumes": list(self.consumes),
            "security": [dict(req) for req in self.security],
            "securityDefinitions": {
                name: scheme.to_dict() for name, scheme in self.security_definitions.items()
            },
            "info": self.info.to_dict(),
            "definitions": {name: schema.to_dict() for name, schema in self.definitions.items()},
            "paths": {route: op.to_dict() for route, op in self.paths.items()},
            "tags": [tag.to_dict() for tag in self.tags],
        }
        result = _prune(data)
        # an empty definitions/paths object is still part of a valid document
        result.setdefault("definitions", {})
        result.setdefault("paths", {})
        return result
