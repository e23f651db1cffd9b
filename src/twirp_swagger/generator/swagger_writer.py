"""Assemble the Swagger document of one root proto file."""

from __future__ import annotations

import json
import logging
import os
import posixpath
from pathlib import Path
from typing import Any, Dict, Optional

from twirp_swagger.config import WriterConfig
from twirp_swagger.generator.context import TranslationContext
from twirp_swagger.generator.description import make_description, make_logo
from twirp_swagger.generator.import_resolver import ImportResolver
from twirp_swagger.generator.message_translator import translate_enum, translate_message
from twirp_swagger.generator.service_translator import (
    TranslationError,
    translate_rpc,
    translate_service,
)
from twirp_swagger.models import Info, SecurityScheme
from twirp_swagger.parser.proto_ast import (
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
    walk,
)
from twirp_swagger.parser.proto_loader import load_proto_file

logger = logging.getLogger(__name__)

OAUTH_DESCRIPTION = (
    "Please use [client credentials](https://datatracker.ietf.org/doc/html/rfc6749#section-4.4) "
    "given to you by Compass IOT, please only use "
    "[basic auth](https://en.wikipedia.org/wiki/Basic_access_authentication) "
    "via the 'Authorization' header to obtain access tokens"
)

# Visited by the walk but translated as part of their container, or not at all.
_PASSIVE_NODES = (Comment, Option, Reserved, NormalField, MapField, OneOf, OneOfField, EnumField)


class NoServiceDefinitionError(TranslationError):
    """Raised when the root file declares no RPC at all."""

    def __init__(self, filename: str):
        super().__init__(f"no service definition found: {filename}")
        self.filename = filename


class SwaggerWriter:
    """Translate one root proto file (and its imports) into a Swagger document."""

    def __init__(self, filename: str, config: Optional[WriterConfig] = None):
        self.filename = filename
        self.config = config or WriterConfig()
        self.context = TranslationContext()
        self.imports = ImportResolver(self.config.proto_dir)

    @property
    def document(self):
        return self.context.document

    def walk_file(self) -> None:
        """Load the root file and translate it.

        Raises OSError or ProtoParseError when the root file can't be
        loaded, and NoServiceDefinitionError when it has no RPC.
        """
        definition = load_proto_file(self.filename, self.config.proto_dir)
        self.walk(definition)
        if not self.context.paths:
            raise NoServiceDefinitionError(self.filename)

    def walk(self, definition: ProtoFile) -> None:
        """Translate an already parsed root file into ``self.document``."""
        self.context = TranslationContext()
        self.header()
        self.context.import_chain.append(self.filename)
        try:
            for node in walk(definition):
                if isinstance(node, Package):
                    self.context.current_package = node.name
                elif isinstance(node, Import):
                    self.imports.resolve(node.filename, self.context)
                elif isinstance(node, Message):
                    translate_message(node, self.context)
                elif isinstance(node, Enum):
                    translate_enum(node, self.context)
                elif isinstance(node, Service):
                    translate_service(node, self.context)
                elif isinstance(node, RPC):
                    translate_rpc(node, self.context)
                elif not isinstance(node, _PASSIVE_NODES):
                    logger.debug("%s: unknown element %s", self.filename, type(node).__name__)
        finally:
            self.context.import_chain.pop()

    def header(self) -> None:
        """Fill the fixed document header: schemes, security and info."""
        doc = self.document
        hostname = self.config.hostname
        doc.host = hostname
        doc.schemes = ["https"]
        doc.produces = ["application/json"]
        doc.consumes = doc.produces
        doc.security = [{"oauth": []}]
        doc.security_definitions = {
            "oauth": SecurityScheme(
                type="oauth2",
                flow="application",
                token_url=posixpath.join(hostname, "auth"),
                description=OAUTH_DESCRIPTION,
            )
        }
        doc.info = Info(
            title=os.path.basename(self.filename),
            version=self.config.version,
            description=make_description(self.filename, self.config),
            extensions=make_logo(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.document.to_dict()

    def get(self) -> bytes:
        """Serialize the document as indented JSON."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True).encode("utf-8")

    def save(self, filename: str) -> None:
        Path(filename).write_bytes(self.get())
