from __future__ import annotations

import logging

from twirp_swagger.generator.context import TranslationContext
from twirp_swagger.generator.message_translator import translate_enum, translate_message
from twirp_swagger.parser.proto_ast import Enum, Import, Message, Package, walk
from twirp_swagger.parser.proto_ast_parser import ProtoParseError
from twirp_swagger.parser.proto_loader import load_proto_file

logger = logging.getLogger(__name__)

# Imports that are never loaded: HTTP annotations do not describe Twirp
# routes, and timestamps and wrappers are mapped in type_aliases.
SKIPPED_IMPORTS = (
    "google/api/annotations.proto",
    "google/protobuf/timestamp.proto",
    "google/protobuf/wrappers.proto",
)


class ImportResolver:
    """Harvest message and enum definitions from imported proto files.

    Loading is best effort: a file that cannot be read or parsed is logged
    and skipped. Services in imported files are ignored, only the root
    file contributes paths and tags.
    """

    def __init__(self, proto_dir: str = ""):
        self.proto_dir = proto_dir

    def resolve(self, import_path: str, context: TranslationContext) -> None:
        if any(skipped in import_path for skipped in SKIPPED_IMPORTS):
            logger.debug("skipping well-known import %s", import_path)
            return

        if import_path in context.import_chain:
            logger.warning(
                "import cycle %s, ignoring",
                " -> ".join(context.import_chain + [import_path]),
            )
            return

        logger.debug("importing %s", import_path)
        try:
            definition = load_proto_file(import_path, self.proto_dir)
        except (OSError, UnicodeDecodeError, ProtoParseError) as e:
            logger.info("can't load %s, ignoring: %s", import_path, e)
            return

        context.import_chain.append(import_path)
        try:
            with context.package_scope():
                for node in walk(definition):
                    if isinstance(node, Package):
                        context.current_package = node.name
                    elif isinstance(node, Import):
                        self.resolve(node.filename, context)
                    elif isinstance(node, Message):
                        translate_message(node, context)
                    elif isinstance(node, Enum):
                        translate_enum(node, context)
        finally:
            context.import_chain.pop()
