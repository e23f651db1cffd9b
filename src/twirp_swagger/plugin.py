"""protoc plugin: ``protoc --twirp-swagger_out=. --twirp-swagger_opt=...``

Reads a CodeGeneratorRequest from stdin and writes a CodeGeneratorResponse
to stdout. Source files are loaded from ``proto_dir`` rather than from the
request descriptors, so the documentation comments are available.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Dict, List

from google.protobuf.compiler import plugin_pb2

from twirp_swagger.config import DEFAULT_PATH_PREFIX, WriterConfig, parse_plugin_parameter
from twirp_swagger.generator.service_translator import TranslationError
from twirp_swagger.generator.swagger_writer import NoServiceDefinitionError, SwaggerWriter
from twirp_swagger.parser.proto_ast_parser import ProtoParseError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_SUFFIX = ".swagger.json"
REQUIRED_OPTIONS = ("hostname", "version", "sdk_files", "proto_dir", "template_dir")


class PluginError(Exception):
    """Raised for invalid plugin parameters."""


def _config_from_options(options: Dict[str, str]) -> WriterConfig:
    for key in REQUIRED_OPTIONS:
        if not options.get(key):
            raise PluginError(f"{key} is empty")
    return WriterConfig(
        hostname=options["hostname"],
        path_prefix=options.get("path_prefix", DEFAULT_PATH_PREFIX),
        version=options["version"],
        sdk_files=options["sdk_files"],
        proto_dir=options["proto_dir"],
        template_dir=options["template_dir"],
    )


def output_name(proto_file: str, out_dir: str = "", suffix: str = DEFAULT_OUTPUT_SUFFIX) -> str:
    """``foo/bar.proto`` -> ``<out_dir>bar<suffix>``."""
    prefix = proto_file[: -len(".proto")] if proto_file.endswith(".proto") else proto_file
    return out_dir + os.path.basename(prefix) + suffix


def generate(request: plugin_pb2.CodeGeneratorRequest) -> plugin_pb2.CodeGeneratorResponse:
    response = plugin_pb2.CodeGeneratorResponse()
    options = parse_plugin_parameter(request.parameter)
    suffix = options.get("output_suffix") or DEFAULT_OUTPUT_SUFFIX
    out_dir = options.get("out_dir", "")

    files: List[plugin_pb2.CodeGeneratorResponse.File] = []
    for proto_file in request.file_to_generate:
        logger.debug("generating: %s", proto_file)
        try:
            config = _config_from_options(options)
            writer = SwaggerWriter(proto_file, config)
            writer.walk_file()
        except NoServiceDefinitionError as e:
            logger.debug("skip writing file, %s", e)
            continue
        except (PluginError, OSError, UnicodeDecodeError, ProtoParseError, TranslationError) as e:
            response.error = f"{proto_file}: {e}"
            return response

        out = plugin_pb2.CodeGeneratorResponse.File()
        out.name = output_name(proto_file, out_dir, suffix)
        out.content = writer.get().decode("utf-8")
        files.append(out)

    response.file.extend(files)
    return response


def main() -> None:
    logging.basicConfig(stream=sys.stderr, level=logging.INFO)

    request = plugin_pb2.CodeGeneratorRequest()
    request.ParseFromString(sys.stdin.buffer.read())
    response = generate(request)
    sys.stdout.buffer.write(response.SerializeToString())


if __name__ == "__main__":
    main()
