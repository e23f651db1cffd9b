from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from twirp_swagger.config import DEFAULT_PATH_PREFIX, WriterConfig
from twirp_swagger.generator.service_translator import TranslationError
from twirp_swagger.generator.swagger_writer import NoServiceDefinitionError, SwaggerWriter
from twirp_swagger.parser.proto_ast_parser import ProtoParseError

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".swagger.json"


def _find_proto_files(root: str) -> List[str]:
    """Recursively find .proto files under root, sorted for deterministic output."""
    return sorted(str(p) for p in Path(root).rglob("*.proto"))


def generate(filename: str, output: str, config: WriterConfig) -> None:
    """Translate ``filename`` (relative to config.proto_dir) into ``output``."""
    if os.path.abspath(os.path.join(config.proto_dir, filename)) == os.path.abspath(output):
        raise ValueError("output file must be different than input file")

    writer = SwaggerWriter(filename, config)
    writer.walk_file()
    writer.save(output)


def output_path(root: str, path: str, out_dir: str) -> str:
    """``<root>/a/orders.proto`` -> ``<out_dir>/a/orders.swagger.json``."""
    relative = os.path.splitext(os.path.relpath(path, root))[0]
    return os.path.join(out_dir, relative + OUTPUT_SUFFIX)


def generate_directory(root: str, out_dir: str, config: WriterConfig) -> List[str]:
    """Translate every .proto file below ``root``; files without services are skipped.

    Outputs mirror the directory layout below ``root``, so files sharing a
    base name in different directories do not overwrite each other.
    """
    if not config.proto_dir:
        config = replace(config, proto_dir=root)
    os.makedirs(out_dir, exist_ok=True)

    generated: List[str] = []
    for path in _find_proto_files(root):
        # names are relative to proto_dir, like import paths
        proto_file = Path(os.path.relpath(path, config.proto_dir)).as_posix()
        output = output_path(root, path, out_dir)
        os.makedirs(os.path.dirname(output), exist_ok=True)
        try:
            generate(proto_file, output, config)
        except NoServiceDefinitionError as e:
            logger.debug("skip writing file, %s", e)
            continue
        generated.append(output)
    return generated


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate Swagger 2.0 documentation for Twirp services from .proto files",
    )
    parser.add_argument(
        "--in",
        dest="input",
        required=True,
        help="Input .proto file, or a directory containing .proto files (recursively)",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output swagger.json file, or output directory when --in is a directory",
    )
    parser.add_argument("--host", default="api.example.com", help="API host name")
    parser.add_argument("--path-prefix", default=DEFAULT_PATH_PREFIX, help="Route path prefix")
    parser.add_argument("--version", dest="api_version", default="", help="API version shown in the document")
    parser.add_argument(
        "--sdk-files",
        default="",
        help="Comma-separated SDK file names linked from the description template",
    )
    parser.add_argument("--proto-dir", default="", help="Directory imports are resolved against")
    parser.add_argument("--template-dir", default="", help="Directory holding description templates")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.host:
        print("error: missing parameter: --host [api.example.com]", file=sys.stderr)
        return 1

    config = WriterConfig(
        hostname=args.host,
        path_prefix=args.path_prefix,
        version=args.api_version,
        sdk_files=args.sdk_files,
        proto_dir=args.proto_dir,
        template_dir=args.template_dir,
    )

    try:
        if os.path.isdir(args.input):
            generated = generate_directory(args.input, args.out, config)
            if not generated:
                print(f"No service definitions found under directory: {args.input}")
                return 0
            print("Generated:\n" + "\n".join(generated))
        else:
            generate(args.input, args.out, config)
            print(f"Generated: {args.out}")
    except (OSError, ValueError, ProtoParseError, TranslationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
