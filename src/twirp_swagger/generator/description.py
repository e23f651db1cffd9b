"""API overview text and logo for the document ``info`` block.

The overview lives in an optional Jinja2 template named after the root
proto file (``admin.proto`` -> ``<template_dir>/admin.html``). Templates see
one variable per SDK file, named after the file with dots, underscores and
hyphens removed (``survey_pb2.py`` -> ``surveypb2py``), holding its public
download URL.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, TemplateError

from twirp_swagger.config import WriterConfig

logger = logging.getLogger(__name__)

GCS_DOMAIN = "https://storage.googleapis.com"
PUBLIC_DOCS_BUCKET = "compass-public-docs"

EXT_XLOGO_KEY = "x-logo"
LOGO_FILENAME = "compass_logo.png"
LOGO_ALTTEXT = "Compass IoT logo"


def make_gcs_url(bucket: str, *parts: str) -> str:
    """Join the storage domain, a bucket and a nested file path."""
    segments = [s.strip("/") for s in (bucket, *parts)]
    return "/".join([GCS_DOMAIN] + [s for s in segments if s])


def get_label(file: str) -> str:
    """Return ``file`` without its extension."""
    return os.path.splitext(file)[0]


def get_template_file(template_dir: str, proto_file: str) -> str:
    base = os.path.basename(get_label(proto_file)) + ".html"
    return os.path.join(template_dir, base)


def _sdk_key(sdk_file: str) -> str:
    key = os.path.basename(sdk_file)
    for ch in (".", "_", "-"):
        key = key.replace(ch, "")
    return key.strip()


def map_sdk_files(filename: str, version: str, sdk_files: List[str]) -> Dict[str, str]:
    label = get_label(filename)
    return {
        _sdk_key(f): make_gcs_url(PUBLIC_DOCS_BUCKET, label, version, f)
        for f in sdk_files
    }


def render_template(template_file: str, data: Dict[str, Any]) -> str:
    """Render ``template_file`` with ``data``; a missing file renders as ""."""
    path = Path(template_file)
    if not path.is_file():
        return ""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        keep_trailing_newline=True,
    )
    template = env.get_template(path.name)
    return template.render(data)


def make_description(filename: str, config: WriterConfig) -> str:
    template_file = get_template_file(config.template_dir, filename)
    data = map_sdk_files(filename, config.version, config.sdk_files)
    try:
        return render_template(template_file, data)
    except TemplateError as e:
        logger.warning("can't render %s, leaving description empty: %s", template_file, e)
        return ""


def make_logo() -> Dict[str, Any]:
    """Return the ``x-logo`` extension used by ReDoc to show the logo."""
    return {
        EXT_XLOGO_KEY: {
            "url": make_gcs_url(PUBLIC_DOCS_BUCKET, LOGO_FILENAME),
            "altText": LOGO_ALTTEXT,
        }
    }
