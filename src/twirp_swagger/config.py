from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

DEFAULT_PATH_PREFIX = "/twirp"


def split_sdk_files(value: str) -> List[str]:
    """Split a comma-separated SDK file list, dropping blank entries."""
    return [f.strip() for f in value.split(",") if f.strip()]


@dataclass
class WriterConfig:
    hostname: str = ""
    # Accepted for compatibility; routes always follow route_for().
    path_prefix: str = DEFAULT_PATH_PREFIX
    version: str = ""
    sdk_files: List[str] = field(default_factory=list)
    proto_dir: str = ""
    template_dir: str = ""

    def __post_init__(self) -> None:
        if not self.path_prefix:
            self.path_prefix = DEFAULT_PATH_PREFIX
        if isinstance(self.sdk_files, str):
            self.sdk_files = split_sdk_files(self.sdk_files)


def parse_plugin_parameter(parameter: str) -> Dict[str, str]:
    """Parse a protoc ``--twirp-swagger_opt`` string into a dict.

    Options are ``key=value`` pairs separated by commas. An item without
    ``=`` continues the previous value, so ``sdk_files=a.ts,b.py`` keeps
    both files.
    """
    options: Dict[str, str] = {}
    last_key = None
    for item in parameter.split(","):
        if "=" in item:
            key, value = item.split("=", 1)
            last_key = key.strip()
            options[last_key] = value.strip()
        elif last_key is not None:
            options[last_key] += "," + item.strip()
        elif item.strip():
            options[item.strip()] = ""
    return options
