from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from twirp_swagger.models import Operation, Schema, SwaggerDocument, Tag


@dataclass
class TranslationContext:
    """Mutable state of one root-file translation.

    Every translator reads the active package from here and writes its
    output into ``document``. A context must not be shared between
    translations.
    """

    current_package: str = ""
    document: SwaggerDocument = field(default_factory=SwaggerDocument)
    # files whose walk is in progress, outermost first
    import_chain: List[str] = field(default_factory=list)
    _saved_packages: List[str] = field(default_factory=list, repr=False)

    @property
    def definitions(self) -> Dict[str, Schema]:
        return self.document.definitions

    @property
    def paths(self) -> Dict[str, Operation]:
        return self.document.paths

    @property
    def tags(self) -> List[Tag]:
        return self.document.tags

    def qualify(self, type_name: str) -> str:
        """Prefix a bare type name with the active package."""
        type_name = type_name.lstrip(".")
        if "." in type_name or not self.current_package:
            return type_name
        return f"{self.current_package}.{type_name}"

    @contextmanager
    def package_scope(self) -> Iterator[None]:
        """Restore the active package after walking another file."""
        self._saved_packages.append(self.current_package)
        try:
            yield
        finally:
            self.current_package = self._saved_packages.pop()
