from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Union

from restmap.declarations import TypeDeclarations
from restmap.errors import ConfigurationError
from restmap.repo.scanner import scan_source_units
from restmap.sources.base import DeclarationSource

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "py"

_EXTENSION_DISALLOWED = re.compile(r"[^a-zA-Z0-9.]")


def sanitize_extension(extension: str) -> str:
    """'.PY' -> 'py', 'ts x' -> 'tsx'."""
    return _EXTENSION_DISALLOWED.sub("", extension).lower().lstrip(".")


class UnitDiscovery:
    """
    Finds resource types under a set of root paths.

    The first successful discover() is cached for the life of the instance:
    later calls, and later extension changes, do not re-scan.
    """

    def __init__(
        self,
        source: DeclarationSource,
        paths: Iterable[Union[str, Path]] = (),
        extensions: Optional[Iterable[str]] = None,
    ):
        self.source = source
        self._paths: tuple[Path, ...] = tuple(Path(p).expanduser() for p in paths)
        self._extensions: list[str] = []
        self._declarations: Optional[dict[str, TypeDeclarations]] = None
        self.add_extension(DEFAULT_EXTENSION if extensions is None else extensions)

    @property
    def paths(self) -> tuple[Path, ...]:
        return self._paths

    @property
    def extensions(self) -> tuple[str, ...]:
        return tuple(self._extensions)

    def add_extension(self, extension: Union[str, Iterable[str]]) -> None:
        items = [extension] if isinstance(extension, str) else list(extension)
        for ext in items:
            clean = sanitize_extension(ext)
            if clean and clean not in self._extensions:
                self._extensions.append(clean)

    def remove_extensions(self, extension: Optional[str] = None) -> None:
        """Remove one extension, or all of them when none is given."""
        if extension is None:
            self._extensions = []
            return
        clean = sanitize_extension(extension)
        if clean in self._extensions:
            self._extensions.remove(clean)

    def discover(self) -> tuple[str, ...]:
        """Identifiers of every resource type found under the roots, in discovery order."""
        return tuple(self._discovered())

    def declarations_for(self, class_name: str) -> Optional[TypeDeclarations]:
        return self._discovered().get(class_name)

    def _discovered(self) -> dict[str, TypeDeclarations]:
        if self._declarations is None:
            self._declarations = self._scan()
        return self._declarations

    def _scan(self) -> dict[str, TypeDeclarations]:
        if not self._paths:
            raise ConfigurationError("At least one path to resource source files is required")

        found: dict[str, TypeDeclarations] = {}
        seen_files: set[Path] = set()

        for root in self._paths:
            if not root.is_dir():
                raise ConfigurationError(f"Resource path is not a directory: {root}")

            units = scan_source_units(root, self._extensions)
            logger.info("Scanning %s: %d candidate unit(s)", root, len(units))

            for unit in units:
                # overlapping roots: load each file once
                real = unit.path.resolve()
                if real in seen_files:
                    continue
                seen_files.add(real)

                for decl in self.source.load_unit(unit):
                    if not decl.is_resource:
                        logger.debug("Skipping %s: not a resource", decl.class_name)
                        continue
                    if decl.class_name in found:
                        logger.warning(
                            "Resource %s declared again in %s; keeping %s",
                            decl.class_name,
                            decl.source_path,
                            found[decl.class_name].source_path,
                        )
                        continue
                    found[decl.class_name] = decl

        logger.info("Discovered %d resource type(s)", len(found))
        return found
