from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Union

from restmap.compiler.assembler import assemble_class_metadata
from restmap.compiler.policy import HandlePolicy, get_handle_policy, no_handle_required
from restmap.domain.models import ClassMetaData
from restmap.errors import ConfigurationError, MetadataCompilationError, MetadataError
from restmap.repo.discovery import UnitDiscovery
from restmap.sources.ast_source import AstDeclarationSource
from restmap.sources.base import DeclarationSource
from restmap.sources.import_source import ImportDeclarationSource

if TYPE_CHECKING:
    from restmap.config import Settings

logger = logging.getLogger(__name__)


def make_source(name: str) -> DeclarationSource:
    key = name.strip().lower()
    if key == "ast":
        return AstDeclarationSource()
    if key == "import":
        return ImportDeclarationSource()
    raise ConfigurationError(f"Unknown declaration source '{name}' (expected one of: ast, import)")


class MetadataResolver:
    """
    Long-lived owner of discovery and compiled metadata.

    Compiled ClassMetaData is cached per type for the life of the resolver;
    callers must treat it as read-only.
    """

    def __init__(
        self,
        discovery: UnitDiscovery,
        handle_policy: HandlePolicy = no_handle_required,
    ):
        self.discovery = discovery
        self.handle_policy = handle_policy
        self._metadata: dict[str, ClassMetaData] = {}

    @classmethod
    def create(
        cls,
        paths: Iterable[Union[str, Path]] = (),
        source: Optional[DeclarationSource] = None,
        extensions: Optional[Iterable[str]] = None,
        handle_policy: Optional[HandlePolicy] = None,
    ) -> "MetadataResolver":
        discovery = UnitDiscovery(source or AstDeclarationSource(), paths, extensions)
        return cls(discovery, handle_policy or no_handle_required)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "MetadataResolver":
        return cls.create(
            settings.paths,
            source=make_source(settings.declaration_source),
            extensions=settings.extensions,
            handle_policy=get_handle_policy(settings.handle_policy),
        )

    def get_all_class_names(self) -> tuple[str, ...]:
        return self.discovery.discover()

    def is_resource(self, class_name: str) -> bool:
        return self.discovery.declarations_for(class_name) is not None

    def load_metadata_for_class(self, class_name: str) -> Optional[ClassMetaData]:
        """Compiled metadata for a discovered resource type, or None if it isn't one."""
        cached = self._metadata.get(class_name)
        if cached is not None:
            return cached

        declarations = self.discovery.declarations_for(class_name)
        if declarations is None:
            return None

        metadata = assemble_class_metadata(declarations, self.handle_policy)
        if metadata is not None:
            self._metadata[class_name] = metadata
        return metadata

    def compile_table(self) -> Mapping[str, ClassMetaData]:
        """
        Compile every discovered resource type.

        Each type compiles on its own: a failing type never stops the others.
        If any failed, MetadataCompilationError is raised once all were tried.
        """
        class_names = self.get_all_class_names()
        failures: dict[str, MetadataError] = {}

        for class_name in class_names:
            try:
                self.load_metadata_for_class(class_name)
            except MetadataError as exc:
                logger.error("Failed to compile %s: %s", class_name, exc)
                failures[class_name] = exc

        table = MappingProxyType(
            {n: self._metadata[n] for n in class_names if n in self._metadata}
        )
        if failures:
            raise MetadataCompilationError(failures, table)

        logger.info("Compiled %d resource type(s)", len(table))
        return table
