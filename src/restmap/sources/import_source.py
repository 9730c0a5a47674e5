from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Optional

from restmap.declarations import (
    HANDLES_ATTR,
    RESOURCE_ATTR,
    HandleDeclaration,
    MethodDeclarations,
    TypeDeclarations,
)
from restmap.errors import UnitLoadError
from restmap.sources.base import SourceUnit

logger = logging.getLogger(__name__)


class ImportDeclarationSource:
    """
    Runtime declaration source: imports each unit from its file and reads the
    attributes left by @resource / @handle. A given file is imported at most
    once per process; later loads reuse the module.
    """

    def __init__(self, module_prefix: str = "restmap_units"):
        self.module_prefix = module_prefix

    def load_unit(self, unit: SourceUnit) -> list[TypeDeclarations]:
        module = self._import(unit)
        out: list[TypeDeclarations] = []
        for cls in list(vars(module).values()):
            # only classes defined by this unit, not its imports
            if not inspect.isclass(cls) or cls.__module__ != module.__name__:
                continue
            out.append(
                declarations_for_class(
                    cls,
                    class_name=unit.type_id(cls.__qualname__),
                    source_path=str(unit.path),
                )
            )
        return out

    def _import(self, unit: SourceUnit) -> ModuleType:
        module_name = _module_key(self.module_prefix, unit)
        existing = sys.modules.get(module_name)
        if existing is not None and _same_file(getattr(existing, "__file__", None), unit.path):
            return existing

        spec = importlib.util.spec_from_file_location(module_name, unit.path)
        if spec is None or spec.loader is None:
            raise UnitLoadError(str(unit.path), "not an importable module")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            sys.modules.pop(module_name, None)
            raise UnitLoadError(str(unit.path), f"{type(exc).__name__}: {exc}") from exc

        logger.debug("Imported %s as %s", unit.path, module_name)
        return module


def declarations_for_class(
    cls: type,
    class_name: Optional[str] = None,
    source_path: str = "",
) -> TypeDeclarations:
    """Read the declarations a decorated class carries."""
    if class_name is None:
        class_name = f"{cls.__module__}.{cls.__qualname__}"
    if not source_path:
        source_path = _source_file(cls)

    # the marker is not inherited: look at the class's own namespace only
    resource = cls.__dict__.get(RESOURCE_ATTR)

    return TypeDeclarations(
        class_name=class_name,
        resource=resource,
        methods=tuple(_method_declarations(cls)),
        source_path=source_path,
    )


def _method_declarations(cls: type) -> list[MethodDeclarations]:
    # definition order, base classes first; overrides replace the base entry
    found: dict[str, MethodDeclarations] = {}
    for klass in reversed(cls.__mro__[:-1]):
        for name, attr in vars(klass).items():
            handles = getattr(attr, HANDLES_ATTR, ())
            if isinstance(attr, (staticmethod, classmethod)):
                attr = attr.__func__
                handles = handles or getattr(attr, HANDLES_ATTR, ())
            if not inspect.isfunction(attr):
                continue
            found[name] = MethodDeclarations(
                name=name,
                is_public=not name.startswith("_"),
                handles=tuple(h for h in handles if isinstance(h, HandleDeclaration)),
            )
    return list(found.values())


def _module_key(prefix: str, unit: SourceUnit) -> str:
    module = unit.module or unit.path.stem
    return f"{prefix}.{module}" if prefix else module


def _same_file(a: Optional[str], b: Path) -> bool:
    if a is None:
        return False
    return Path(a).resolve() == b.resolve()


def _source_file(cls: type) -> str:
    try:
        return inspect.getsourcefile(cls) or ""
    except TypeError:
        # builtins and classes created at runtime
        return ""
