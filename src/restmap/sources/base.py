from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from restmap.declarations import TypeDeclarations


@dataclass(frozen=True)
class SourceUnit:
    """One candidate file under a configured root."""

    path: Path
    root: Path
    module: str  # dotted path relative to root, e.g. cms/invoice.py -> cms.invoice

    def type_id(self, qualname: str) -> str:
        return f"{self.module}.{qualname}" if self.module else qualname


class DeclarationSource(Protocol):
    """Turns a source unit into the declarations of every class it defines."""

    def load_unit(self, unit: SourceUnit) -> list[TypeDeclarations]: ...


def module_name_for(path: Path, root: Path) -> str:
    rel = path.relative_to(root)
    parts = list(rel.parent.parts)
    stem = rel.name.split(".", 1)[0]
    if stem != "__init__":
        parts.append(stem)
    return ".".join(parts)
