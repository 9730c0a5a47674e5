from __future__ import annotations

from pathlib import Path
from typing import Iterable

from restmap.repo.ignore import should_ignore_dir
from restmap.sources.base import SourceUnit, module_name_for


def scan_source_units(
    root: Path,
    extensions: Iterable[str],
    max_files: int | None = None,
) -> list[SourceUnit]:
    """
    Return the files under root whose name ends with one of the extensions
    (given without leading dot, lower-case). Deterministic: directories and
    files are visited in sorted order.
    """
    root = root.resolve()
    suffixes = tuple(f".{ext}" for ext in extensions)
    out: list[SourceUnit] = []
    if not suffixes:
        return out

    for dirpath, dirs, files in _walk(root):
        root_p = Path(dirpath)

        # prune ignored dirs, keep walk order stable
        dirs[:] = sorted(d for d in dirs if not should_ignore_dir(root_p / d))

        for f in sorted(files):
            if not f.lower().endswith(suffixes):
                continue
            path = root_p / f
            out.append(SourceUnit(path=path, root=root, module=module_name_for(path, root)))
            if max_files is not None and len(out) >= max_files:
                return out
    return out


def _walk(root: Path):
    # Separate helper to make unit testing easier (can be mocked)
    return __import__("os").walk(root)
