"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import ValidationError

TS_SUFFIXES = (".ts", ".tsx", ".mts", ".cts")

DEFAULT_EXCLUDES = (
    "node_modules",
    "dist",
    ".nx",
    "build",
    ".github",
    ".azuredevops",
    ".vscode",
    ".git",
    ".yarn",
    ".npm",
)


def is_ts_source(path: Path) -> bool:
    return path.suffix.lower() in TS_SUFFIXES


def is_excluded(parts: Iterable[str], excludes: Iterable[str]) -> bool:
    """
    True when any path segment is an excluded segment.

    A file is kept only if it contains none of the excluded segments.
    """
    segments = set(parts)
    return any(ex in segments for ex in excludes)


def _iter_candidates(rootp: Path) -> Iterator[Path]:
    for suffix in TS_SUFFIXES:
        yield from rootp.rglob(f"*{suffix}")


def iter_ts_files(
    root: str,
    excludes: tuple[str, ...] = DEFAULT_EXCLUDES,
    *,
    max_files: int = 100_000,
) -> Iterable[str]:
    try:
        rootp = Path(root).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise ValidationError(f"Invalid root path '{root}': {e}") from e

    if rootp.is_file():
        if not is_ts_source(rootp):
            raise ValidationError(f"Not a TypeScript source file: {root}")
        yield str(rootp)
        return

    if not rootp.is_dir():
        raise ValidationError(f"Root must be a directory or a file: {root}")

    found: set[Path] = set()
    for p in _iter_candidates(rootp):
        if not p.is_file():
            continue
        # Verify path is actually under root (prevent symlink attacks)
        try:
            p.resolve().relative_to(rootp)
        except ValueError:
            continue

        if is_excluded(p.relative_to(rootp).parts, excludes):
            continue

        found.add(p)
        if len(found) > max_files:
            raise ValidationError(
                f"File count exceeds limit of {max_files}. "
                "Use more specific root or increase limit."
            )

    for p in sorted(found):
        yield str(p)


def display_path(root: str, filepath: str) -> str:
    """Path relative to the scan root when possible, for reports."""
    rootp = Path(root).resolve()
    fp = Path(filepath).resolve()
    base = rootp.parent if rootp.is_file() else rootp
    try:
        return fp.relative_to(base).as_posix()
    except ValueError:
        return fp.as_posix()
