"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .extractor import TypeDeclaration


class TypeRegistry:
    """
    Corpus-wide accumulator of type-alias declarations keyed by name.

    Names keep first-seen order and each name's declarations keep
    insertion order, so a fixed file order gives a reproducible registry.
    The registry only grows: duplicates are what the analysis looks for,
    so nothing is merged or dropped here.
    """

    __slots__ = ("_by_name",)

    def __init__(self) -> None:
        self._by_name: dict[str, list[TypeDeclaration]] = {}

    def record(self, name: str, declaration: TypeDeclaration) -> None:
        self._by_name.setdefault(name, []).append(declaration)

    def record_all(self, declarations: Iterable[TypeDeclaration]) -> None:
        for declaration in declarations:
            self.record(declaration.name, declaration)

    def occurrences(self, name: str) -> tuple[TypeDeclaration, ...]:
        return tuple(self._by_name.get(name, ()))

    def names_with_duplicates(self) -> list[str]:
        return [name for name, decls in self._by_name.items() if len(decls) > 1]

    def declaration_count(self) -> int:
        return sum(len(decls) for decls in self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)
