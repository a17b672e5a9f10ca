"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node, Tree

from .canonical import canonicalize
from .fingerprint import sha1
from .parser import parse_source

# =========================
# Data structures
# =========================


@dataclass(frozen=True, slots=True)
class TypeDeclaration:
    name: str
    filepath: str
    line: int
    is_exported: bool
    fingerprint: str
    shape: str


@dataclass(frozen=True, slots=True)
class TypeAliasDraft:
    """A top-level `type` statement before canonicalization."""

    name: str
    line: int
    is_exported: bool
    value: Node


# =========================
# Helpers
# =========================

# `export` and `declare` may wrap a statement, and each other.
_WRAPPERS = frozenset({"export_statement", "ambient_declaration"})


def _alias_draft(node: Node, *, is_exported: bool) -> TypeAliasDraft | None:
    name = node.child_by_field_name("name")
    value = node.child_by_field_name("value")
    if name is None or value is None or name.text is None:
        return None
    return TypeAliasDraft(
        name=name.text.decode("utf-8"),
        line=node.start_point[0] + 1,
        is_exported=is_exported,
        value=value,
    )


def _iter_statement(node: Node, *, wrapped: bool) -> Iterator[TypeAliasDraft]:
    if node.type == "type_alias_declaration":
        draft = _alias_draft(node, is_exported=wrapped)
        if draft is not None:
            yield draft
        return
    if node.type in _WRAPPERS:
        for child in node.named_children:
            yield from _iter_statement(child, wrapped=True)


# =========================
# Public API
# =========================


def iter_type_aliases(tree: Tree) -> Iterator[TypeAliasDraft]:
    """
    Yield the module-level type aliases of a parsed file in source order.

    Only direct statements of the program are considered; aliases inside
    functions, classes, namespaces, `declare module` and `declare global`
    blocks are not module-level and are skipped.
    """
    for statement in tree.root_node.named_children:
        yield from _iter_statement(statement, wrapped=False)


def declaration_from_draft(draft: TypeAliasDraft, filepath: str) -> TypeDeclaration:
    shape = canonicalize(draft.value)
    return TypeDeclaration(
        name=draft.name,
        filepath=filepath,
        line=draft.line,
        is_exported=draft.is_exported,
        fingerprint=sha1(shape),
        shape=shape,
    )


def extract_declarations_from_source(
    source: str, filepath: str, *, display_path: str | None = None
) -> list[TypeDeclaration]:
    """
    Parse one file and return its top-level type-alias declarations.

    Raises ParseError for malformed source; such a file contributes
    nothing to the run.
    """
    tree = parse_source(source, filepath)
    shown = display_path if display_path is not None else filepath
    return [declaration_from_draft(d, shown) for d in iter_type_aliases(tree)]
