"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import PurePath

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from .errors import ParseError


class Dialect(str, Enum):
    TYPESCRIPT = "typescript"
    TSX = "tsx"


def dialect_for(filepath: str) -> Dialect:
    if PurePath(filepath).suffix.lower() == ".tsx":
        return Dialect.TSX
    return Dialect.TYPESCRIPT


@lru_cache(maxsize=None)
def _language(dialect: Dialect) -> Language:
    if dialect is Dialect.TSX:
        return Language(tree_sitter_typescript.language_tsx())
    return Language(tree_sitter_typescript.language_typescript())


@lru_cache(maxsize=None)
def get_parser(dialect: Dialect) -> Parser:
    # One parser per grammar per process; workers build their own on first use.
    return Parser(_language(dialect))


def first_error(node: Node) -> Node | None:
    """Return the first ERROR or MISSING node in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        stack.extend(
            child for child in reversed(current.children) if child.has_error
        )
    return None


def parse_source(source: str, filepath: str) -> Tree:
    tree = get_parser(dialect_for(filepath)).parse(source.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        bad = first_error(root) or root
        row, column = bad.start_point
        raise ParseError(
            f"Failed to parse {filepath}: syntax error at line {row + 1}, "
            f"column {column + 1}"
        )
    return tree
