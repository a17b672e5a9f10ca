"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("typeclash")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = ["__version__"]
