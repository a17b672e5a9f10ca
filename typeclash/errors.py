"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""


class TypeClashError(Exception):
    """Base exception for TypeClash."""


class FileProcessingError(TypeClashError):
    """Error processing a source file."""


class FileReadError(FileProcessingError):
    """Source file could not be stat'ed, read or decoded."""


class ParseError(FileProcessingError):
    """TypeScript parsing failed."""


class ValidationError(TypeClashError):
    """Input validation failed."""
