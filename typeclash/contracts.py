"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final

FINGERPRINT_VERSION: Final = "1"
REPORT_SCHEMA_VERSION: Final = "1.0"


class ExitCode(IntEnum):
    SUCCESS = 0
    CONTRACT_ERROR = 2
    GATING_FAILURE = 3
    INTERNAL_ERROR = 5


REPOSITORY_URL: Final = "https://github.com/orenlab/typeclash"
ISSUES_URL: Final = "https://github.com/orenlab/typeclash/issues"
DOCS_URL: Final = "https://github.com/orenlab/typeclash/tree/main/docs"

EXIT_CODE_DESCRIPTIONS: Final[tuple[tuple[ExitCode, str], ...]] = (
    (ExitCode.SUCCESS, "success"),
    (
        ExitCode.CONTRACT_ERROR,
        "contract error (invalid root path, invalid output extensions)",
    ),
    (
        ExitCode.GATING_FAILURE,
        "gating failure (identical shapes found, threshold exceeded)",
    ),
    (
        ExitCode.INTERNAL_ERROR,
        "internal error (unexpected exception; please report)",
    ),
)


def cli_help_epilog() -> str:
    lines = ["Exit codes"]
    for code, description in EXIT_CODE_DESCRIPTIONS:
        lines.append(f"  - {int(code)} - {description}")
    lines.extend(
        [
            "",
            f"Repository: {REPOSITORY_URL}",
            f"Issues: {ISSUES_URL}",
            f"Docs: {DOCS_URL}",
        ]
    )
    return "\n".join(lines)
