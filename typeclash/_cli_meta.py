"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TypedDict

from .contracts import FINGERPRINT_VERSION, REPORT_SCHEMA_VERSION


def _current_python_version() -> str:
    return f"{sys.version_info.major}.{sys.version_info.minor}"


class ReportMeta(TypedDict):
    """
    Canonical report metadata contract shared by JSON and TXT reports.

    Key semantics:
    - python_version: runtime major.minor string (e.g. "3.13")
    - fingerprint_version: version of the canonical shape encoding; two
      reports with different values are not comparable
    - files_*: discovery accounting, found == analyzed + skipped
    """

    report_schema_version: str
    typeclash_version: str
    python_version: str
    fingerprint_version: str
    scan_root: str
    collision_policy: str
    files_found: int
    files_analyzed: int
    files_skipped: int


def _build_report_meta(
    *,
    typeclash_version: str,
    scan_root: Path,
    collision_policy: str,
    files_found: int,
    files_analyzed: int,
    files_skipped: int,
) -> ReportMeta:
    return {
        "report_schema_version": REPORT_SCHEMA_VERSION,
        "typeclash_version": typeclash_version,
        "python_version": _current_python_version(),
        "fingerprint_version": FINGERPRINT_VERSION,
        "scan_root": str(scan_root),
        "collision_policy": collision_policy,
        "files_found": files_found,
        "files_analyzed": files_analyzed,
        "files_skipped": files_skipped,
    }
