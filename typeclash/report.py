"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from .analyzer import Classification, DuplicateFinding, DuplicateReport
from .contracts import REPORT_SCHEMA_VERSION
from .extractor import TypeDeclaration
from .fingerprint import short_fingerprint

DeclarationRecord = dict[str, object]
FindingRecord = dict[str, object]

_TEXT_SECTIONS = (
    ("IDENTICAL SHAPES", Classification.IDENTICAL_SHAPE),
    ("NAME COLLISIONS", Classification.NAME_COLLISION),
)


def _encode_declaration(decl: TypeDeclaration) -> DeclarationRecord:
    return {
        "filepath": decl.filepath,
        "line": decl.line,
        "exported": decl.is_exported,
        "fingerprint": decl.fingerprint,
    }


def _encode_finding(finding: DuplicateFinding) -> FindingRecord:
    return {
        "name": finding.name,
        "classification": finding.classification.value,
        "first": _encode_declaration(finding.first),
        "second": _encode_declaration(finding.second),
    }


def _collect_files(report: DuplicateReport) -> list[str]:
    files: set[str] = set()
    for finding in report.findings:
        files.add(finding.first.filepath)
        files.add(finding.second.filepath)
    return sorted(files)


def _summary_payload(report: DuplicateReport) -> dict[str, int]:
    return {
        "unique_names": report.unique_names,
        "declarations": report.declaration_count,
        "duplicated_names": report.duplicated_names,
        "identical": report.identical_count,
        "collisions": report.collision_count,
        "total_findings": len(report.findings),
    }


def to_json_report(
    report: DuplicateReport,
    meta: Mapping[str, object] | None = None,
) -> str:
    """
    Serialize report JSON schema v1.0.

    Findings keep analysis order (names in first-seen order, pairs by
    insertion index), which is stable because registration follows sorted
    discovery order.
    """
    meta_payload = dict(meta or {})
    meta_payload["report_schema_version"] = REPORT_SCHEMA_VERSION

    payload: dict[str, object] = {
        "meta": meta_payload,
        "summary": _summary_payload(report),
        "files": _collect_files(report),
        "findings": [_encode_finding(f) for f in report.findings],
    }
    return json.dumps(
        payload,
        ensure_ascii=False,
        indent=2,
    )


def _format_meta_text_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "(none)"
    text = str(value).strip()
    return text if text else "(none)"


def _format_finding_text(finding: DuplicateFinding) -> list[str]:
    lines = [f"- {finding.name}"]
    for decl in (finding.first, finding.second):
        lines.append(
            f"    {decl.filepath}:{decl.line} "
            f"fingerprint={short_fingerprint(decl.fingerprint)}"
        )
    return lines


def to_text_report(
    report: DuplicateReport,
    *,
    meta: Mapping[str, object],
) -> str:
    """Serialize deterministic TXT report."""
    lines = [
        "REPORT METADATA",
        "Report schema version: "
        f"{_format_meta_text_value(meta.get('report_schema_version'))}",
        f"TypeClash version: {_format_meta_text_value(meta.get('typeclash_version'))}",
        f"Python version: {_format_meta_text_value(meta.get('python_version'))}",
        "Fingerprint version: "
        f"{_format_meta_text_value(meta.get('fingerprint_version'))}",
        f"Scan root: {_format_meta_text_value(meta.get('scan_root'))}",
        f"Collision policy: {_format_meta_text_value(meta.get('collision_policy'))}",
        f"Files found: {_format_meta_text_value(meta.get('files_found'))}",
        f"Files analyzed: {_format_meta_text_value(meta.get('files_analyzed'))}",
        f"Files skipped: {_format_meta_text_value(meta.get('files_skipped'))}",
        "",
        "SUMMARY",
        f"Unique type names: {report.unique_names}",
        f"Type declarations: {report.declaration_count}",
        f"Duplicated names: {report.duplicated_names}",
    ]

    for title, classification in _TEXT_SECTIONS:
        section = [f for f in report.findings if f.classification is classification]
        lines.append("")
        lines.append(f"{title} (pairs={len(section)})")
        if not section:
            lines.append("(none)")
            continue
        for finding in section:
            lines.extend(_format_finding_text(finding))

    return "\n".join(lines).rstrip() + "\n"
