from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from typeclash.contracts import FINGERPRINT_VERSION, REPORT_SCHEMA_VERSION
from typeclash.extractor import extract_declarations_from_source

ReportMetaFactory = Callable[..., dict[str, object]]
WriteTs = Callable[[str, str], Path]
ShapeOf = Callable[..., str]


@pytest.fixture
def report_meta_factory() -> ReportMetaFactory:
    def _make(**overrides: object) -> dict[str, object]:
        meta: dict[str, object] = {
            "report_schema_version": REPORT_SCHEMA_VERSION,
            "typeclash_version": "1.0.0",
            "python_version": "3.13",
            "fingerprint_version": FINGERPRINT_VERSION,
            "scan_root": "/repo",
            "collision_policy": "all",
            "files_found": 2,
            "files_analyzed": 2,
            "files_skipped": 0,
        }
        meta.update(overrides)
        return meta

    return _make


@pytest.fixture
def write_ts(tmp_path: Path) -> WriteTs:
    def _write(relpath: str, source: str) -> Path:
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, "utf-8")
        return path

    return _write


@pytest.fixture
def shape_of() -> ShapeOf:
    """Shape of the single top-level alias in `source`."""

    def _shape(source: str, filepath: str = "sample.ts") -> str:
        declarations = extract_declarations_from_source(source, filepath)
        assert len(declarations) == 1
        return declarations[0].shape

    return _shape
