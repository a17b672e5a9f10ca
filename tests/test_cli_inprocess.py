from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import pytest
from rich.console import Console

from typeclash import cli
from typeclash.contracts import REPORT_SCHEMA_VERSION, ExitCode


@dataclass(slots=True)
class _DummyFuture:
    _result: object

    def result(self) -> object:
        return self._result


class _DummyExecutor:
    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers

    def __enter__(self) -> _DummyExecutor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object | None,
    ) -> Literal[False]:
        return False

    def submit(
        self, fn: Callable[..., object], *args: object, **kwargs: object
    ) -> _DummyFuture:
        return _DummyFuture(fn(*args, **kwargs))


class _FailingExecutor:
    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers

    def __enter__(self) -> _FailingExecutor:
        raise PermissionError("nope")

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object | None,
    ) -> Literal[False]:
        return False


@dataclass(slots=True)
class _FixedFuture:
    value: object | None = None
    error: Exception | None = None

    def result(self) -> object | None:
        if self.error:
            raise self.error
        return self.value


class _FixedExecutor:
    def __init__(self, future: _FixedFuture, *args: object, **kwargs: object) -> None:
        self._future = future

    def __enter__(self) -> _FixedExecutor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object | None,
    ) -> Literal[False]:
        return False

    def submit(
        self, fn: Callable[..., object], *args: object, **kwargs: object
    ) -> _FixedFuture:
        return self._future


class _DummyProgress:
    def __init__(self, *args: object, **kwargs: object) -> None:
        return None

    def __enter__(self) -> _DummyProgress:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object | None,
    ) -> Literal[False]:
        return False

    def add_task(self, _desc: str, total: int) -> int:
        return total

    def advance(self, _task: int) -> None:
        return None


def _patch_parallel(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "ProcessPoolExecutor", _DummyExecutor)
    monkeypatch.setattr(cli, "as_completed", lambda futures: futures)


def _patch_wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    # Long tmp paths must not wrap inside asserted fragments.
    monkeypatch.setattr(
        cli,
        "_make_console",
        lambda *, no_color: Console(
            theme=cli.custom_theme, width=400, no_color=no_color
        ),
    )


def _run_main(monkeypatch: pytest.MonkeyPatch, args: Iterable[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["typeclash", *args])
    cli.main()


def _run_main_exit(monkeypatch: pytest.MonkeyPatch, args: Iterable[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        _run_main(monkeypatch, args)
    code = exc.value.code
    assert isinstance(code, int)
    return code


def _write(root: Path, relpath: str, source: str) -> Path:
    path = root / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, "utf-8")
    return path


USER_ID_STRING = "export type User = { id: string; name: string };\n"
USER_ID_NUMBER = "export type User = { id: number };\n"


def test_cli_reports_identical_shape(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_STRING)
    _patch_parallel(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color"])

    out = capsys.readouterr().out
    assert "CRITICAL: 'User' in 'a.ts' declared at line 1" in out
    assert "WARNING:" not in out
    assert "Found 1 unique TS type names." in out
    assert "Analysis Summary" in out


def test_cli_reports_name_collision(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_NUMBER)
    _patch_parallel(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color"])

    out = capsys.readouterr().out
    assert "WARNING: 'User' in 'a.ts' declared at line 1" in out
    assert "CRITICAL:" not in out


def test_cli_verbose_prints_shapes(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", "type Id = string;\n")
    _write(tmp_path, "b.ts", "type Id = number;\n")
    _patch_parallel(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color", "-v"])

    out = capsys.readouterr().out
    assert 'a.ts:1 Keyword("string")' in out
    assert 'b.ts:1 Keyword("number")' in out


def test_cli_parse_failure_is_skipped(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_STRING)
    _write(tmp_path, "broken.ts", "export type User = {\n")
    _patch_parallel(monkeypatch)
    _patch_wide_console(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color"])

    out = capsys.readouterr().out
    assert "1 files failed to parse and were skipped." in out
    assert "CRITICAL: 'User'" in out
    assert "broken.ts" not in out


def test_cli_parse_failure_listed_when_verbose(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "broken.ts", "export type User = {\n")
    _patch_parallel(monkeypatch)
    _patch_wide_console(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color", "-v"])

    out = capsys.readouterr().out
    assert "1 files failed to parse:" in out
    assert "broken.ts" in out


def test_cli_unreadable_file_is_always_reported(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    bad = tmp_path / "latin.ts"
    bad.write_bytes(b"type A = '\xff';\n")
    _patch_parallel(monkeypatch)
    _patch_wide_console(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color"])

    out = capsys.readouterr().out
    assert "1 files could not be read:" in out
    assert "Encoding error" in out


def test_cli_results_registered_in_discovery_order(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_STRING)
    _write(tmp_path, "c.ts", USER_ID_NUMBER)
    json_out = tmp_path / "report.json"
    monkeypatch.setattr(cli, "ProcessPoolExecutor", _DummyExecutor)
    monkeypatch.setattr(cli, "as_completed", lambda futures: list(reversed(futures)))

    _run_main(
        monkeypatch,
        [str(tmp_path), "--no-progress", "--quiet", "--json", str(json_out)],
    )

    payload = json.loads(json_out.read_text("utf-8"))
    pairs = [
        (f["first"]["filepath"], f["second"]["filepath"], f["classification"])
        for f in payload["findings"]
    ]
    assert pairs == [
        ("a.ts", "b.ts", "identical_shape"),
        ("a.ts", "c.ts", "name_collision"),
        ("b.ts", "c.ts", "name_collision"),
    ]


def test_cli_writes_json_and_text_reports(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    src = tmp_path / "src"
    _write(src, "a.ts", USER_ID_STRING)
    _write(src, "b.ts", USER_ID_NUMBER)
    json_out = tmp_path / "out" / "report.json"
    text_out = tmp_path / "out" / "report.txt"
    _patch_parallel(monkeypatch)

    _run_main(
        monkeypatch,
        [
            str(src),
            "--no-progress",
            "--no-color",
            "--json",
            str(json_out),
            "--text",
            str(text_out),
        ],
    )

    payload = json.loads(json_out.read_text("utf-8"))
    assert payload["meta"]["report_schema_version"] == REPORT_SCHEMA_VERSION
    assert payload["meta"]["files_found"] == 2
    assert payload["meta"]["files_analyzed"] == 2
    assert payload["meta"]["scan_root"] == str(src.resolve())
    assert payload["summary"]["collisions"] == 1
    assert "NAME COLLISIONS (pairs=1)" in text_out.read_text("utf-8")
    out = capsys.readouterr().out
    assert "JSON report saved:" in out
    assert "Text report saved:" in out


def test_cli_fail_on_identical(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_STRING)
    _patch_parallel(monkeypatch)

    code = _run_main_exit(
        monkeypatch, [str(tmp_path), "--no-progress", "--fail-on-identical"]
    )

    assert code == ExitCode.GATING_FAILURE
    assert "GATING FAILURE:" in capsys.readouterr().out


def test_cli_fail_on_identical_passes_on_collisions(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_NUMBER)
    _patch_parallel(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--fail-on-identical"])


def test_cli_ci_preset_is_quiet_and_gates(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_STRING)
    _patch_parallel(monkeypatch)

    code = _run_main_exit(monkeypatch, [str(tmp_path), "--ci"])

    out = capsys.readouterr().out
    assert code == ExitCode.GATING_FAILURE
    assert "CRITICAL:" not in out
    assert "Input: found=2 analyzed=2 skipped=0" in out


def test_cli_fail_threshold(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_NUMBER)
    _patch_parallel(monkeypatch)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--fail-threshold", "1"])
    code = _run_main_exit(
        monkeypatch, [str(tmp_path), "--no-progress", "--fail-threshold", "0"]
    )

    assert code == ExitCode.GATING_FAILURE
    assert "Total findings (1) exceed threshold (0)." in capsys.readouterr().out


def test_cli_collision_policy_exported(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", "type Props = { a: string };\n")
    _write(tmp_path, "b.ts", "type Props = { b: string };\n")
    _patch_parallel(monkeypatch)

    _run_main(
        monkeypatch,
        [
            str(tmp_path),
            "--no-progress",
            "--no-color",
            "--collision-policy",
            "exported",
            "--fail-threshold",
            "0",
        ],
    )

    assert "WARNING:" not in capsys.readouterr().out


def test_cli_excludes(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "src/a.ts", USER_ID_STRING)
    _write(tmp_path, "src/generated/b.ts", USER_ID_STRING)
    _write(tmp_path, "node_modules/pkg/c.ts", USER_ID_STRING)
    _patch_parallel(monkeypatch)

    _run_main(
        monkeypatch,
        [str(tmp_path), "--quiet", "--exclude", "generated"],
    )
    assert "Input: found=1 analyzed=1 skipped=0" in capsys.readouterr().out

    _run_main(monkeypatch, [str(tmp_path), "--quiet", "--no-default-excludes"])
    assert "Input: found=3 analyzed=3 skipped=0" in capsys.readouterr().out


def test_cli_single_file_root(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    src = _write(tmp_path, "a.ts", "type A = string;\ntype A = string;\n")
    _write(tmp_path, "b.ts", "type A = string;\n")
    _patch_parallel(monkeypatch)

    _run_main(monkeypatch, [str(src), "--no-progress", "--no-color"])

    out = capsys.readouterr().out
    assert "CRITICAL: 'A' in 'a.ts' declared at line 1" in out
    assert "'b.ts'" not in out


def test_cli_with_progress(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _patch_parallel(monkeypatch)
    monkeypatch.setattr(cli, "Progress", _DummyProgress)

    _run_main(monkeypatch, [str(tmp_path), "--no-color"])

    assert "Found 1 unique TS type names." in capsys.readouterr().out


def test_cli_parallel_fallback(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    _write(tmp_path, "b.ts", USER_ID_STRING)
    monkeypatch.setattr(cli, "ProcessPoolExecutor", _FailingExecutor)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color"])

    out = capsys.readouterr().out
    assert "falling back to sequential" in out
    assert "CRITICAL: 'User'" in out


def test_cli_future_error_skips_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    future = _FixedFuture(error=RuntimeError("worker died"))
    monkeypatch.setattr(
        cli, "ProcessPoolExecutor", lambda *args, **kwargs: _FixedExecutor(future)
    )
    monkeypatch.setattr(cli, "as_completed", lambda futures: futures)

    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color"])

    out = capsys.readouterr().out
    assert "Failed to process batch item: worker died" in out
    assert "1 files could not be read:" in out


def test_cli_missing_root(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    code = _run_main_exit(monkeypatch, [str(tmp_path / "missing")])
    assert code == ExitCode.CONTRACT_ERROR
    assert "Root path does not exist" in capsys.readouterr().out


def test_cli_non_ts_single_file_root(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    other = _write(tmp_path, "notes.md", "# notes\n")
    code = _run_main_exit(monkeypatch, [str(other), "--quiet"])
    assert code == ExitCode.CONTRACT_ERROR
    assert "Scan failed" in capsys.readouterr().out


def test_cli_invalid_output_extension(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "a.ts", USER_ID_STRING)
    code = _run_main_exit(
        monkeypatch, [str(tmp_path), "--json", str(tmp_path / "report.txt")]
    )
    assert code == ExitCode.CONTRACT_ERROR
    assert "Invalid JSON output extension" in capsys.readouterr().out


def test_cli_invalid_processes(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    code = _run_main_exit(monkeypatch, [str(tmp_path), "--processes", "0"])
    assert code == ExitCode.CONTRACT_ERROR
    assert "--processes must be a positive integer" in capsys.readouterr().out


def test_cli_empty_directory(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _run_main(monkeypatch, [str(tmp_path), "--no-progress", "--no-color"])
    assert "Found 0 unique TS type names." in capsys.readouterr().out


def test_cli_internal_error(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def _boom() -> None:
        raise RuntimeError("kaboom")

    monkeypatch.setattr(cli, "_main_impl", _boom)
    monkeypatch.delenv("TYPECLASH_DEBUG", raising=False)
    monkeypatch.setattr(sys, "argv", ["typeclash"])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == ExitCode.INTERNAL_ERROR
    out = capsys.readouterr().out
    assert "INTERNAL ERROR:" in out
    assert "RuntimeError: kaboom" in out
