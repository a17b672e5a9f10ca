from __future__ import annotations

import os
import sys
import time
from collections.abc import Mapping, Sequence
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.rule import Rule
from rich.theme import Theme

from . import __version__
from . import ui_messages as ui
from ._cli_args import build_parser
from ._cli_meta import _build_report_meta
from ._cli_paths import _validate_output_path
from ._cli_summary import _print_summary
from .analyzer import Classification, CollisionPolicy, analyze_duplicates
from .contracts import ISSUES_URL, ExitCode
from .errors import FileReadError, ParseError, ValidationError
from .extractor import TypeDeclaration, extract_declarations_from_source
from .registry import TypeRegistry
from .report import to_json_report, to_text_report
from .scanner import DEFAULT_EXCLUDES, display_path, iter_ts_files

# Custom theme for Rich
custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "dim": "dim",
    }
)


def _make_console(*, no_color: bool) -> Console:
    return Console(theme=custom_theme, width=100, no_color=no_color)


console = _make_console(no_color=False)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BATCH_SIZE = 100
MAX_LISTED_FAILURES = 10


@dataclass(slots=True)
class ProcessingResult:
    """Result of processing a single file."""

    filepath: str
    success: bool
    error: str | None = None
    declarations: list[TypeDeclaration] | None = None
    error_kind: str | None = None


def _read_source(filepath: str) -> str:
    try:
        return Path(filepath).read_text("utf-8")
    except UnicodeDecodeError as e:
        raise FileReadError(f"Encoding error: {e}") from e
    except OSError as e:
        raise FileReadError(f"Cannot read file: {e}") from e


def process_file(filepath: str, root: str) -> ProcessingResult:
    """
    Process a single TypeScript file with comprehensive error handling.

    Args:
        filepath: Absolute path to the file
        root: Root of the scan, used for report paths

    Returns:
        ProcessingResult object indicating success/failure and containing
        the file's top-level type-alias declarations if successful.
    """

    try:
        # Check file size
        try:
            st_size = os.path.getsize(filepath)
            if st_size > MAX_FILE_SIZE:
                return ProcessingResult(
                    filepath=filepath,
                    success=False,
                    error=f"File too large: {st_size} bytes (max {MAX_FILE_SIZE})",
                    error_kind="file_too_large",
                )
        except OSError as e:
            return ProcessingResult(
                filepath=filepath,
                success=False,
                error=f"Cannot stat file: {e}",
                error_kind="stat_error",
            )

        try:
            source = _read_source(filepath)
        except FileReadError as e:
            return ProcessingResult(
                filepath=filepath,
                success=False,
                error=str(e),
                error_kind="source_read_error",
            )

        try:
            declarations = extract_declarations_from_source(
                source,
                filepath,
                display_path=display_path(root, filepath),
            )
        except ParseError as e:
            return ProcessingResult(
                filepath=filepath,
                success=False,
                error=str(e),
                error_kind="parse_error",
            )

        return ProcessingResult(
            filepath=filepath,
            success=True,
            declarations=declarations,
        )

    except Exception as e:
        return ProcessingResult(
            filepath=filepath,
            success=False,
            error=f"Unexpected error: {type(e).__name__}: {e}",
            error_kind="unexpected_error",
        )


def print_banner() -> None:
    console.print(
        Panel(
            ui.banner_title(__version__),
            border_style="blue",
            padding=(0, 2),
            width=ui.CLI_LAYOUT_WIDTH,
            expand=False,
        )
    )


def _make_progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
    )


def _print_failures(failures: Sequence[str]) -> None:
    for failure in failures[:MAX_LISTED_FAILURES]:
        console.print(ui.fmt_failure_line(failure))
    if len(failures) > MAX_LISTED_FAILURES:
        console.print(f"  ... and {len(failures) - MAX_LISTED_FAILURES} more")


def _is_debug_enabled(
    *,
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    args = list(sys.argv[1:] if argv is None else argv)
    debug_from_flag = any(arg == "--debug" for arg in args)
    env = os.environ if environ is None else environ
    debug_from_env = env.get("TYPECLASH_DEBUG") == "1"
    return debug_from_flag or debug_from_env


def _main_impl() -> None:
    ap = build_parser(__version__)
    args = ap.parse_args()

    if args.ci:
        args.fail_on_identical = True
        args.no_color = True
        args.quiet = True

    if args.quiet:
        args.no_progress = True

    global console
    console = _make_console(no_color=args.no_color)

    if args.processes < 1:
        console.print(ui.fmt_contract_error(ui.fmt_invalid_processes(args.processes)))
        sys.exit(ExitCode.CONTRACT_ERROR)

    t0 = time.monotonic()

    if not args.quiet:
        print_banner()

    try:
        root_path = Path(args.root).resolve()
        if not root_path.exists():
            console.print(
                ui.fmt_contract_error(ui.ERR_ROOT_NOT_FOUND.format(path=root_path))
            )
            sys.exit(ExitCode.CONTRACT_ERROR)
    except OSError as e:
        console.print(ui.fmt_contract_error(ui.ERR_INVALID_ROOT_PATH.format(error=e)))
        sys.exit(ExitCode.CONTRACT_ERROR)

    if not args.quiet:
        console.print(ui.fmt_scanning_root(root_path))

    json_out_path: Path | None = None
    text_out_path: Path | None = None
    if args.json_out:
        json_out_path = _validate_output_path(
            args.json_out,
            expected_suffix=".json",
            label="JSON",
            console=console,
            invalid_message=ui.fmt_invalid_output_extension,
            invalid_path_message=ui.fmt_invalid_output_path,
        )
    if args.text_out:
        text_out_path = _validate_output_path(
            args.text_out,
            expected_suffix=".txt",
            label="text",
            console=console,
            invalid_message=ui.fmt_invalid_output_extension,
            invalid_path_message=ui.fmt_invalid_output_path,
        )

    base_excludes = () if args.no_default_excludes else DEFAULT_EXCLUDES
    excludes = base_excludes + tuple(args.excludes)
    policy = CollisionPolicy(args.collision_policy)

    # Discovery phase
    files_to_process: list[str] = []
    try:
        if args.quiet:
            files_to_process.extend(iter_ts_files(str(root_path), excludes))
        else:
            with console.status(ui.STATUS_DISCOVERING, spinner="dots"):
                files_to_process.extend(iter_ts_files(str(root_path), excludes))
    except (OSError, ValidationError) as e:
        console.print(ui.fmt_contract_error(ui.ERR_SCAN_FAILED.format(error=e)))
        sys.exit(ExitCode.CONTRACT_ERROR)

    files_found = len(files_to_process)
    total_files = files_found
    results: dict[str, ProcessingResult] = {}

    def _safe_process_file(fp: str) -> ProcessingResult:
        try:
            return process_file(fp, str(root_path))
        except Exception as e:
            console.print(ui.fmt_worker_failed(e))
            return ProcessingResult(
                filepath=fp,
                success=False,
                error="worker failed",
                error_kind="unexpected_error",
            )

    def _safe_future_result(
        future: Future[ProcessingResult],
    ) -> tuple[ProcessingResult | None, str | None]:
        try:
            return future.result(), None
        except Exception as e:
            return None, str(e)

    def _collect_future(fp: str, future: Future[ProcessingResult]) -> None:
        result, err = _safe_future_result(future)
        if result is None:
            reason = err or "worker failed"
            # Should rarely happen due to try/except in process_file.
            console.print(ui.fmt_batch_item_failed(reason))
            result = ProcessingResult(
                filepath=fp,
                success=False,
                error=reason,
                error_kind="unexpected_error",
            )
        results[fp] = result

    # Processing phase
    if total_files > 0:

        def process_sequential(with_progress: bool) -> None:
            if with_progress:
                with _make_progress() as progress:
                    task = progress.add_task(
                        f"Analyzing {total_files} files...", total=total_files
                    )
                    for fp in files_to_process:
                        results[fp] = _safe_process_file(fp)
                        progress.advance(task)
            else:
                if not args.quiet:
                    console.print(ui.fmt_processing_files(total_files))
                for fp in files_to_process:
                    results[fp] = _safe_process_file(fp)

        def process_batches(
            executor: ProcessPoolExecutor,
            progress: Progress | None,
        ) -> None:
            task = (
                progress.add_task(
                    f"Analyzing {total_files} files...", total=total_files
                )
                if progress is not None
                else None
            )
            # Process in batches to manage memory
            for i in range(0, total_files, BATCH_SIZE):
                batch = files_to_process[i : i + BATCH_SIZE]
                futures = [
                    executor.submit(process_file, fp, str(root_path)) for fp in batch
                ]
                future_to_fp = {
                    id(fut): fp for fut, fp in zip(futures, batch, strict=True)
                }
                for future in as_completed(futures):
                    _collect_future(future_to_fp[id(future)], future)
                    if progress is not None and task is not None:
                        progress.advance(task)

        try:
            with ProcessPoolExecutor(max_workers=args.processes) as executor:
                if args.no_progress:
                    if not args.quiet:
                        console.print(ui.fmt_processing_files(total_files))
                    process_batches(executor, None)
                else:
                    with _make_progress() as progress:
                        process_batches(executor, progress)
        except (OSError, RuntimeError, PermissionError) as e:
            console.print(ui.fmt_parallel_fallback(e))
            results.clear()
            process_sequential(with_progress=not args.no_progress)

    # Every file is finished before anything is registered; registration
    # follows sorted discovery order so the outcome ignores completion order.
    registry = TypeRegistry()
    files_analyzed = 0
    files_skipped = 0
    read_failures: list[str] = []
    parse_failures: list[str] = []
    for fp in files_to_process:
        result = results.get(fp)
        if result is None:
            files_skipped += 1
            read_failures.append(f"{fp}: worker failed")
            continue
        if result.success:
            files_analyzed += 1
            registry.record_all(result.declarations or [])
            continue
        files_skipped += 1
        failure = f"{result.filepath}: {result.error}"
        if result.error_kind == "parse_error":
            parse_failures.append(failure)
        else:
            read_failures.append(failure)

    if read_failures:
        console.print(ui.fmt_unreadable_files_header(len(read_failures)))
        _print_failures(read_failures)

    if parse_failures:
        if args.verbose:
            console.print(ui.fmt_parse_failures_header(len(parse_failures)))
            _print_failures(parse_failures)
        else:
            console.print(ui.fmt_parse_failures_hidden(len(parse_failures)))

    # Analysis phase
    if args.quiet:
        report = analyze_duplicates(registry, policy=policy)
    else:
        with console.status(ui.STATUS_ANALYZING, spinner="dots"):
            report = analyze_duplicates(registry, policy=policy)

    if not args.quiet:
        for finding in report.findings:
            console.print(ui.FINDING_SEPARATOR)
            console.print(
                ui.fmt_finding(
                    identical=(
                        finding.classification is Classification.IDENTICAL_SHAPE
                    ),
                    name=finding.name,
                    first_path=finding.first.filepath,
                    first_line=finding.first.line,
                    second_path=finding.second.filepath,
                    second_line=finding.second.line,
                )
            )
            if args.verbose:
                for decl in (finding.first, finding.second):
                    console.print(
                        ui.fmt_finding_shape(
                            path=decl.filepath, line=decl.line, shape=decl.shape
                        )
                    )
        if report.findings:
            console.print(ui.FINDING_SEPARATOR)
        console.print(ui.fmt_unique_names(report.unique_names))
        console.print(Rule(style="dim"))

    _print_summary(
        console=console,
        quiet=args.quiet,
        files_found=files_found,
        files_analyzed=files_analyzed,
        files_skipped=files_skipped,
        unique_names=report.unique_names,
        declaration_count=report.declaration_count,
        duplicated_names=report.duplicated_names,
        identical_count=report.identical_count,
        collision_count=report.collision_count,
    )

    report_meta = _build_report_meta(
        typeclash_version=__version__,
        scan_root=root_path,
        collision_policy=policy.value,
        files_found=files_found,
        files_analyzed=files_analyzed,
        files_skipped=files_skipped,
    )

    # Outputs
    output_notice_printed = False

    def _print_output_notice(message: str) -> None:
        nonlocal output_notice_printed
        if args.quiet:
            return
        if not output_notice_printed:
            console.print("")
            output_notice_printed = True
        console.print(message)

    def _write_report_output(*, out: Path, content: str, label: str) -> None:
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(content, "utf-8")
        except OSError as e:
            console.print(
                ui.fmt_contract_error(
                    ui.fmt_report_write_failed(label=label, path=out, error=e)
                )
            )
            sys.exit(ExitCode.CONTRACT_ERROR)

    if json_out_path:
        out = json_out_path
        _write_report_output(
            out=out,
            content=to_json_report(report, report_meta),
            label="JSON",
        )
        _print_output_notice(ui.fmt_path(ui.INFO_JSON_REPORT_SAVED, out))

    if text_out_path:
        out = text_out_path
        _write_report_output(
            out=out,
            content=to_text_report(report, meta=report_meta),
            label="text",
        )
        _print_output_notice(ui.fmt_path(ui.INFO_TEXT_REPORT_SAVED, out))

    # Exit Codes
    if args.fail_on_identical and report.identical_count > 0:
        console.print(
            ui.fmt_gating_failure(ui.fmt_identical_found(report.identical_count))
        )
        sys.exit(ExitCode.GATING_FAILURE)

    total_findings = len(report.findings)
    if 0 <= args.fail_threshold < total_findings:
        console.print(
            ui.fmt_gating_failure(
                ui.fmt_fail_threshold(
                    total=total_findings, threshold=args.fail_threshold
                )
            )
        )
        sys.exit(ExitCode.GATING_FAILURE)

    if not args.quiet:
        elapsed = time.monotonic() - t0
        console.print(f"\n[dim]Done in {elapsed:.1f}s[/dim]")


def main() -> None:
    try:
        _main_impl()
    except SystemExit:
        raise
    except Exception as e:
        console.print(
            ui.fmt_internal_error(
                e,
                issues_url=ISSUES_URL,
                debug=_is_debug_enabled(),
            )
        )
        sys.exit(ExitCode.INTERNAL_ERROR)


if __name__ == "__main__":
    main()
