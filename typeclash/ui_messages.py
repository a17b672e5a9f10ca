from __future__ import annotations

import platform
import shlex
import sys
import traceback
from pathlib import Path

from rich.markup import escape

from . import __version__
from .contracts import ISSUES_URL

BANNER_SUBTITLE = "[italic]Duplicate type-alias detector for TypeScript[/italic]"

MARKER_CONTRACT_ERROR = "[error]CONTRACT ERROR:[/error]"
MARKER_GATING_FAILURE = "[error]GATING FAILURE:[/error]"
MARKER_INTERNAL_ERROR = "[error]INTERNAL ERROR:[/error]"

HELP_VERSION = "Print the TypeClash version and exit."
HELP_ROOT = "TypeScript file or project directory to scan."
HELP_EXCLUDE = (
    "Extra path segment to skip (repeatable), e.g. --exclude generated."
)
HELP_NO_DEFAULT_EXCLUDES = (
    "Do not skip the default dependency/build/VCS/editor/CI directories."
)
HELP_PROCESSES = "Number of parallel worker processes."
HELP_COLLISION_POLICY = (
    "'all' reports every same-name pair; 'exported' ignores name collisions "
    "between two non-exported aliases."
)
HELP_FAIL_THRESHOLD = "Exit with error if total findings exceed this number."
HELP_FAIL_ON_IDENTICAL = "Exit with error if any identical-shape duplicate is found."
HELP_CI = "CI preset: --fail-on-identical --no-color --quiet."
HELP_JSON = "Generate a JSON report to FILE."
HELP_TEXT = "Generate a text report to FILE."
HELP_NO_PROGRESS = "Disable the progress bar (recommended for CI logs)."
HELP_NO_COLOR = "Disable ANSI colors in output."
HELP_QUIET = "Minimize output (still shows warnings and errors)."
HELP_VERBOSE = "List every file that failed to parse and print colliding shapes."
HELP_DEBUG = "Print debug details (traceback and environment) on internal errors."

SUMMARY_TITLE = "Analysis Summary"
CLI_LAYOUT_WIDTH = 48
SUMMARY_LABEL_FILES_FOUND = "Files found"
SUMMARY_LABEL_FILES_ANALYZED = "Files analyzed"
SUMMARY_LABEL_FILES_SKIPPED = "Files skipped"
SUMMARY_LABEL_UNIQUE_NAMES = "Unique type names"
SUMMARY_LABEL_DECLARATIONS = "Type declarations"
SUMMARY_LABEL_DUPLICATED_NAMES = "Duplicated names"
SUMMARY_LABEL_IDENTICAL = "Critical issues"
SUMMARY_LABEL_COLLISIONS = "Warnings"
SUMMARY_COMPACT_INPUT = "Input: found={found} analyzed={analyzed} skipped={skipped}"
SUMMARY_COMPACT_FINDINGS = (
    "Types: unique={unique} declarations={declarations} "
    "critical={identical} warnings={collisions}"
)
WARN_SUMMARY_ACCOUNTING_MISMATCH = (
    "Summary accounting mismatch: files_found != files_analyzed + files_skipped"
)

STATUS_DISCOVERING = "[bold green]Discovering TypeScript files..."
STATUS_ANALYZING = "[bold green]Comparing type declarations..."

INFO_SCANNING_ROOT = "[info]Scanning root:[/info] {root}"
INFO_PROCESSING_FILES = "[info]Processing {count} files...[/info]"
INFO_UNIQUE_NAMES = "\n[success]Found[/success] {count} unique TS type names."
INFO_JSON_REPORT_SAVED = "[info]JSON report saved:[/info] {path}"
INFO_TEXT_REPORT_SAVED = "[info]Text report saved:[/info] {path}"

FINDING_SEPARATOR = "[bold bright_blue]" + "=" * 44 + "[/bold bright_blue]"
FINDING_IDENTICAL = (
    "[bold red]CRITICAL: '{name}' in '{first_path}' declared at line {first_line} "
    "has the same signature and body as '{name}' in '{second_path}' declared at "
    "line {second_line}. Consider merging this to one type definition.[/bold red]"
)
FINDING_COLLISION = (
    "[bold yellow]WARNING: '{name}' in '{first_path}' declared at line "
    "{first_line} has the same name but a different body as '{name}' in "
    "'{second_path}' declared at line {second_line}.[/bold yellow]"
)
FINDING_SHAPE = "[dim]  {path}:{line} {shape}[/dim]"

WARN_WORKER_FAILED = "[warning]Worker failed: {error}[/warning]"
WARN_BATCH_ITEM_FAILED = "[warning]Failed to process batch item: {error}[/warning]"
WARN_PARALLEL_FALLBACK = (
    "[warning]Parallel processing unavailable, "
    "falling back to sequential: {error}[/warning]"
)
WARN_UNREADABLE_FILES_HEADER = "\n[warning]{count} files could not be read:[/warning]"
WARN_PARSE_FAILURES_HEADER = "\n[warning]{count} files failed to parse:[/warning]"
WARN_PARSE_FAILURES_HIDDEN = (
    "\n[warning]{count} files failed to parse and were skipped.[/warning] "
    "[dim]Re-run with --verbose to list them.[/dim]"
)

ERR_INVALID_OUTPUT_EXT = (
    "[error]Invalid {label} output extension: {path} "
    "(expected {expected_suffix}).[/error]"
)
ERR_INVALID_OUTPUT_PATH = (
    "[error]Invalid {label} output path: {path} ({error}).[/error]"
)
ERR_ROOT_NOT_FOUND = "[error]Root path does not exist: {path}[/error]"
ERR_INVALID_ROOT_PATH = "[error]Invalid root path: {error}[/error]"
ERR_SCAN_FAILED = "[error]Scan failed: {error}[/error]"
ERR_INVALID_PROCESSES = "--processes must be a positive integer (got {value})."
ERR_REPORT_WRITE_FAILED = (
    "[error]Failed to write {label} report: {path} ({error}).[/error]"
)
ERR_FAIL_THRESHOLD = "Total findings ({total}) exceed threshold ({threshold})."
ERR_IDENTICAL_FOUND = (
    "Identical type declarations detected ({count}). "
    "Merge them into one shared definition."
)


def version_output(version: str) -> str:
    return f"TypeClash {version}"


def banner_title(version: str) -> str:
    return (
        f"[bold white]TypeClash[/bold white] [dim]v{version}[/dim]\n{BANNER_SUBTITLE}"
    )


def fmt_invalid_output_extension(
    *, label: str, path: Path, expected_suffix: str
) -> str:
    return ERR_INVALID_OUTPUT_EXT.format(
        label=label, path=path, expected_suffix=expected_suffix
    )


def fmt_invalid_output_path(*, label: str, path: Path, error: object) -> str:
    return ERR_INVALID_OUTPUT_PATH.format(label=label, path=path, error=error)


def fmt_report_write_failed(*, label: str, path: Path, error: object) -> str:
    return ERR_REPORT_WRITE_FAILED.format(label=label, path=path, error=error)


def fmt_scanning_root(root: Path) -> str:
    return INFO_SCANNING_ROOT.format(root=root)


def fmt_processing_files(count: int) -> str:
    return INFO_PROCESSING_FILES.format(count=count)


def fmt_unique_names(count: int) -> str:
    return INFO_UNIQUE_NAMES.format(count=count)


def fmt_worker_failed(error: object) -> str:
    return WARN_WORKER_FAILED.format(error=error)


def fmt_batch_item_failed(error: object) -> str:
    return WARN_BATCH_ITEM_FAILED.format(error=error)


def fmt_parallel_fallback(error: object) -> str:
    return WARN_PARALLEL_FALLBACK.format(error=error)


def fmt_unreadable_files_header(count: int) -> str:
    return WARN_UNREADABLE_FILES_HEADER.format(count=count)


def fmt_parse_failures_header(count: int) -> str:
    return WARN_PARSE_FAILURES_HEADER.format(count=count)


def fmt_parse_failures_hidden(count: int) -> str:
    return WARN_PARSE_FAILURES_HIDDEN.format(count=count)


def fmt_finding(
    *,
    identical: bool,
    name: str,
    first_path: str,
    first_line: int,
    second_path: str,
    second_line: int,
) -> str:
    template = FINDING_IDENTICAL if identical else FINDING_COLLISION
    return template.format(
        name=name,
        first_path=escape(first_path),
        first_line=first_line,
        second_path=escape(second_path),
        second_line=second_line,
    )


def fmt_finding_shape(*, path: str, line: int, shape: str) -> str:
    return FINDING_SHAPE.format(path=escape(path), line=line, shape=escape(shape))


def fmt_path(template: str, path: Path) -> str:
    return template.format(path=path)


def fmt_summary_compact_input(*, found: int, analyzed: int, skipped: int) -> str:
    return SUMMARY_COMPACT_INPUT.format(
        found=found, analyzed=analyzed, skipped=skipped
    )


def fmt_summary_compact_findings(
    *,
    unique: int,
    declarations: int,
    identical: int,
    collisions: int,
) -> str:
    return SUMMARY_COMPACT_FINDINGS.format(
        unique=unique,
        declarations=declarations,
        identical=identical,
        collisions=collisions,
    )


def fmt_fail_threshold(*, total: int, threshold: int) -> str:
    return ERR_FAIL_THRESHOLD.format(total=total, threshold=threshold)


def fmt_identical_found(count: int) -> str:
    return ERR_IDENTICAL_FOUND.format(count=count)


def fmt_invalid_processes(value: int) -> str:
    return ERR_INVALID_PROCESSES.format(value=value)


def fmt_failure_line(failure: str) -> str:
    return f"  • {escape(failure)}"


def fmt_contract_error(message: str) -> str:
    return f"{MARKER_CONTRACT_ERROR}\n{message}"


def fmt_gating_failure(message: str) -> str:
    return f"{MARKER_GATING_FAILURE}\n{message}"


def fmt_internal_error(
    error: BaseException,
    *,
    issues_url: str = ISSUES_URL,
    debug: bool = False,
) -> str:
    bug_report_url = issues_url.rstrip("/") + "/new?template=bug_report.yml"
    error_name = type(error).__name__
    error_text = str(error).strip() or "<no message>"
    lines = [
        MARKER_INTERNAL_ERROR,
        "Unexpected exception.",
        f"Reason: {error_name}: {error_text}",
        "",
        "Next steps:",
        "- Re-run with --debug to include a traceback.",
        f"- If this is reproducible, open an issue: {bug_report_url}.",
        (
            "- Attach: command line, TypeClash version, Python version, "
            "and the report file if generated."
        ),
    ]
    if not debug:
        return "\n".join(lines)

    traceback_lines = traceback.format_exception(
        type(error), error, error.__traceback__
    )
    command_line = shlex.join(sys.argv)
    lines.extend(
        [
            "",
            "DEBUG DETAILS",
            f"Platform: {platform.platform()}",
            f"Python: {sys.version.split()[0]}",
            f"TypeClash: {__version__}",
            f"Command: {command_line}",
            f"CWD: {Path.cwd()}",
            "Traceback:",
            "".join(traceback_lines).rstrip(),
        ]
    )
    return "\n".join(lines)
