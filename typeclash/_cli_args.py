"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import argparse

from . import ui_messages as ui
from .analyzer import CollisionPolicy
from .contracts import cli_help_epilog


class _HelpFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter
):
    pass


def build_parser(version: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="typeclash",
        description="Find duplicate and colliding TypeScript type aliases.",
        formatter_class=_HelpFormatter,
        epilog=cli_help_epilog(),
    )
    ap.add_argument(
        "--version",
        action="version",
        version=ui.version_output(version),
        help=ui.HELP_VERSION,
    )

    core_group = ap.add_argument_group("Target")
    core_group.add_argument(
        "root",
        nargs="?",
        default=".",
        help=ui.HELP_ROOT,
    )
    core_group.add_argument(
        "--exclude",
        dest="excludes",
        action="append",
        default=[],
        metavar="SEGMENT",
        help=ui.HELP_EXCLUDE,
    )
    core_group.add_argument(
        "--no-default-excludes",
        action="store_true",
        help=ui.HELP_NO_DEFAULT_EXCLUDES,
    )

    tune_group = ap.add_argument_group("Analysis Tuning")
    tune_group.add_argument(
        "--processes",
        type=int,
        default=4,
        help=ui.HELP_PROCESSES,
    )
    tune_group.add_argument(
        "--collision-policy",
        choices=[p.value for p in CollisionPolicy],
        default=CollisionPolicy.ALL.value,
        help=ui.HELP_COLLISION_POLICY,
    )

    ci_group = ap.add_argument_group("CI/CD")
    ci_group.add_argument(
        "--fail-threshold",
        type=int,
        default=-1,
        metavar="MAX_FINDINGS",
        help=ui.HELP_FAIL_THRESHOLD,
    )
    ci_group.add_argument(
        "--fail-on-identical",
        action="store_true",
        help=ui.HELP_FAIL_ON_IDENTICAL,
    )
    ci_group.add_argument(
        "--ci",
        action="store_true",
        help=ui.HELP_CI,
    )

    out_group = ap.add_argument_group("Reporting")
    out_group.add_argument(
        "--json",
        dest="json_out",
        metavar="FILE",
        help=ui.HELP_JSON,
    )
    out_group.add_argument(
        "--text",
        dest="text_out",
        metavar="FILE",
        help=ui.HELP_TEXT,
    )
    out_group.add_argument(
        "--no-progress",
        action="store_true",
        help=ui.HELP_NO_PROGRESS,
    )
    out_group.add_argument(
        "--no-color",
        action="store_true",
        help=ui.HELP_NO_COLOR,
    )
    out_group.add_argument(
        "--quiet",
        action="store_true",
        help=ui.HELP_QUIET,
    )
    out_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help=ui.HELP_VERBOSE,
    )
    out_group.add_argument(
        "--debug",
        action="store_true",
        help=ui.HELP_DEBUG,
    )
    return ap
