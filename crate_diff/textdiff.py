"""Unified diffs through the external `diff` utility.

diff exits 0 when the inputs are the same, 1 when they differ and 2 on
trouble. Only the last one is an error here.
"""

from __future__ import annotations

import re
from pathlib import Path

from .models import DiffOptions, DiffOutput
from .shell import Runner, check_success, run_command

_DIFF_OK = frozenset({0, 1})
_HUNK_HEADER = re.compile(r"^@@ -\d+(,\d+)? \+\d+(,\d+)? @@")
# Colour output wraps header lines in SGR escapes.
_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def build_diff_args(a: str | Path, b: str | Path, options: DiffOptions) -> list[str]:
    """Build the argument list for `diff`.

    Exclusion patterns are sorted so the command line is deterministic.

    Example:
        build_diff_args("x-1.0", "x-1.1", DiffOptions(recursive=True))
        → ["diff", "-r", "--unified=3", "-w", "x-1.0", "x-1.1"]
    """
    args = ["diff"]
    if options.recursive:
        args.append("-r")
    args.append(f"--unified={options.unified_context_lines}")
    if options.ignore_whitespace:
        args.append("-w")
    if options.colorize:
        args.append("--color=always")
    for pattern in sorted(options.exclude_patterns):
        args.extend(["-x", pattern])
    args.extend([str(a), str(b)])
    return args


def diff_paths(
    a: str | Path,
    b: str | Path,
    options: DiffOptions,
    *,
    runner: Runner = run_command,
    cwd: Path | None = None,
) -> DiffOutput:
    """Run `diff` over two files or directories.

    Returns:
        DiffOutput with the captured stdout, whatever the exit status.

    Raises:
        ProcessError: If diff exits with a status other than 0 or 1.
    """
    result = check_success(
        runner(build_diff_args(a, b, options), cwd=cwd), ok_codes=_DIFF_OK
    )
    return DiffOutput(text=result.stdout, differs=result.returncode == 1)


def strip_diff_headers(text: str) -> str:
    """Remove file and hunk headers from unified diff output.

    Drops the leading `---`/`+++` file header lines and every `@@` hunk
    header, keeping only the body lines. Body lines always start with a
    space, `+`, `-` or `\\`, so a hunk header can't be mistaken for one.
    """
    lines = text.splitlines()
    start = 0
    while start < len(lines) and _plain(lines[start]).startswith(("--- ", "+++ ")):
        start += 1
    return "\n".join(
        line for line in lines[start:] if not _HUNK_HEADER.match(_plain(line))
    )


def _plain(line: str) -> str:
    return _ANSI.sub("", line)
