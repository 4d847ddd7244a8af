"""Shell and scratch-directory utilities.

Provides a narrow wrapper around subprocess calls so that the fetch and
diff steps can be exercised with a fake runner, plus the scoped scratch
directory every command works in.
"""

from __future__ import annotations

import subprocess
import tempfile
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from logging import getLogger
from pathlib import Path

from .errors import ProcessError
from .models import CommandResult

log = getLogger(__name__)

# Signature shared by run_command() and the fakes used in tests.
Runner = Callable[..., CommandResult]


def run_command(args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
    """Run an external command and capture its output.

    Never raises on a non-zero exit: callers decide which statuses are
    errors (diff uses 1 for "differences found").

    Args:
        args: Command and arguments (e.g., "tar", "xf", "pkg.tar.gz").
        cwd: Working directory for the command.

    Returns:
        CommandResult with the exit status and decoded stdout/stderr.

    Raises:
        ProcessError: If the command cannot be started at all.
    """
    log.debug("running %s in %s", list(args), cwd or ".")
    try:
        result = subprocess.run(
            list(args),
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise ProcessError(
            args, -1, "", str(exc), reason=f"Couldn't run {list(args)}"
        ) from exc
    return CommandResult(
        args=list(args),
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )


def check_success(
    result: CommandResult,
    error_cls: type[ProcessError] = ProcessError,
    *,
    ok_codes: frozenset[int] = frozenset({0}),
) -> CommandResult:
    """Raise `error_cls` unless the command exited with one of `ok_codes`."""
    if result.returncode not in ok_codes:
        raise error_cls(result.args, result.returncode, result.stdout, result.stderr)
    return result


@contextmanager
def scratch_dir() -> Iterator[Path]:
    """Create a uniquely named scratch directory, removed on exit.

    The directory and everything written into it is deleted when the
    block exits, whether it returns normally or raises.
    """
    with tempfile.TemporaryDirectory(prefix="crate-diff-") as tmp:
        log.debug("created scratch directory %s", tmp)
        yield Path(tmp)
    log.debug("removed scratch directory %s", tmp)
