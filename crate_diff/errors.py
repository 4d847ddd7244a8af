"""Error types raised by crate-diff.

Every error aborts the current command; the CLI turns them into a one-line
diagnostic on stderr and a non-zero exit code. Nothing is retried.
"""

from __future__ import annotations

from collections.abc import Sequence


class CrateDiffError(RuntimeError):
    """Base class for all crate-diff failures."""


class NotFoundError(CrateDiffError):
    """Raised when a package or version is absent from the registry."""


class NetworkError(CrateDiffError):
    """Raised when an HTTP request fails at the transport or status level."""


class RegistryError(CrateDiffError):
    """Raised when the registry returns a payload we cannot decode."""


class RenderError(CrateDiffError):
    """Raised when a dependency record cannot be canonically serialized."""


class ScratchIOError(CrateDiffError):
    """Raised when a scratch or snapshot file cannot be written or read."""


class ProcessError(CrateDiffError):
    """Raised when an external tool exits with an error status.

    Keeps the command line and captured output so the failure can be
    diagnosed from the message alone.
    """

    def __init__(
        self,
        args: Sequence[str],
        returncode: int,
        stdout: str,
        stderr: str,
        *,
        reason: str | None = None,
    ) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        headline = reason or f"Failed to run {self.command} (exit status {returncode})"
        super().__init__(f"{headline}.\nstdout:\n{stdout}\nstderr:\n{stderr}")


class ExtractionError(ProcessError):
    """Raised when archive extraction fails."""
