"""Logging setup for the command-line entry point."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.WARNING, force: bool = False) -> None:
    """Initialise the root logger with a terse stderr format.

    Standard output carries the diff itself, so log records always go to
    stderr. Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(levelname)s [%(name)s] %(message)s",
        force=force,
    )


def verbosity_to_level(verbose: int) -> int:
    """Map the number of -v flags to a logging level."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING
