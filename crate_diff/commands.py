"""The three crate-diff operations: versions → diff → deps.

Each operation runs to completion and returns its whole output as a
string, so a failure part-way never leaves partial output behind. The
diff and deps operations work inside a scratch directory that is removed
when they finish, on success or error.
"""

from __future__ import annotations

from collections.abc import Iterable
from logging import getLogger

import httpx

from .config import DEFAULT_TREE_EXCLUDES
from .fetch import fetch_archive
from .models import DiffOptions
from .reconcile import (
    index_dependencies,
    name_key,
    name_kind_key,
    render_reconciliation,
)
from .registry import Registry
from .shell import Runner, run_command, scratch_dir
from .textdiff import diff_paths

log = getLogger(__name__)


def list_versions(registry: Registry, name: str) -> list[str]:
    """Return the non-yanked versions of `name`, in registry order.

    Raises:
        NotFoundError: If the package is unknown.
    """
    return [v.version for v in registry.list_versions(name) if not v.yanked]


def tree_diff_options(
    extra_excludes: Iterable[str] = (),
    *,
    colorize: bool = True,
    excludes: Iterable[str] = DEFAULT_TREE_EXCLUDES,
) -> DiffOptions:
    """Options for a recursive, whitespace-insensitive source tree diff."""
    return DiffOptions(
        recursive=True,
        ignore_whitespace=True,
        colorize=colorize,
        exclude_patterns=frozenset(excludes) | frozenset(extra_excludes),
    )


def diff_trees(
    name: str,
    v1: str,
    v2: str,
    *,
    registry: Registry,
    client: httpx.Client,
    runner: Runner = run_command,
    options: DiffOptions | None = None,
) -> str:
    """Fetch both versions and diff their extracted source trees.

    Version existence is not checked up front: an unknown version fails
    when its archive is fetched.

    Returns:
        The diff utility's output (empty if the trees are the same).
    """
    options = options or tree_diff_options()
    with scratch_dir() as scratch:
        # Fetched one after the other; output order doesn't depend on it.
        old, new = (
            fetch_archive(
                name, version, scratch, registry=registry, client=client, runner=runner
            )
            for version in (v1, v2)
        )
        output = diff_paths(old.name, new.name, options, runner=runner, cwd=scratch)
    state = "differ" if output.differs else "match"
    log.info("%s %s → %s: trees %s", name, v1, v2, state)
    return output.text


def diff_dependencies(
    name: str,
    v1: str,
    v2: str,
    *,
    registry: Registry,
    runner: Runner = run_command,
    by_kind: bool = False,
) -> str:
    """Compare the dependency lists of two versions.

    Both versions are looked up before anything else happens, so an
    unknown version fails without touching the filesystem.

    Args:
        name: Package name.
        v1: Old version.
        v2: New version.
        registry: Registry to resolve versions with.
        runner: Command runner used to invoke `diff`.
        by_kind: Key dependencies on (name, kind) instead of name alone.

    Raises:
        NotFoundError: If the package or either version is unknown.
    """
    old_info = registry.get_version(name, v1)
    new_info = registry.get_version(name, v2)

    key = name_kind_key if by_kind else name_key
    old = index_dependencies(old_info.dependencies, key)
    new = index_dependencies(new_info.dependencies, key)

    with scratch_dir() as scratch:
        return render_reconciliation(
            old,
            new,
            scratch,
            labels=(f"{name}-{v1}", f"{name}-{v2}"),
            runner=runner,
        )
