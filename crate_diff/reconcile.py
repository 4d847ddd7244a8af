"""Dependency reconciliation between two versions.

Splits the dependency keys of two versions into added, removed and common
sets, then renders each:

- added: the new record, every line prefixed with "+"
- removed: the old record, every line prefixed with "-"
- common: a unified diff of the two canonical renderings with headers
  stripped, or nothing when they are the same

Keys are visited in sorted order, so output never depends on the order
the registry listed dependencies in.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from logging import getLogger
from pathlib import Path

from .errors import ScratchIOError
from .models import DependencyRecord, DiffOptions, Reconciliation
from .render import prefix_lines, render_record
from .shell import Runner, run_command
from .textdiff import diff_paths, strip_diff_headers

log = getLogger(__name__)

KeyFunc = Callable[[DependencyRecord], str]


def name_key(record: DependencyRecord) -> str:
    """Key a record by its dependency name."""
    return record.name


def name_kind_key(record: DependencyRecord) -> str:
    """Key a record by name and kind, e.g. "serde (dev)"."""
    return f"{record.name} ({record.kind})"


def index_dependencies(
    records: Iterable[DependencyRecord], key: KeyFunc = name_key
) -> dict[str, DependencyRecord]:
    """Build a key → record map from a version's dependency list.

    At most one record is kept per key. When the list repeats a key (e.g.,
    the same crate as a normal and a dev dependency, keyed by name), the
    last record wins and a warning names the key.
    """
    indexed: dict[str, DependencyRecord] = {}
    duplicates: set[str] = set()
    for record in records:
        k = key(record)
        if k in indexed:
            duplicates.add(k)
        indexed[k] = record
    for k in sorted(duplicates):
        log.warning("dependency %s is listed more than once; keeping the last entry", k)
    return indexed


def reconcile(
    old: Mapping[str, DependencyRecord], new: Mapping[str, DependencyRecord]
) -> Reconciliation:
    """Partition the keys of two dependency maps.

    The three lists are sorted, pairwise disjoint, and together hold every
    key of `old` and `new`.
    """
    old_keys, new_keys = set(old), set(new)
    return Reconciliation(
        added=sorted(new_keys - old_keys),
        removed=sorted(old_keys - new_keys),
        common=sorted(old_keys & new_keys),
    )


def diff_records(
    old: DependencyRecord,
    new: DependencyRecord,
    scratch: Path,
    *,
    labels: tuple[str, str] = ("old", "new"),
    runner: Runner = run_command,
) -> str:
    """Diff the canonical renderings of two records.

    Both renderings are written to snapshot files in `scratch` and compared
    ignoring whitespace, with enough context to always show the whole
    record.

    Returns:
        The diff body without file or hunk headers, or "" if the records
        render the same.
    """
    old_text, new_text = render_record(old), render_record(new)
    if old_text == new_text:
        return ""

    # Distinct prefixes keep the files apart when both labels are the same.
    old_path = scratch / f"a-{labels[0]}"
    new_path = scratch / f"b-{labels[1]}"
    try:
        old_path.write_text(old_text)
        new_path.write_text(new_text)
    except OSError as exc:
        raise ScratchIOError(f"Couldn't write dependency snapshot: {exc}") from exc

    context = max(len(old_text.splitlines()), len(new_text.splitlines()))
    output = diff_paths(
        old_path.name,
        new_path.name,
        DiffOptions(ignore_whitespace=True, unified_context_lines=context),
        runner=runner,
        cwd=scratch,
    )
    if not output.differs:
        return ""
    return strip_diff_headers(output.text)


def render_reconciliation(
    old: Mapping[str, DependencyRecord],
    new: Mapping[str, DependencyRecord],
    scratch: Path,
    *,
    labels: tuple[str, str] = ("old", "new"),
    runner: Runner = run_command,
) -> str:
    """Render the full dependency comparison of two versions.

    Args:
        old: Records of the old version, by key.
        new: Records of the new version, by key.
        scratch: Directory for the snapshot files of common dependencies.
        labels: Names for the old/new snapshot files.
        runner: Command runner used to invoke `diff`.

    Returns:
        One block per added, removed or changed key, in key order, each
        ending with a newline. "" when nothing changed.
    """
    result = reconcile(old, new)
    added, removed = set(result.added), set(result.removed)
    blocks: list[str] = []
    for k in sorted([*result.added, *result.removed, *result.common]):
        if k in added:
            blocks.append(prefix_lines(render_record(new[k]), "+"))
        elif k in removed:
            blocks.append(prefix_lines(render_record(old[k]), "-"))
        else:
            block = diff_records(old[k], new[k], scratch, labels=labels, runner=runner)
            if block:
                blocks.append(block)
    log.info(
        "%d added, %d removed, %d common dependencies",
        len(result.added),
        len(result.removed),
        len(result.common),
    )
    return "".join(block + "\n" for block in blocks)
