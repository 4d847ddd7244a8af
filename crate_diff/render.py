"""Canonical text rendering of dependency records.

Records are rendered as small TOML documents with tomlkit, keys in the
DependencyRecord field order and features sorted, so that two runs over
the same record produce byte-identical text. Comparing common
dependencies is done on this text.
"""

from __future__ import annotations

import tomlkit

from .errors import RenderError
from .models import DependencyRecord


def render_record(record: DependencyRecord) -> str:
    """Render a record as TOML, one field per line.

    Optional fields that are unset are left out. Features are written one
    per line when there is more than one, so that a changed feature shows
    up as its own diff line.

    Example:
        name = "serde"
        req = "^1.0"
        features = ["derive"]
        optional = false
        default_features = true
        kind = "normal"

    Raises:
        RenderError: If the record has no name or a field can't be
                     converted to TOML.
    """
    if not record.name:
        raise RenderError(f"Dependency record without a name: {record!r}")
    doc = tomlkit.document()
    try:
        for field, value in record.model_dump().items():
            if value is None:
                continue
            if field == "features":
                value = tomlkit.item(sorted(value))
                if len(value) > 1:
                    value.multiline(True)
            doc.add(field, value)
        return tomlkit.dumps(doc)
    except (TypeError, ValueError) as exc:
        raise RenderError(f"Can't render dependency {record.name}: {exc}") from exc


def prefix_lines(text: str, prefix: str) -> str:
    """Prefix every line of `text` with `prefix`."""
    return "\n".join(prefix + line for line in text.splitlines())
