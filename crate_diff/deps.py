"""PEP 508 dependency handling for the PyPI registry.

Converts `requires_dist` strings from PyPI metadata into the same
DependencyRecord shape the crates.io index produces, so both registries
feed the reconciler identically.
"""

from __future__ import annotations

import re

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from .errors import RegistryError
from .models import DependencyRecord

_EXTRA_MARKER = re.compile(r"""\bextra\s*==\s*["']([^"']+)["']""")


def requirement_to_record(dep_str: str) -> DependencyRecord:
    """Build a DependencyRecord from a PEP 508 dependency string.

    Mapping:
    - name: canonical package name
    - req: version specifier, or "*" when unconstrained
    - features: requested extras of the dependency
    - optional: True when the marker gates it behind one of our extras
    - target: the full environment marker, if any
    - registry: direct URL reference, if any
    - kind: "extra" for optional dependencies, "normal" otherwise

    Examples:
        "requests[socks]>=2.0" → name="requests", req=">=2.0", features=("socks",)
        'pytest; extra == "test"' → name="pytest", optional=True, kind="extra"
    """
    req = _parse(dep_str)
    marker = str(req.marker) if req.marker is not None else None
    optional = bool(marker and _EXTRA_MARKER.search(marker))
    return DependencyRecord(
        name=canonicalize_name(req.name),
        req=str(req.specifier) or "*",
        # Sort extras alphabetically for consistent output
        features=tuple(sorted(req.extras)),
        optional=optional,
        target=marker,
        kind="extra" if optional else "normal",
        registry=req.url,
    )


def _parse(dep_str: str) -> Requirement:
    try:
        return Requirement(dep_str)
    except InvalidRequirement as exc:
        raise RegistryError(f"Invalid dependency string {dep_str!r}: {exc}") from exc
