"""Data models for crate-diff.

These Pydantic models represent the registry data we compare and the
results passed between the fetch, diff and reconcile steps.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DependencyRecord(BaseModel):
    """One dependency declared by a package version.

    Field order here is the canonical rendering order.

    Attributes:
        name: Name the dependency is declared under. Used as the
              reconciliation key.
        req: Version requirement, e.g. "^1.0".
        features: Enabled features (crates) or extras (PyPI).
        optional: Whether the dependency is only pulled in by a feature.
        default_features: Whether the dependency's default features are on.
        target: Platform predicate (cfg expression or environment marker).
        kind: "normal", "dev" or "build".
        registry: Alternate registry URL, if not the default one.
        package: Real package name when `name` is a rename.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    req: str = "*"
    features: tuple[str, ...] = ()
    optional: bool = False
    default_features: bool = True
    target: str | None = None
    kind: str = "normal"
    registry: str | None = None
    package: str | None = None

    @field_validator("kind", mode="before")
    @classmethod
    def _default_kind(cls, value: object) -> object:
        # Old index entries carry no kind, or an explicit null.
        return "normal" if value is None else value


class VersionInfo(BaseModel):
    """A published version as reported by the registry.

    Accepts the crates.io index field names (`vers`, `deps`) as well as
    the attribute names.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(alias="vers")
    yanked: bool = False
    dependencies: list[DependencyRecord] = Field(default_factory=list, alias="deps")


class Reconciliation(BaseModel):
    """Three-way partition of dependency keys between two versions.

    Attributes:
        added: Keys present only in the new version.
        removed: Keys present only in the old version.
        common: Keys present in both, pending structural comparison.
    """

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    common: list[str] = Field(default_factory=list)


class CommandResult(BaseModel):
    """Captured outcome of an external command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""


class DiffOptions(BaseModel):
    """Options passed to the external unified-diff utility.

    Attributes:
        ignore_whitespace: Ignore all whitespace when comparing lines (-w).
        unified_context_lines: Lines of context around each change.
        exclude_patterns: File name patterns skipped in recursive diffs (-x).
        colorize: Force ANSI colour in the output.
        recursive: Compare directories recursively (-r).
    """

    model_config = ConfigDict(frozen=True)

    ignore_whitespace: bool = True
    unified_context_lines: int = Field(default=3, ge=0)
    exclude_patterns: frozenset[str] = frozenset()
    colorize: bool = False
    recursive: bool = False


class DiffOutput(BaseModel):
    """Captured diff output.

    Attributes:
        text: Standard output of the diff utility.
        differs: True when the utility reported differences.
    """

    text: str
    differs: bool
