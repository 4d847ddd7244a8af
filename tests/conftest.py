"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from crate_diff.errors import NotFoundError
from crate_diff.models import CommandResult, DependencyRecord, VersionInfo


class FakeRegistry:
    """In-memory registry keyed by package name."""

    def __init__(self, packages: dict[str, list[VersionInfo]]) -> None:
        self.packages = packages
        self.calls: list[tuple[str, ...]] = []

    def list_versions(self, name: str) -> list[VersionInfo]:
        self.calls.append(("list_versions", name))
        if name not in self.packages:
            raise NotFoundError(f"Couldn't find crate name {name}")
        return self.packages[name]

    def get_version(self, name: str, version: str) -> VersionInfo:
        self.calls.append(("get_version", name, version))
        for info in self.list_versions(name):
            if info.version == version:
                return info
        raise NotFoundError(f"Couldn't find version {version} for crate {name}")

    def archive_url(self, name: str, version: str) -> str:
        return f"https://archives.test/{name}/{version}/download"


class FakeRunner:
    """Records commands and answers with a canned result."""

    def __init__(
        self, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[tuple[list[str], Path | None]] = []

    def __call__(self, args, *, cwd: Path | None = None) -> CommandResult:
        self.calls.append((list(args), cwd))
        return CommandResult(
            args=list(args),
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
        )


def dep(name: str, req: str = "^1.0", **fields) -> DependencyRecord:
    """Shorthand for a dependency record."""
    return DependencyRecord(name=name, req=req, **fields)


@pytest.fixture
def sample_registry() -> FakeRegistry:
    """Package "p": 1.0.0 has {a, b}, 1.1.0 has {b, c}, 1.2.0 bumps b."""
    return FakeRegistry(
        {
            "p": [
                VersionInfo(version="1.0.0", dependencies=[dep("a"), dep("b", "^2.0")]),
                VersionInfo(version="1.1.0", dependencies=[dep("b", "^2.0"), dep("c")]),
                VersionInfo(version="1.1.1", yanked=True),
                VersionInfo(version="1.2.0", dependencies=[dep("b", "^2.1"), dep("c")]),
            ]
        }
    )


@pytest.fixture
def fake_runner() -> Callable[..., FakeRunner]:
    return FakeRunner


@pytest.fixture
def isolated_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Make tempfile create its directories under a fresh, empty directory."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def fake_registry() -> type[FakeRegistry]:
    return FakeRegistry
