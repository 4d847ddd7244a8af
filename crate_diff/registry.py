"""Registry clients.

A registry resolves a package name to its published versions and, for one
version, to its dependency records and source archive URL. Two backends
are provided:

- CratesIndex: the crates.io sparse index (one JSON object per line).
- PyPIRegistry: the PyPI JSON API, with dependencies from requires_dist.

Neither client caches anything; every call hits the network.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import Protocol

import httpx
from packaging.version import InvalidVersion, Version
from pydantic import ValidationError

from .config import Settings
from .deps import requirement_to_record
from .errors import NotFoundError, RegistryError
from .http_client import get
from .models import VersionInfo

log = getLogger(__name__)

REGISTRIES = ("crates", "pypi")


class Registry(Protocol):
    """What the commands need from a package registry."""

    def list_versions(self, name: str) -> list[VersionInfo]:
        """Return all published versions, yanked ones included."""
        ...

    def get_version(self, name: str, version: str) -> VersionInfo:
        """Return one version with its dependencies, or raise NotFoundError."""
        ...

    def archive_url(self, name: str, version: str) -> str:
        """Return the download URL of the version's source archive."""
        ...


def index_path(name: str) -> str:
    """Return the sparse-index path of a crate.

    Examples:
        "a" → "1/a"
        "ab" → "2/ab"
        "abc" → "3/a/abc"
        "Serde" → "se/rd/serde"
    """
    name = name.lower()
    if len(name) <= 2:
        return f"{len(name)}/{name}"
    if len(name) == 3:
        return f"3/{name[0]}/{name}"
    return f"{name[:2]}/{name[2:4]}/{name}"


class CratesIndex:
    """Client for the crates.io sparse index."""

    def __init__(self, client: httpx.Client, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings or Settings()

    def list_versions(self, name: str) -> list[VersionInfo]:
        """Return versions in publication order, as the index lists them."""
        if not name:
            raise NotFoundError("Couldn't find crate name ''")
        url = self._settings.crates_index_url + index_path(name)
        response = get(self._client, url, missing=f"crate name {name}")
        versions: list[VersionInfo] = []
        for line in response.text.splitlines():
            if not line.strip():
                continue
            try:
                versions.append(VersionInfo.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError) as exc:
                raise RegistryError(f"Malformed index entry for {name}: {exc}") from exc
        log.info("%s: %d versions in index", name, len(versions))
        return versions

    def get_version(self, name: str, version: str) -> VersionInfo:
        for info in self.list_versions(name):
            if info.version == version:
                return info
        raise NotFoundError(f"Couldn't find version {version} for crate {name}")

    def archive_url(self, name: str, version: str) -> str:
        return f"{self._settings.crates_download_url}{name}/{version}/download"


class PyPIRegistry:
    """Client for the PyPI JSON API."""

    def __init__(self, client: httpx.Client, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings or Settings()

    def _project(self, name: str, version: str | None = None) -> dict:
        if version is None:
            path, missing = f"{name}/json", f"package {name}"
        else:
            path = f"{name}/{version}/json"
            missing = f"version {version} for package {name}"
        response = get(self._client, self._settings.pypi_url + path, missing=missing)
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise RegistryError(f"Malformed PyPI response for {name}: {exc}") from exc

    def list_versions(self, name: str) -> list[VersionInfo]:
        """Return versions oldest first.

        A version counts as yanked when it has files and all of them are
        yanked. Versions that are not valid PEP 440 keep their reported
        order after the valid ones.
        """
        releases: dict[str, list[dict]] = self._project(name).get("releases", {})
        versions = [
            VersionInfo(
                version=vers,
                yanked=bool(files) and all(f.get("yanked", False) for f in files),
            )
            for vers, files in releases.items()
        ]
        return sorted(versions, key=_pep440_sort_key)

    def get_version(self, name: str, version: str) -> VersionInfo:
        info = self._project(name, version).get("info", {})
        requires = info.get("requires_dist") or []
        return VersionInfo(
            version=info.get("version", version),
            yanked=bool(info.get("yanked", False)),
            dependencies=[requirement_to_record(dep) for dep in requires],
        )

    def archive_url(self, name: str, version: str) -> str:
        for file in self._project(name, version).get("urls", []):
            if file.get("packagetype") == "sdist" and file.get("url", "").endswith(
                ".tar.gz"
            ):
                return file["url"]
        raise NotFoundError(f"Couldn't find a source archive for {name} {version}")


def _pep440_sort_key(info: VersionInfo) -> tuple[int, Version]:
    try:
        return (0, Version(info.version))
    except InvalidVersion:
        return (1, Version("0"))


def make_registry(
    kind: str, client: httpx.Client, settings: Settings | None = None
) -> Registry:
    """Build the registry client named by `kind` ("crates" or "pypi")."""
    if kind == "crates":
        return CratesIndex(client, settings)
    if kind == "pypi":
        return PyPIRegistry(client, settings)
    raise ValueError(f"Unknown registry {kind!r}; expected one of {REGISTRIES}")
