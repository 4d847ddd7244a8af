"""Archive download and extraction.

Downloads a version's published source archive over HTTPS and unpacks it
with the external `tar` tool into a caller-owned directory.
"""

from __future__ import annotations

from logging import getLogger
from pathlib import Path

import httpx

from .errors import ExtractionError, NetworkError, NotFoundError, ScratchIOError
from .registry import Registry
from .shell import Runner, check_success, run_command

log = getLogger(__name__)


def download(client: httpx.Client, url: str, dest: Path, *, missing: str) -> None:
    """Stream `url` into the file `dest`.

    Raises:
        NotFoundError: On HTTP 404.
        NetworkError: On any other HTTP error or transport failure.
        ScratchIOError: If `dest` cannot be written.
    """
    log.info("downloading %s", url)
    try:
        with client.stream("GET", url) as response:
            if response.status_code == 404:
                raise NotFoundError(f"Couldn't find {missing}")
            if response.is_error:
                raise NetworkError(
                    f"Download of {url} failed with HTTP {response.status_code}"
                )
            with dest.open("wb") as fh:
                for chunk in response.iter_bytes():
                    fh.write(chunk)
    except httpx.HTTPError as exc:
        raise NetworkError(f"Download of {url} failed: {exc}") from exc
    except OSError as exc:
        raise ScratchIOError(f"Couldn't write {dest}: {exc}") from exc


def fetch_archive(
    name: str,
    version: str,
    dest_dir: Path,
    *,
    registry: Registry,
    client: httpx.Client,
    runner: Runner = run_command,
) -> Path:
    """Download and extract `name` `version` into `dest_dir`.

    Published archives unpack to a `{name}-{version}` directory. If that
    directory does not appear (e.g., an sdist normalised the name), the
    single directory the extraction created is used instead.

    Returns:
        Path of the extracted source tree.

    Raises:
        NotFoundError: If the registry or download host doesn't know the version.
        NetworkError: On transport failure.
        ExtractionError: If `tar` fails or produces no directory.
    """
    archive = dest_dir / f"{name}-{version}.tar.gz"
    download(
        client,
        registry.archive_url(name, version),
        archive,
        missing=f"version {version} of {name}",
    )

    before = {p for p in dest_dir.iterdir() if p.is_dir()}
    result = check_success(
        runner(["tar", "xf", archive.name], cwd=dest_dir), ExtractionError
    )

    expected = dest_dir / f"{name}-{version}"
    if expected.is_dir():
        return expected
    created = sorted(p for p in dest_dir.iterdir() if p.is_dir() and p not in before)
    if len(created) == 1:
        return created[0]
    raise ExtractionError(
        result.args,
        result.returncode,
        result.stdout,
        result.stderr,
        reason=f"Extracting {archive.name} did not produce a {expected.name} directory",
    )
