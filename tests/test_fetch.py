"""Tests for crate_diff.fetch."""

from __future__ import annotations

import io
import shutil
import tarfile
from pathlib import Path

import httpx
import pytest

from crate_diff.config import Settings
from crate_diff.errors import ExtractionError, NetworkError, NotFoundError
from crate_diff.fetch import fetch_archive
from crate_diff.http_client import build_client
from crate_diff.models import CommandResult

requires_tar = pytest.mark.skipif(shutil.which("tar") is None, reason="needs tar")


def _client(handler) -> httpx.Client:
    return build_client(Settings(), transport=httpx.MockTransport(handler))


def _crate_tarball(root: str, files: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{root}/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def _extracting_runner(*dirs: str):
    """Fake tar that creates the given directories in cwd."""
    calls: list[list[str]] = []

    def runner(args, *, cwd: Path | None = None) -> CommandResult:
        calls.append(list(args))
        for d in dirs:
            (cwd / d).mkdir()
        return CommandResult(args=list(args), returncode=0)

    runner.calls = calls
    return runner


class TestFetchArchive:
    def test_downloads_and_extracts(self, sample_registry, tmp_path: Path) -> None:
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200, content=b"archive-bytes")

        runner = _extracting_runner("p-1.0.0")
        path = fetch_archive(
            "p",
            "1.0.0",
            tmp_path,
            registry=sample_registry,
            client=_client(handler),
            runner=runner,
        )

        assert path == tmp_path / "p-1.0.0"
        assert urls == ["https://archives.test/p/1.0.0/download"]
        assert (tmp_path / "p-1.0.0.tar.gz").read_bytes() == b"archive-bytes"
        assert runner.calls == [["tar", "xf", "p-1.0.0.tar.gz"]]

    def test_uses_single_new_directory(self, sample_registry, tmp_path: Path) -> None:
        client = _client(lambda request: httpx.Response(200, content=b"x"))
        path = fetch_archive(
            "p",
            "1.0.0",
            tmp_path,
            registry=sample_registry,
            client=client,
            runner=_extracting_runner("P_pkg-1.0.0"),
        )
        assert path == tmp_path / "P_pkg-1.0.0"

    def test_no_directory_produced(self, sample_registry, tmp_path: Path) -> None:
        client = _client(lambda request: httpx.Response(200, content=b"x"))
        with pytest.raises(ExtractionError, match="did not produce a p-1.0.0 directory"):
            fetch_archive(
                "p",
                "1.0.0",
                tmp_path,
                registry=sample_registry,
                client=client,
                runner=_extracting_runner(),
            )

    def test_tar_failure_keeps_output(
        self, sample_registry, fake_runner, tmp_path: Path
    ) -> None:
        client = _client(lambda request: httpx.Response(200, content=b"x"))
        runner = fake_runner(returncode=2, stderr="tar: not in gzip format")
        with pytest.raises(ExtractionError) as exc_info:
            fetch_archive(
                "p", "1.0.0", tmp_path, registry=sample_registry, client=client, runner=runner
            )
        assert exc_info.value.returncode == 2
        assert "not in gzip format" in str(exc_info.value)

    def test_unknown_version(self, sample_registry, fake_runner, tmp_path: Path) -> None:
        client = _client(lambda request: httpx.Response(404))
        runner = fake_runner()
        with pytest.raises(NotFoundError, match="version 9.9.9 of p"):
            fetch_archive(
                "p", "9.9.9", tmp_path, registry=sample_registry, client=client, runner=runner
            )
        assert runner.calls == []

    def test_network_failure(self, sample_registry, fake_runner, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError, match="timed out"):
            fetch_archive(
                "p",
                "1.0.0",
                tmp_path,
                registry=sample_registry,
                client=_client(handler),
                runner=fake_runner(),
            )

    @requires_tar
    def test_real_tar(self, sample_registry, tmp_path: Path) -> None:
        tarball = _crate_tarball("p-1.0.0", {"src/lib.rs": "pub fn f() {}\n"})
        client = _client(lambda request: httpx.Response(200, content=tarball))

        path = fetch_archive(
            "p", "1.0.0", tmp_path, registry=sample_registry, client=client
        )

        assert (path / "src" / "lib.rs").read_text() == "pub fn f() {}\n"
