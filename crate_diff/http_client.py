"""Thin wrapper around httpx.

All registry and download traffic goes through one `httpx.Client` built
here, so timeouts and headers are the same everywhere and tests can swap
in an `httpx.MockTransport`.
"""

from __future__ import annotations

from logging import getLogger

import httpx

from .config import Settings
from .errors import NetworkError, NotFoundError

log = getLogger(__name__)


def build_client(
    settings: Settings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` with the configured timeout and user agent.

    crates.io rejects requests without a descriptive User-Agent.
    """
    settings = settings or Settings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
        transport=transport,
    )


def get(client: httpx.Client, url: str, *, missing: str) -> httpx.Response:
    """GET `url`, mapping failures onto crate-diff errors.

    Args:
        client: Client to send the request with.
        url: Absolute URL.
        missing: Description of what a 404 means (e.g., "package serde"),
                 used in the NotFoundError message.

    Raises:
        NotFoundError: On HTTP 404.
        NetworkError: On any other HTTP error status or transport failure.
    """
    log.debug("GET %s", url)
    try:
        response = client.get(url)
    except httpx.HTTPError as exc:
        raise NetworkError(f"Request to {url} failed: {exc}") from exc
    if response.status_code == 404:
        raise NotFoundError(f"Couldn't find {missing}")
    if response.is_error:
        raise NetworkError(
            f"Request to {url} failed with HTTP {response.status_code}"
        )
    return response
