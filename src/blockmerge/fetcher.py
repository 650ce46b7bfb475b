"""HTTP blocklist fetcher.

All network I/O goes through a single Fetcher per run. The Fetcher receives
an httpx.Client via constructor injection; the CLI owns the client lifecycle.
One GET per source, no retries: a failed fetch is recovered from the cache.

httpx timeouts apply per network operation, so a server trickling bytes
could hold a read open forever. The body is therefore streamed and the
fetch is abandoned once the overall deadline has passed.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import httpx
import structlog

from blockmerge.config import FetcherSettings
from blockmerge.errors import BlocklistError, ErrorCode

if TYPE_CHECKING:
    from collections.abc import Callable

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings | None = None) -> httpx.Client:
    """Create the shared httpx client. Called once per run."""
    settings = settings if settings is not None else FetcherSettings()
    return httpx.Client(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
    )


class Fetcher:
    """Fetches the raw text of one blocklist per call."""

    def __init__(
        self,
        client: httpx.Client,
        *,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else FetcherSettings().timeout_seconds
        )
        self._clock = clock

    def fetch(self, source: str) -> str:
        """Return the body of ``source`` decoded as UTF-8.

        Raises BlocklistError with ``FETCH_ERROR`` on unusable URLs, network
        errors, non-2xx responses, bodies that take longer than the timeout
        to arrive and bodies that are not valid UTF-8.
        """
        deadline = self._clock() + self._timeout_seconds
        try:
            with self._client.stream("GET", source) as response:
                status_code = response.status_code
                if not response.is_success:
                    raise BlocklistError(
                        ErrorCode.FETCH_ERROR,
                        f"{source} returned status {status_code}",
                    )
                body = bytearray()
                for chunk in response.iter_bytes():
                    body.extend(chunk)
                    if self._clock() > deadline:
                        raise BlocklistError(
                            ErrorCode.FETCH_ERROR,
                            f"Fetching blocklist {source} took longer than "
                            f"{self._timeout_seconds}s",
                        )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise BlocklistError(
                ErrorCode.FETCH_ERROR,
                f"Could not fetch blocklist {source}: {exc}",
            ) from exc

        try:
            content = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BlocklistError(
                ErrorCode.FETCH_ERROR,
                f"Could not decode blocklist {source} as UTF-8",
            ) from exc

        log.info(
            "fetch_complete",
            source=source,
            status_code=status_code,
            content_length=len(content),
        )
        return content
