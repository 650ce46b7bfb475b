"""Flat-file cache of the last successfully fetched text of each blocklist.

One file per source URL, named after the URL percent-encoded with no safe
characters (``quote(source, safe="")``), which keeps the name flat and
unique per source. Entries are overwritten on every successful fetch and
only read when a fetch fails. Nothing here expires or deletes entries.

Unlike a plain cache miss, filesystem failures raise ``BlocklistError``
with ``CACHE_ERROR`` so the merge engine can log them; it never lets them
fail the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

import structlog

from blockmerge.atomic import atomic_write_text
from blockmerge.errors import BlocklistError, ErrorCode

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()


class BlocklistCache:
    """Filesystem-backed blocklist cache implementing CacheProtocol."""

    def __init__(self, cache_dir: Path) -> None:
        self._dir = cache_dir

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, source: str) -> Path:
        return self._dir / quote(source, safe="")

    def put(self, source: str, content: str) -> None:
        """Store ``content`` for ``source``, replacing any previous entry atomically."""
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BlocklistError(ErrorCode.CACHE_ERROR, str(exc)).with_context(
                f"Could not create cache dir in {self._dir}"
            ) from exc

        path = self.path_for(source)
        try:
            atomic_write_text(path, content)
        except OSError as exc:
            raise BlocklistError(ErrorCode.CACHE_ERROR, str(exc)).with_context(
                f"Failed writing to cache file in {path}"
            ) from exc
        log.debug("cache_write", source=source, path=str(path), size=len(content))

    def get(self, source: str) -> str | None:
        """Return the cached text for ``source``, or ``None`` if nothing is cached."""
        path = self.path_for(source)
        try:
            content = path.read_bytes().decode("utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise BlocklistError(ErrorCode.CACHE_ERROR, str(exc)).with_context(
                f"Failed reading cached file in {path}"
            ) from exc
        log.debug("cache_read", source=source, path=str(path), size=len(content))
        return content
