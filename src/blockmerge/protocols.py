"""Protocol interfaces for swappable components.

The merge engine references these protocols, not the concrete
implementations, so tests can drive it with lightweight in-memory fakes.
"""

from __future__ import annotations

from typing import Protocol


class CacheProtocol(Protocol):
    """Interface for the blocklist cache backend."""

    def put(self, source: str, content: str) -> None: ...

    def get(self, source: str) -> str | None: ...


class FetcherProtocol(Protocol):
    """Interface for the HTTP blocklist fetcher."""

    def fetch(self, source: str) -> str: ...
