from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from blockmerge.models.host import Host


class BlocklistConfig(BaseModel):
    """Blocklist sources plus the operator's allow/deny overrides.

    Hosts and URLs are validated on load, so a bad entry is reported with the
    offending value before any network activity happens.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    host_whitelist: frozenset[Host] = frozenset()
    host_blacklist: frozenset[Host] = frozenset()
    blocklists: frozenset[str] = frozenset()

    @field_validator("blocklists")
    @classmethod
    def validate_blocklists(cls, v: frozenset[str]) -> frozenset[str]:
        for url in v:
            # Same URL parser the fetcher uses
            try:
                parsed = httpx.URL(url)
            except (httpx.InvalidURL, ValueError) as exc:
                raise ValueError(f"Invalid blocklist URL: {url!r} ({exc})") from exc
            if not parsed.scheme or not parsed.host:
                raise ValueError(f"Invalid blocklist URL: {url!r}")
        return v

    def sources(self) -> list[str]:
        """Blocklist URLs in processing order."""
        return sorted(self.blocklists)
