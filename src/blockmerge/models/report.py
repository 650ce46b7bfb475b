from __future__ import annotations

from dataclasses import dataclass, field

from blockmerge.models.host import Host


@dataclass
class MergeReport:
    """Outcome of one merge run.

    ``failed`` is set by any fetch failure (even when the cache covered it)
    and by any line that failed to parse. The counters only feed logging.
    """

    hosts: set[Host] = field(default_factory=set)
    failed: bool = False

    sources_fetched: int = 0
    sources_cached: int = 0  # fetch failed, cached copy used
    sources_skipped: int = 0  # fetch failed, nothing cached
    parse_errors: int = 0
    whitelisted: int = 0
