"""Blocklist merge engine.

Processes sources one at a time: fetch, fall back to the cache on failure,
parse, drop whitelisted hosts, accumulate. Per-source and per-line problems
are logged and flagged on the report; none of them stop the run.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from blockmerge.errors import BlocklistError
from blockmerge.models.report import MergeReport
from blockmerge.parser import parse_blocklist

if TYPE_CHECKING:
    from collections.abc import Callable

    from blockmerge.models.config import BlocklistConfig
    from blockmerge.protocols import CacheProtocol, FetcherProtocol

log = structlog.get_logger()

DEFAULT_THROTTLE_SECONDS = 0.5


def merge_blocklists(
    config: BlocklistConfig,
    fetcher: FetcherProtocol,
    cache: CacheProtocol,
    *,
    throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> MergeReport:
    """Merge every configured blocklist into one host set.

    The result is ``host_blacklist`` plus every parsed host that is not in
    ``host_whitelist``. Whitelisting is checked per candidate, so blacklisted
    hosts are always kept.
    """
    report = MergeReport(hosts=set(config.host_blacklist))
    sources = config.sources()

    for index, source in enumerate(sources):
        content, from_cache = _acquire(source, fetcher, cache, report)
        if content is None:
            continue

        _merge_source(source, content, config, report, from_cache=from_cache)

        if index < len(sources) - 1:
            sleep(throttle_seconds)

    log.info(
        "merge_complete",
        hosts=len(report.hosts),
        sources=len(sources),
        fetched=report.sources_fetched,
        cached=report.sources_cached,
        skipped=report.sources_skipped,
        parse_errors=report.parse_errors,
        failed=report.failed,
    )
    return report


def _acquire(
    source: str,
    fetcher: FetcherProtocol,
    cache: CacheProtocol,
    report: MergeReport,
) -> tuple[str | None, bool]:
    """Return ``(content, from_cache)``; content is None when nothing is usable."""
    try:
        content = fetcher.fetch(source)
    except BlocklistError as exc:
        log.warning("fetch_failed", source=source, **exc.log_fields())
        report.failed = True
    else:
        report.sources_fetched += 1
        try:
            cache.put(source, content)
        except BlocklistError as exc:
            log.warning("cache_write_failed", source=source, **exc.log_fields())
        return content, False

    try:
        cached = cache.get(source)
    except BlocklistError as exc:
        log.warning("cache_read_failed", source=source, **exc.log_fields())
        cached = None

    if cached is None:
        log.warning("blocklist_skipped", source=source, reason="no_cached_copy")
        report.sources_skipped += 1
        return None, False

    log.info("using_cached_blocklist", source=source)
    report.sources_cached += 1
    return cached, True


def _merge_source(
    source: str,
    content: str,
    config: BlocklistConfig,
    report: MergeReport,
    *,
    from_cache: bool,
) -> None:
    accepted = whitelisted = errors = 0

    for result in parse_blocklist(content):
        if isinstance(result, BlocklistError):
            log.warning("blocklist_parse_error", source=source, **result.log_fields())
            report.failed = True
            errors += 1
            continue

        if result in config.host_whitelist:
            whitelisted += 1
            continue

        report.hosts.add(result)
        accepted += 1

    report.parse_errors += errors
    report.whitelisted += whitelisted
    log.info(
        "blocklist_merged",
        source=source,
        accepted=accepted,
        whitelisted=whitelisted,
        errors=errors,
        from_cache=from_cache,
    )
