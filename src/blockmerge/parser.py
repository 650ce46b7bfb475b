"""Hosts-file style blocklist parser.

Accepts the two shapes community blocklists come in: a bare hostname per
line, or ``<ip> <hostname>`` as in ``/etc/hosts``. Yields one result per
meaningful line, so a caller can report every bad line and still use the
rest of the list.
"""

from __future__ import annotations

import ipaddress
import re
from typing import TYPE_CHECKING

from blockmerge.errors import BlocklistError, ErrorCode
from blockmerge.models.host import Host

if TYPE_CHECKING:
    from collections.abc import Iterator

_ENTRY_RE = re.compile(r"\s*((?P<ip>\S+)\s+)?(?P<host>\S+)\s*")
_COMMENT_RE = re.compile(r"#.*")

ParseResult = Host | BlocklistError


def parse_blocklist(content: str) -> Iterator[ParseResult]:
    """Lazily parse blocklist text into hosts and per-line errors.

    Comment-only and blank lines produce nothing. Entries pointing at a
    loopback address are dropped silently; entries pointing at ``0.0.0.0``
    or ``::`` are kept. Any other address is flagged as suspicious: such
    lines redirect a name rather than block it.
    """
    for raw_line in content.split("\n"):
        line = _COMMENT_RE.sub("", raw_line.removesuffix("\r"), count=1)
        if not line or line.isspace():
            continue

        result = _parse_line(line)
        if result is not None:
            yield result


def _parse_line(line: str) -> ParseResult | None:
    match = _ENTRY_RE.fullmatch(line)
    if match is None:
        return BlocklistError(
            ErrorCode.PARSE_ERROR, f'Failed parsing blocklist entry "{line}"'
        )

    ip_text = match.group("ip")
    if ip_text is not None:
        try:
            ip = ipaddress.ip_address(ip_text)
        except ValueError as exc:
            return BlocklistError(ErrorCode.PARSE_ERROR, f"Malformed ip: {exc}")

        if ip.is_loopback:
            return None
        if not ip.is_unspecified:
            return BlocklistError(ErrorCode.PARSE_ERROR, f"Suspicious ip {ip}")

    try:
        return Host.validate(match.group("host"))
    except BlocklistError as exc:
        return exc
