"""Serialise a merged host set into a DNS server configuration format."""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import TYPE_CHECKING, TextIO

from blockmerge.atomic import atomic_write_text
from blockmerge.errors import BlocklistError, ErrorCode

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from blockmerge.models.host import Host


class OutputFormat(StrEnum):
    UNBOUND = "unbound"
    DNSMASQ = "dnsmasq"
    HOSTS = "hosts"

    @classmethod
    def parse(cls, name: str) -> OutputFormat:
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(fmt.value for fmt in cls)
            raise BlocklistError(
                ErrorCode.CONFIG_ERROR,
                f"Unknown format: {name}, valid formats are: {valid}",
            ) from None

    def line(self, host: Host) -> str:
        match self:
            case OutputFormat.UNBOUND:
                return f'local-zone: "{host}" always_nxdomain\n'
            case OutputFormat.DNSMASQ:
                return f"address=/{host}/\n"
            case OutputFormat.HOSTS:
                return f"0.0.0.0 {host}\n"


def render_lines(hosts: Iterable[Host], fmt: OutputFormat) -> Iterator[str]:
    """Yield one newline-terminated line per host, in ascending order."""
    for host in sorted(hosts):
        yield fmt.line(host)


def render(hosts: Iterable[Host], fmt: OutputFormat) -> str:
    return "".join(render_lines(hosts, fmt))


def write_output(
    hosts: Iterable[Host],
    fmt: OutputFormat,
    out: Path | None = None,
    *,
    stream: TextIO | None = None,
) -> None:
    """Write the rendered blocklist to ``out``, or to stdout when ``out`` is None.

    A file destination is replaced atomically, so a crash never leaves a
    truncated blocklist behind. Raises BlocklistError with ``OUTPUT_ERROR``.
    """
    if out is not None:
        try:
            atomic_write_text(out, render(hosts, fmt))
        except (OSError, UnicodeEncodeError) as exc:
            raise BlocklistError(ErrorCode.OUTPUT_ERROR, str(exc)).with_context(
                f"Could not write to {out}"
            ) from exc
        return

    target = stream if stream is not None else sys.stdout
    try:
        target.writelines(render_lines(hosts, fmt))
        target.flush()
    except (OSError, UnicodeEncodeError) as exc:
        raise BlocklistError(ErrorCode.OUTPUT_ERROR, str(exc)).with_context(
            "Could not write to stdout"
        ) from exc
