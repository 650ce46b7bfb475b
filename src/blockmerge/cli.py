"""Command-line entrypoint.

Responsibilities (and nothing more):
- Parse arguments
- Configure structlog
- Load the blocklist config, wire cache/fetcher/merge engine, write output
- Map the run outcome to an exit status
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from blockmerge import __version__
from blockmerge.cache import BlocklistCache
from blockmerge.config import LoggingSettings, Settings, load_blocklist_config, load_settings
from blockmerge.errors import BlocklistError
from blockmerge.fetcher import Fetcher, build_http_client
from blockmerge.merge import merge_blocklists
from blockmerge.render import OutputFormat, write_output

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()

EXIT_OK = 0
EXIT_DEGRADED = 1  # output written, but some source or line failed
EXIT_FATAL = 2


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: LoggingSettings) -> None:
    """Send structlog events to stderr; stdout may carry the merged blocklist."""
    if settings.format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.level]
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


def _output_format(name: str) -> OutputFormat:
    try:
        return OutputFormat.parse(name)
    except BlocklistError as exc:
        raise argparse.ArgumentTypeError(exc.message) from exc


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockmerge",
        description="Merge DNS blocklists into a single unbound, dnsmasq or hosts file.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config", type=Path, required=True, help="Path to the blocklist config"
    )
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        default=None,
        help="Output file. If not given the blocklist is printed to stdout",
    )
    parser.add_argument(
        "-f",
        "--format",
        type=_output_format,
        required=True,
        metavar="{" + ",".join(fmt.value for fmt in OutputFormat) + "}",
        help="Format of the merged blocklist",
    )
    parser.add_argument(
        "--cache",
        type=Path,
        default=None,
        help="Directory for cached blocklists (default: platform cache dir)",
    )
    return parser


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute one merge run and return the process exit status."""
    try:
        config = load_blocklist_config(args.config)
    except BlocklistError as exc:
        log.error("config_load_failed", path=str(args.config), **exc.log_fields())
        return EXIT_FATAL

    cache_dir = args.cache if args.cache is not None else Path(settings.cache.dir).expanduser()
    cache = BlocklistCache(cache_dir)

    log.info(
        "run_starting",
        version=__version__,
        sources=len(config.blocklists),
        format=str(args.format),
        cache_dir=str(cache_dir),
    )

    with build_http_client(settings.fetcher) as http_client:
        report = merge_blocklists(
            config,
            Fetcher(http_client, timeout_seconds=settings.fetcher.timeout_seconds),
            cache,
            throttle_seconds=settings.merge.throttle_seconds,
        )

    try:
        write_output(report.hosts, args.format, args.out)
    except BlocklistError as exc:
        log.error("output_write_failed", **exc.log_fields())
        return EXIT_FATAL

    if report.failed:
        log.error(
            "some_blocklists_failed",
            cached=report.sources_cached,
            skipped=report.sources_skipped,
            parse_errors=report.parse_errors,
        )
        return EXIT_DEGRADED

    log.info("run_complete", hosts=len(report.hosts))
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    try:
        settings = load_settings()
    except BlocklistError as exc:
        _setup_logging(LoggingSettings())
        log.error("config_load_failed", **exc.log_fields())
        return EXIT_FATAL

    _setup_logging(settings.logging)
    return run(args, settings)


if __name__ == "__main__":
    sys.exit(main())
