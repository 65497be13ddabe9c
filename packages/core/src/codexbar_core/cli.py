"""
Codexbar command line interface.

Usage:
    codexbar --all
    codexbar --provider claude
    codexbar --all --detect

Prints one JSON report on stdout. The exit status is 0 even when every
provider fails; failures are part of the report.
"""

import argparse
import asyncio
import sys
import uuid

import structlog

from .aggregator import UsageAggregator
from .config import get_settings
from .logging import configure_logging, get_logger
from .models import UsageReport
from .usage_clients import USAGE_CLIENTS

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codexbar",
        description="Usage and quota status for AI coding assistants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Every provider
  codexbar --all

  # A single provider
  codexbar --provider kimi

  # Also report which provider runs in the focused window
  codexbar --all --detect
        """,
    )
    parser.add_argument("--all", action="store_true", help="Fetch every provider")
    parser.add_argument(
        "--provider",
        choices=list(USAGE_CLIENTS),
        help="Fetch a single provider",
    )
    parser.add_argument(
        "--detect",
        action="store_true",
        help="Detect the provider active in the focused window",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override CODEXBAR_LOG_LEVEL",
    )
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        help="Override CODEXBAR_LOG_FORMAT",
    )
    return parser


def selected_providers(args: argparse.Namespace) -> list[str]:
    if args.all:
        return list(USAGE_CLIENTS)
    if args.provider:
        return [args.provider]
    return []


async def run(args: argparse.Namespace) -> UsageReport:
    settings = get_settings()
    aggregator = UsageAggregator(settings)

    active_provider = None
    if args.detect:
        from codexbar_detect import ActiveProviderDetector

        active_provider = ActiveProviderDetector(settings).detect

    return await aggregator.build_report(selected_providers(args), active_provider)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(
        log_level=args.log_level or settings.logging.level,
        log_format=args.log_format or settings.logging.format,
    )
    structlog.contextvars.bind_contextvars(invocation_id=uuid.uuid4().hex[:8])

    report = asyncio.run(run(args))
    logger.info(
        "Report assembled",
        providers=len(report.providers),
        active_provider=report.active_provider,
    )

    sys.stdout.write(report.to_json() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
