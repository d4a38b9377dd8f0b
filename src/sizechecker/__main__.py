"""Application entry point and CLI for sizechecker.

Parses command-line arguments, builds the check configuration, measures the
directory, compares the result against the limit and, on a violation,
notifies each configured destination whose cooldown has elapsed.

Exit codes:
    0: No violation
    1: Violation detected; the check-then-notify flow completed, whether or
       not any notification was actually sent
    2: Usage, configuration or probe error
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final, NoReturn
from uuid import uuid4

from sizechecker.config import (
    LOG_LEVELS,
    CheckerConfig,
    ConfigurationError,
    build_config,
    load_config_file,
)
from sizechecker.core.dispatcher import DispatchOutcome, NotificationDispatcher
from sizechecker.core.probe import ProbeError, probe, validate_directory
from sizechecker.core.threshold import evaluate
from sizechecker.plugins import build_notifiers, notifier_secrets
from sizechecker.types import Notifier
from sizechecker.utils.http_client import AIOHTTPClient
from sizechecker.utils.logging import configure_logging, set_correlation_id
from sizechecker.utils.sanitization import sanitize_exception

__all__ = ["build_parser", "main", "run"]

# Exit codes
EXIT_OK: Final[int] = 0
EXIT_VIOLATION: Final[int] = 1
EXIT_USAGE: Final[int] = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the sizechecker CLI."""
    parser = argparse.ArgumentParser(
        prog="sizechecker",
        description="Check a directory's used or available disk space against a limit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sizechecker --limit 50GB --runtype u /srv/backups
  sizechecker --limit "1 TB" --runtype a --discord https://discord.com/api/webhooks/ID/TOKEN /mnt/data
  PUSHOVER_APITOKEN=... PUSHOVER_USERKEY=... sizechecker --limit 10GB --runtype a -o nas /mnt/data

Exit status is 0 when the limit is respected, 1 when it is violated and 2 on
usage or probe errors.
        """,
    )

    _ = parser.add_argument(
        "directory",
        type=Path,
        help="Directory to check",
    )

    _ = parser.add_argument(
        "--limit",
        type=str,
        help=(
            "Limit size (e.g., 50GB). For 'u' runtype, it's the maximum allowed used space; "
            "for 'a', it's the minimum required free space."
        ),
        metavar="SIZE",
    )

    _ = parser.add_argument(
        "--runtype",
        type=str,
        choices=["u", "a"],
        help="'a' for available space check, 'u' for used space check",
    )

    _ = parser.add_argument(
        "--discord",
        type=str,
        help="Discord webhook URL for notifications (optional)",
        metavar="URL",
    )

    _ = parser.add_argument(
        "-o",
        dest="pushover",
        type=str,
        help="Trigger a Pushover notification titled with this value. "
        "Requires PUSHOVER_APITOKEN and PUSHOVER_USERKEY to be set.",
        metavar="DESTINATION",
    )

    _ = parser.add_argument(
        "--cooldown",
        type=str,
        help="Cooldown duration between notifications (e.g., 1m, 30s; default: 1m)",
        metavar="DURATION",
    )

    _ = parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Optional YAML file with defaults for the options above",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate and consult the cooldown, but do not send notifications",
    )

    _ = parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=list(LOG_LEVELS),
        help="Logging level (default: INFO)",
        metavar="LEVEL",
    )

    _ = parser.add_argument(
        "--syslog",
        action="store_true",
        help="Also log to the local syslog socket",
    )

    return parser


def config_from_arguments(args: argparse.Namespace) -> CheckerConfig:
    """Build a CheckerConfig from parsed arguments and the optional YAML file.

    Raises:
        ConfigurationError: If any value is missing or invalid
    """
    config_path: Path | None = args.config  # pyright: ignore[reportAny]  # argparse boundary
    file_settings = load_config_file(config_path) if config_path is not None else None

    return build_config(
        path=args.directory,  # pyright: ignore[reportAny]  # argparse boundary
        limit=args.limit,  # pyright: ignore[reportAny]  # argparse boundary
        runtype=args.runtype,  # pyright: ignore[reportAny]  # argparse boundary
        discord=args.discord,  # pyright: ignore[reportAny]  # argparse boundary
        pushover=args.pushover,  # pyright: ignore[reportAny]  # argparse boundary
        cooldown=args.cooldown,  # pyright: ignore[reportAny]  # argparse boundary
        dry_run=args.dry_run,  # pyright: ignore[reportAny]  # argparse boundary
        log_level=args.log_level,  # pyright: ignore[reportAny]  # argparse boundary
        syslog=args.syslog,  # pyright: ignore[reportAny]  # argparse boundary
        file_settings=file_settings,
    )


async def notify(
    config: CheckerConfig,
    message: str,
    *,
    http_client: AIOHTTPClient,
    notifiers: Sequence[Notifier],
) -> tuple[DispatchOutcome, ...]:
    """Dispatch ``message`` to every notifier inside one HTTP session."""
    dispatcher = NotificationDispatcher(
        notifiers,
        cooldown=config.cooldown,
        state_dir=config.state_dir,
        dry_run_enabled=config.dry_run,
    )
    async with http_client:
        return await dispatcher.dispatch(message)


def run(config: CheckerConfig, *, environ: Mapping[str, str] | None = None) -> int:
    """Run one check described by ``config`` and return the exit code.

    Raises:
        ConfigurationError: If a notification destination is malformed
        ProbeError: If the directory cannot be measured
    """
    logger = logging.getLogger(__name__)

    http_client = AIOHTTPClient()
    notifiers = build_notifiers(config, http_client, environ=environ)

    root = validate_directory(config.path)
    logger.debug(
        "Starting check",
        extra={"path": str(root), "run_type": config.run_type.value, "limit_bytes": config.limit_bytes},
    )

    measured_bytes = probe(root, config.run_type)
    verdict = evaluate(measured_bytes, config.limit_bytes, config.run_type, root)
    print(verdict.message)

    if not verdict.violated:
        return EXIT_OK

    if notifiers:
        outcomes = asyncio.run(
            notify(config, verdict.message, http_client=http_client, notifiers=notifiers)
        )
        logger.debug(
            "Notification dispatch complete",
            extra={"outcomes": [outcome.value for outcome in outcomes]},
        )

    return EXIT_VIOLATION


def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Main entry point for the sizechecker CLI.

    Exit Codes:
        0: No violation
        1: Violation detected and the notification flow completed
        2: Usage, configuration or probe error
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_arguments(args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_USAGE)

    secrets = notifier_secrets(config)
    configure_logging(
        log_level=config.log_level,
        enable_syslog=config.syslog_enabled,
        secrets=secrets,
    )
    set_correlation_id(uuid4().hex[:12])

    try:
        exit_code = run(config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_USAGE)
    except ProbeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_USAGE)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(EXIT_USAGE)
    except Exception as exc:
        print(f"Unexpected error: {sanitize_exception(exc, secrets=secrets)}", file=sys.stderr)
        logging.getLogger(__name__).exception("Unexpected error during check")
        sys.exit(EXIT_USAGE)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
