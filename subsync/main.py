#!/usr/bin/env python3
"""
Subscription Sync - Main Entry Point

Fetches a subscription (plain or base64), deduplicates it, saves it under
the output directory and copies it to the clipboard when it changed.

Usage:
    python -m subsync.main -l https://example.com/sub          # Sync a link
    python -m subsync.main -l configs.txt                      # Sync a local file
    python -m subsync.main -l URL -p http://127.0.0.1:10809    # Through a proxy
    python -m subsync.main -l URL --dry-run                    # Preview only

Environment Variables (all optional):
    SUBSYNC_PROXY           - Proxy URL
    SUBSYNC_USER_AGENT      - chrome | firefox | edge | curl
    SUBSYNC_OUTPUT_DIR      - Artifact directory (default: output)
    SUBSYNC_CONNECT_TIMEOUT - Connect timeout in seconds (default: 10)
    SUBSYNC_READ_TIMEOUT    - Read timeout in seconds (default: 15)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from config.settings import USER_AGENTS, ConfigurationError, Settings, load_settings
from subsync.notify.clipboard import ClipboardNotifier, NullNotifier
from subsync.source.client import AcquisitionError, SourceClient
from subsync.source.models import Origin
from subsync.storage.state_store import StateStore, StateStoreError
from subsync.sync.engine import EmptySourceError, SyncEngine, SyncReport


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="subsync",
        description="Fetch, decode, deduplicate, and copy subscription links",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    subsync -l https://example.com/sub              # Base64 or plain link
    subsync -l configs.txt                          # Local text file
    subsync -l URL -p http://127.0.0.1:10809        # Through a proxy
    subsync -l URL --ua curl --no-clipboard         # Custom UA, no clipboard
        """,
    )

    parser.add_argument(
        "-l", "--link",
        help="Subscription link (base64/plain) or local text file",
    )

    parser.add_argument(
        "-p", "--proxy",
        help="Optional HTTP/HTTPS/SOCKS proxy (e.g., http://127.0.0.1:10809)",
    )

    parser.add_argument(
        "--ua",
        choices=sorted(USER_AGENTS),
        help="User-Agent to send (default: chrome)",
    )

    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        help="Directory for saved subscriptions (default: output)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would change without writing anything",
    )

    parser.add_argument(
        "--allow-empty",
        action="store_true",
        help="Allow an empty source to wipe a saved subscription",
    )

    parser.add_argument(
        "--no-clipboard",
        action="store_true",
        help="Do not copy the updated subscription to the clipboard",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    parser.add_argument(
        "--env",
        type=Path,
        help="Path to .env file (default: .env in current directory)",
    )

    return parser


def report_result(report: SyncReport, dry_run: bool) -> None:
    """
    Log the human-readable outcome of a run.

    Args:
        report: Result of SyncEngine.sync
        dry_run: Whether the run was a dry run
    """
    logger = logging.getLogger(__name__)

    if report.origin is Origin.LOCAL_FILE:
        logger.info(f"Read configs from local file: {report.source}")
    elif report.encoded:
        logger.info("Base64 subscription detected from URL")
    else:
        logger.info("Plain text subscription detected from URL")

    if report.up_to_date:
        logger.info("No updates detected, file is already up to date.")
        return

    if dry_run:
        logger.info("Changes detected (dry run, nothing saved)")
    else:
        logger.info("Subscription updated!")

    logger.info("=" * 50)
    logger.info(f"Added:     {report.diff.added}")
    logger.info(f"Unchanged: {report.diff.unchanged}")
    logger.info(f"Removed:   {report.diff.removed}")
    logger.info("=" * 50)

    if report.persisted:
        if report.notified:
            logger.info("Copied to clipboard")
        logger.info(f"Saved to {report.artifact_path}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)

    if not args.link:
        logger.error("No subscription link or file provided!")
        parser.print_help()
        return 1

    try:
        settings: Settings = load_settings(
            env_file=args.env,
            overrides={
                "proxy": args.proxy,
                "user_agent": args.ua,
                "output_dir": args.output_dir,
                "dry_run": args.dry_run or None,
                "allow_empty": args.allow_empty or None,
                "clipboard": False if args.no_clipboard else None,
            },
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if not args.verbose:
        logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))

    state_store = StateStore(settings.storage.output_dir, settings.storage.extension)
    notifier = ClipboardNotifier() if settings.sync.clipboard else NullNotifier()

    source_client = None

    try:
        source_client = SourceClient(
            user_agent=settings.fetch.user_agent_string,
            proxy=settings.fetch.proxy,
            timeout=settings.fetch.timeout,
            max_retries=settings.fetch.max_retries,
        )

        engine = SyncEngine(
            source_client=source_client,
            state_store=state_store,
            notifier=notifier,
            dry_run=settings.sync.dry_run,
            allow_empty=settings.sync.allow_empty,
            decode_local_files=settings.sync.decode_local_files,
        )

        report = engine.sync(args.link)
        report_result(report, dry_run=settings.sync.dry_run)
        return 0

    except AcquisitionError as e:
        logger.error(str(e))
        return 1
    except EmptySourceError as e:
        logger.error(str(e))
        return 1
    except StateStoreError as e:
        logger.error(f"Failed to write output file: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Sync interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
    finally:
        if source_client:
            source_client.close()


if __name__ == "__main__":
    sys.exit(main())
