"""Sync business cards from a ScanSnap Home CSV export into Lark Base.

Every option falls back to an environment variable, and a ``.env`` file is
read first without overriding variables that are already set::

    scansnap-lark-sync sync --csv ./cards.csv --images ./images \
        --app-id cli_xxx --app-secret *** --base-id bascnxxx --table-id tblxxx

The process exits 0 when at least one card was synced and 1 otherwise.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from cardsync import __version__
from cardsync.clients import LarkClient
from cardsync.core.config import _load_env_file, load_settings
from cardsync.core.errors import CardSyncError
from cardsync.core.logging import configure_logging
from cardsync.services import SyncService

EXIT_OK = 0
EXIT_FAILURE = 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scansnap-lark-sync",
        description="Sync ScanSnap business card data to Lark Base.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser(
        "sync",
        help="Sync all business cards from the ScanSnap CSV to Lark Base.",
    )
    sync_parser.add_argument(
        "-c", "--csv", help="Path to the ScanSnap CSV file (SCANSNAP_CSV_PATH)."
    )
    sync_parser.add_argument(
        "-i",
        "--images",
        help="Directory containing scanned images (SCANSNAP_IMAGE_DIR).",
    )
    sync_parser.add_argument("--app-id", help="Lark App ID (LARK_APP_ID).")
    sync_parser.add_argument("--app-secret", help="Lark App Secret (LARK_APP_SECRET).")
    sync_parser.add_argument("--base-id", help="Lark Base ID (LARK_BASE_ID).")
    sync_parser.add_argument("--table-id", help="Lark Table ID (LARK_TABLE_ID).")
    sync_parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Environment file to load before reading settings (default: .env).",
    )
    sync_parser.add_argument(
        "--log-level", help="Logging level (CARDSYNC_LOG_LEVEL, default INFO)."
    )
    return parser


def _run_sync(args: argparse.Namespace) -> int:
    _load_env_file(str(args.env_file))
    settings = load_settings(
        scansnap={"csv_path": args.csv, "image_dir": args.images},
        lark={
            "app_id": args.app_id,
            "app_secret": args.app_secret,
            "base_id": args.base_id,
            "table_id": args.table_id,
        },
        log_level=args.log_level,
    )
    configure_logging(settings.log_level)

    with LarkClient.from_settings(settings.lark) as client:
        summary = SyncService(settings, client).sync_all()

    print(
        f"Success: {summary.succeeded}  Failed: {summary.failed}  "
        f"Total: {summary.total}"
    )
    if summary.succeeded > 0:
        print(f"Successfully synced {summary.succeeded} records")
        return EXIT_OK

    print("No records were synced", file=sys.stderr)
    return EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        return _run_sync(args)
    except CardSyncError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
