"""
Sequential sync of ScanSnap business cards into a Lark Base table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cardsync.clients import LarkClient
from cardsync.core.config import SyncSettings
from cardsync.core.errors import CardSyncError
from cardsync.schemas import RemoteRow, ScanRecord
from cardsync.services.record_parser import parse_scansnap_csv
from cardsync.utils.transform import date_to_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncSummary:
    """Outcome counts for one run."""

    total: int
    succeeded: int
    failed: int


class SyncService:
    """Parse the export once, then upload and insert each card in file order."""

    def __init__(self, settings: SyncSettings, client: LarkClient) -> None:
        self._settings = settings
        self._client = client

    def sync_all(self) -> SyncSummary:
        """
        Sync every record and return the counts.

        A ``ParseFailure`` aborts the run. Failures for an individual record
        are logged and counted, and the loop moves on to the next record.
        """
        scansnap = self._settings.scansnap
        logger.info("Starting sync")
        logger.info("Reading CSV from: %s", scansnap.csv_path)

        records = parse_scansnap_csv(scansnap.csv_path, encoding=scansnap.csv_encoding)
        logger.info("Found %d records", len(records))

        succeeded = 0
        failed = 0
        for index, record in enumerate(records, start=1):
            label = record.name or "(No name)"
            logger.info("Processing record %d/%d: %s", index, len(records), label)
            try:
                record_id = self.sync_record(record)
            except (CardSyncError, OSError) as exc:
                failed += 1
                logger.error("Failed to sync %s: %s", label, exc)
                continue
            except Exception:  # pylint: disable=broad-except
                failed += 1
                logger.exception("Unexpected failure while syncing %s", label)
                continue
            succeeded += 1
            logger.info("Synced %s as %s", label, record_id)

        summary = SyncSummary(total=len(records), succeeded=succeeded, failed=failed)
        logger.info(
            "Sync complete: %d succeeded, %d failed, %d total",
            summary.succeeded,
            summary.failed,
            summary.total,
        )
        return summary

    def sync_record(self, record: ScanRecord) -> str:
        """Upload the card image if present, insert the row, return its record id."""
        file_token = self._upload_image(record)
        row = RemoteRow.from_scan(
            record,
            scan_date=date_to_timestamp(record.scan_date),
            file_token=file_token,
        )
        lark = self._settings.lark
        return self._client.add_record(lark.base_id, lark.table_id, row)

    def _upload_image(self, record: ScanRecord) -> Optional[str]:
        if not record.image_path:
            return None

        image_path = Path(self._settings.scansnap.image_dir) / record.image_path
        if not image_path.is_file():
            logger.warning("Image not found: %s", image_path)
            return None

        logger.info("Uploading image: %s", record.image_path)
        file_token = self._client.upload_image(image_path)
        logger.info("Image uploaded: %s", file_token)
        return file_token


__all__ = ["SyncService", "SyncSummary"]
