"""
Reader for ScanSnap Home business-card CSV exports.

ScanSnap Home writes its CSV in cp932 (the Windows Shift-JIS variant) with
Japanese column headers; older or hand-edited exports may use English
headers instead. Both are accepted.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Dict, List, Sequence

from cardsync.core.errors import ParseFailure
from cardsync.schemas import ScanRecord

# Canonical field -> header names to try, in order.
HEADER_ALIASES: Dict[str, tuple[str, ...]] = {
    "name": ("名前", "name"),
    "company": ("会社名", "company"),
    "department": ("部署", "department"),
    "position": ("役職", "position"),
    "email": ("メールアドレス", "email"),
    "phone": ("電話番号", "phone"),
    "mobile": ("携帯電話", "mobile"),
    "fax": ("FAX", "fax"),
    "postal_code": ("郵便番号", "postalCode"),
    "address": ("住所", "address"),
    "url": ("URL", "url"),
    "notes": ("備考", "notes"),
    "image_path": ("画像パス", "imagePath"),
    "scan_date": ("スキャン日時", "scanDate"),
}


def _resolve_columns(header: Sequence[str]) -> Dict[str, int]:
    """Map each canonical field to the column index of its first matching header."""
    positions = {name: index for index, name in reversed(list(enumerate(header)))}
    columns: Dict[str, int] = {}
    for field, candidates in HEADER_ALIASES.items():
        for candidate in candidates:
            if candidate in positions:
                columns[field] = positions[candidate]
                break
    return columns


def _read_rows(text: str) -> List[List[str]]:
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    rows = []
    for row in reader:
        cells = [cell.strip() for cell in row]
        if len(cells) <= 1 and not any(cells):
            continue
        rows.append(cells)
    return rows


def parse_scansnap_csv(csv_path: str | Path, *, encoding: str = "cp932") -> List[ScanRecord]:
    """
    Parse a ScanSnap export into records, preserving file order.

    Raises ``ParseFailure`` when the file cannot be read or decoded, or when
    a data row does not have the same number of cells as the header.
    """
    path = Path(csv_path)
    try:
        text = path.read_bytes().decode(encoding)
        rows = _read_rows(text.removeprefix("\ufeff"))
    except (OSError, UnicodeDecodeError, LookupError, csv.Error) as exc:
        raise ParseFailure(f"Failed to parse CSV {path}: {exc}") from exc

    if not rows:
        return []

    header, data_rows = rows[0], rows[1:]
    columns = _resolve_columns(header)

    records: List[ScanRecord] = []
    # Line numbers are approximate when cells contain embedded newlines.
    for line_number, row in enumerate(data_rows, start=2):
        if len(row) != len(header):
            raise ParseFailure(
                f"Failed to parse CSV {path}: row {line_number} has {len(row)} "
                f"columns, expected {len(header)}"
            )
        records.append(
            ScanRecord(**{field: row[index] for field, index in columns.items()})
        )
    return records


__all__ = ["HEADER_ALIASES", "parse_scansnap_csv"]
