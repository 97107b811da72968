"""Field-level conversions applied to ScanSnap values before upload."""

from __future__ import annotations

import re
import time
from datetime import datetime

from dateutil import parser as dateparser

from cardsync.core.errors import InvalidDateFormat

_AMOUNT_NOISE = re.compile(r"[¥,]")
_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_PHONE_SEPARATORS = re.compile(r"[-\s]")
# Japanese domestic numbers: leading 0 plus 9 or 10 digits.
_PHONE_PATTERN = re.compile(r"0[0-9]{9,10}")
_DATE_GLYPHS = str.maketrans({"年": "-", "月": "-", "日": " "})
# Two fill-in dates that differ in every date part; a value parsed to the
# same day under both defaults spelled out its own year, month and day.
_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2001, 2, 2)


def clean_amount(amount: str) -> str:
    """Strip yen signs and thousands separators, e.g. ``"¥1,000"`` -> ``"1000"``."""
    return _AMOUNT_NOISE.sub("", amount).strip()


def date_to_timestamp(date_str: str) -> int:
    """
    Convert a scan date to epoch milliseconds.

    Accepts ISO dates, slash-separated dates and Japanese ``2024年1月15日``
    forms, with or without a time. An empty value means "now". Naive values
    are read as local time, and a missing time of day means midnight.

    Year, month and day must all be present. Partial values such as ``"15"``,
    ``"10:30"`` or ``"2024年1月"`` raise ``InvalidDateFormat`` instead of being
    completed from today's date.
    """
    if not date_str or not date_str.strip():
        return int(time.time() * 1000)

    normalized = date_str.translate(_DATE_GLYPHS).strip()
    try:
        parsed = dateparser.parse(normalized, default=_FILL_A)
        if _date_part(parsed) != _date_part(dateparser.parse(normalized, default=_FILL_B)):
            raise ValueError(f"incomplete date: {normalized!r}")
        return int(parsed.timestamp() * 1000)
    except (ValueError, OverflowError, OSError) as exc:
        raise InvalidDateFormat(date_str) from exc


def _date_part(value: datetime) -> tuple[int, int, int]:
    return value.year, value.month, value.day


def is_valid_email(email: str) -> bool:
    """Loose structural check: ``local@domain.tld`` with no whitespace."""
    if not email:
        return False
    return _EMAIL_PATTERN.fullmatch(email) is not None


def is_valid_phone(phone: str) -> bool:
    """Domestic number check: hyphens and spaces ignored, then 0 plus 9 or 10 digits."""
    if not phone:
        return False
    cleaned = _PHONE_SEPARATORS.sub("", phone)
    return _PHONE_PATTERN.fullmatch(cleaned) is not None


__all__ = ["clean_amount", "date_to_timestamp", "is_valid_email", "is_valid_phone"]
