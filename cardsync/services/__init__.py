"""Service layer exports."""

from .record_parser import HEADER_ALIASES, parse_scansnap_csv
from .sync import SyncService, SyncSummary

__all__ = [
    "HEADER_ALIASES",
    "SyncService",
    "SyncSummary",
    "parse_scansnap_csv",
]
