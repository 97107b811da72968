"""Public schema exports."""

from .records import RemoteRow, ScanRecord

__all__ = ["RemoteRow", "ScanRecord"]
