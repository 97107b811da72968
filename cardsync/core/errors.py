"""
Exception hierarchy for the card sync pipeline.

``ConfigError`` and ``ParseFailure`` are fatal for a run. Everything else is
raised while handling a single record and is recovered by the sync service.
"""

from __future__ import annotations


class CardSyncError(Exception):
    """Base class for all errors raised by the sync pipeline."""


class ConfigError(CardSyncError):
    """Raised when a required setting is missing or invalid."""


class ParseFailure(CardSyncError):
    """Raised when the ScanSnap CSV cannot be read, decoded or parsed."""


class InvalidDateFormat(CardSyncError):
    """Raised when a scan date cannot be converted to a timestamp."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid date format: {value}")
        self.value = value


class LarkAPIError(CardSyncError):
    """Raised when Lark answers with a non-zero ``code`` envelope."""

    action = "call Lark API"

    def __init__(self, code: int, msg: str) -> None:
        super().__init__(f"Failed to {self.action}: {msg} (code {code})")
        self.code = code
        self.msg = msg


class AuthFailure(LarkAPIError):
    action = "get access token"


class UploadFailure(LarkAPIError):
    action = "upload image"


class InsertFailure(LarkAPIError):
    action = "add record"


class TransportFailure(CardSyncError):
    """Raised when the HTTP round-trip itself fails."""


__all__ = [
    "AuthFailure",
    "CardSyncError",
    "ConfigError",
    "InsertFailure",
    "InvalidDateFormat",
    "LarkAPIError",
    "ParseFailure",
    "TransportFailure",
    "UploadFailure",
]
