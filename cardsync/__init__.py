"""Sync ScanSnap business-card exports into a Lark Base table."""

__version__ = "1.0.0"
