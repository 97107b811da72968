"""Expose constructed client wrappers."""

from .lark import AccessToken, LarkClient

__all__ = ["AccessToken", "LarkClient"]
