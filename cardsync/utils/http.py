"""HTTP helpers for Lark's ``{code, msg, data}`` response envelope."""

from __future__ import annotations

from typing import Any, Dict, Type

import httpx

from cardsync.core.errors import LarkAPIError, TransportFailure


def read_envelope(
    response: httpx.Response, error_cls: Type[LarkAPIError]
) -> Dict[str, Any]:
    """
    Return the decoded body of a Lark response whose ``code`` is 0.

    Lark reports most failures as an envelope with a non-zero ``code`` (often
    alongside a 4xx status); those raise ``error_cls``. Responses without an
    envelope are treated as transport problems.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict) and "code" in payload:
        code = payload.get("code")
        if code != 0:
            raise error_cls(code, str(payload.get("msg", "")))
        return payload

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise TransportFailure(str(exc)) from exc
    raise TransportFailure(
        f"Unexpected response from {response.request.url}: {response.text[:200]!r}"
    )


__all__ = ["read_envelope"]
