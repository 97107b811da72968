"""
Lark Open API client.

Covers the three calls the sync needs: tenant access token issuance, image
upload to Lark Drive and record creation in a Lark Base table.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx

from cardsync.core.config import DEFAULT_LARK_BASE_URL, LarkSettings
from cardsync.core.errors import (
    AuthFailure,
    InsertFailure,
    TransportFailure,
    UploadFailure,
)
from cardsync.schemas import RemoteRow
from cardsync.utils.http import read_envelope


@dataclass(frozen=True)
class AccessToken:
    """Tenant access token with its usable-until instant (epoch seconds)."""

    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class LarkClient:
    """Upload card images and insert rows into Lark Base."""

    TOKEN_PATH = "/auth/v3/tenant_access_token/internal"
    UPLOAD_PATH = "/drive/v1/medias/upload_all"
    RECORDS_PATH = "/bitable/v1/apps/{base_id}/tables/{table_id}/records"

    IMAGE_CONTENT_TYPE = "image/jpeg"
    _EXPIRY_MARGIN_SECONDS = 60

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        *,
        base_url: str = DEFAULT_LARK_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._app_id = app_id
        self._app_secret = app_secret
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self._token: Optional[AccessToken] = None

    @classmethod
    def from_settings(
        cls, settings: LarkSettings, *, transport: Optional[httpx.BaseTransport] = None
    ) -> "LarkClient":
        return cls(
            settings.app_id,
            settings.app_secret,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    def get_access_token(self) -> str:
        """Return a tenant access token, fetching a new one near expiry."""
        now = time.time()
        if self._token is not None and self._token.is_valid(now):
            return self._token.value

        response = self._post(
            self.TOKEN_PATH,
            json={"app_id": self._app_id, "app_secret": self._app_secret},
        )
        payload = read_envelope(response, AuthFailure)

        expire = self._dig(payload, "expire")
        try:
            lifetime = int(expire)
        except (TypeError, ValueError) as exc:
            raise TransportFailure(f"Lark returned an invalid token expire: {expire!r}") from exc

        self._token = AccessToken(
            value=self._dig(payload, "tenant_access_token"),
            expires_at=now + lifetime - self._EXPIRY_MARGIN_SECONDS,
        )
        return self._token.value

    def upload_image(self, image_path: str | Path) -> str:
        """Upload an image for use in a Base attachment field; return its file token."""
        token = self.get_access_token()

        path = Path(image_path)
        content = path.read_bytes()
        data = {
            "file_name": path.name,
            "parent_type": "bitable_image",
            "parent_node": "root",
            "size": str(len(content)),
        }
        files = {"file": (path.name, content, self.IMAGE_CONTENT_TYPE)}

        response = self._post(
            self.UPLOAD_PATH,
            data=data,
            files=files,
            headers=self._auth_headers(token),
        )
        payload = read_envelope(response, UploadFailure)
        return self._dig(payload, "data", "file_token")

    def add_record(self, base_id: str, table_id: str, row: RemoteRow) -> str:
        """Create a record in the given Base table and return its record id."""
        token = self.get_access_token()

        response = self._post(
            self.RECORDS_PATH.format(base_id=base_id, table_id=table_id),
            json=row.to_payload(),
            headers=self._auth_headers(token),
        )
        payload = read_envelope(response, InsertFailure)
        return self._dig(payload, "data", "record", "record_id")

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "LarkClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _post(self, url: str, **kwargs) -> httpx.Response:
        try:
            return self._http.post(url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportFailure(f"POST {url} failed: {exc}") from exc

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _dig(payload: dict, *keys: str) -> Any:
        value: Any = payload
        try:
            for key in keys:
                value = value[key]
        except (KeyError, TypeError) as exc:
            raise TransportFailure(
                f"Lark response is missing {'.'.join(keys)}"
            ) from exc
        return value


__all__ = ["AccessToken", "LarkClient"]
