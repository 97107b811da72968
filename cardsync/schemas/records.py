"""
Pydantic models for business-card records on both sides of the sync.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

# Lark phone columns reject empty strings, so these are sent only when set.
_OPTIONAL_PHONE_FIELDS = ("phone", "mobile", "fax")

class ScanRecord(BaseModel):
    """One row of a ScanSnap Home business-card export."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    company: str = ""
    department: str = ""
    position: str = ""
    email: str = ""
    phone: str = ""
    mobile: str = ""
    fax: str = ""
    postal_code: str = ""
    address: str = ""
    url: str = ""
    notes: str = ""
    image_path: str = Field(
        "", description="Image location relative to the configured image directory."
    )
    scan_date: str = Field("", description="Scan timestamp as exported, free text.")


class RemoteRow(BaseModel):
    """Row inserted into the Lark Base table for a single card."""

    name: str = ""
    company: str = ""
    department: str = ""
    position: str = ""
    email: str = ""
    phone: str = ""
    mobile: str = ""
    fax: str = ""
    postal_code: str = ""
    address: str = ""
    url: str = ""
    notes: str = ""
    image: List[str] = Field(
        default_factory=list, description="Lark Drive file tokens, at most one."
    )
    scan_date: int = Field(..., description="Scan instant in epoch milliseconds.")

    @classmethod
    def from_scan(
        cls, record: ScanRecord, *, scan_date: int, file_token: str | None = None
    ) -> "RemoteRow":
        """Build the outbound row from a parsed record and its resolved values."""
        return cls(
            **record.model_dump(exclude={"image_path", "scan_date"}),
            image=[file_token] if file_token is not None else [],
            scan_date=scan_date,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Render the JSON body expected by the record creation endpoint."""
        fields: Dict[str, Any] = {
            "name": self.name,
            "company": self.company,
            "department": self.department,
            "position": self.position,
            "email": self.email,
            "phone": self.phone,
            "mobile": self.mobile,
            "fax": self.fax,
            "postalCode": self.postal_code,
            "address": self.address,
            "url": self.url,
            "notes": self.notes,
            "image": [{"file_token": token} for token in self.image],
            "scanDate": self.scan_date,
        }
        for key in _OPTIONAL_PHONE_FIELDS:
            if not fields[key]:
                del fields[key]
        return {"fields": fields}


__all__ = ["RemoteRow", "ScanRecord"]
