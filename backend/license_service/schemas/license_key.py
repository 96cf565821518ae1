# license_service/schemas/license_key.py
"""
Pydantic schemas for license key management endpoints.
Defines request/response models for the license CRUD API.
"""
from __future__ import annotations
import datetime as dt
from pydantic import BaseModel, Field, constr, field_validator

from license_service.core.validity import as_utc
from license_service.models.license_key import LicenseKey

class LicenseKeyIn(BaseModel):
    """
    Request model for creating or replacing a license key.
    All mutable fields are required; an update replaces every one of them.
    """
    key: constr(strip_whitespace=True, min_length=1, max_length=255)  # License key string (unique)
    appName: constr(strip_whitespace=True, min_length=1, max_length=255)  # Application the key unlocks
    expirationDate: dt.datetime  # End of validity; naive values are taken as UTC
    isUnlimited: bool = False  # If True, expirationDate is ignored

    @field_validator("expirationDate")
    @classmethod
    def _to_utc(cls, value: dt.datetime) -> dt.datetime:
        return as_utc(value)

class LicenseKeyOut(BaseModel):
    """
    Response model for a stored license key.
    """
    id: int  # Database ID
    key: str
    appName: str
    expirationDate: str  # ISO 8601, UTC
    isUnlimited: bool

    @classmethod
    def from_model(cls, r: LicenseKey) -> "LicenseKeyOut":
        return cls(
            id=r.id,
            key=r.key,
            appName=r.app_name,
            expirationDate=as_utc(r.expiration_date).isoformat(),
            isUnlimited=r.is_unlimited,
        )

class PingOut(BaseModel):
    """
    Response model for the liveness endpoint.
    """
    ok: bool = True
    message: str = "Server is alive"
    connections: int = Field(ge=0, description="Number of open license WebSocket sessions")
