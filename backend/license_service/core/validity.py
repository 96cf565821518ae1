# license_service/core/validity.py
"""
License validity rules shared by the WebSocket protocol and the REST API.
"""
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from license_service.models.license_key import LicenseKey


class LicenseStatus(str, Enum):
    """Outcome of a validity check; values are the literal protocol replies."""
    VALID = "VALID_KEY"
    EXPIRED = "EXPIRED_KEY"
    INVALID = "INVALID_KEY"


def utc_now() -> dt.datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        dt.datetime: Current UTC datetime with timezone awareness
    """
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def evaluate(record: Optional[LicenseKey], now: Optional[dt.datetime] = None) -> LicenseStatus:
    """
    Decide whether a license record is currently valid.

    Args:
        record: The matching record, or None when nothing matched
        now: Reference time (defaults to current UTC time)

    Returns:
        LicenseStatus: INVALID when there is no record, VALID when the record is
        unlimited or expires at/after `now`, EXPIRED otherwise.
    """
    if record is None:
        return LicenseStatus.INVALID
    if record.is_unlimited:
        return LicenseStatus.VALID
    now = as_utc(now or utc_now())
    if as_utc(record.expiration_date) < now:
        return LicenseStatus.EXPIRED
    return LicenseStatus.VALID
