# license_service/models/license_key.py
"""
Database model for license keys.
Each record binds a license key to the application it unlocks and to an
expiration date, unless the license is unlimited.
"""
from typing import Optional

from tortoise import fields, models

class LicenseKey(models.Model):
    """
    License key record.
    - key: the license key handed to the customer, unique
    - app_name: application the key is valid for
    - expiration_date: end of validity (UTC)
    - is_unlimited: when True the expiration date is ignored
    """
    id = fields.IntField(pk=True)
    key = fields.CharField(max_length=255, unique=True, index=True)
    app_name = fields.CharField(max_length=255)
    expiration_date = fields.DatetimeField()
    is_unlimited = fields.BooleanField(default=False)

    class Meta:
        table = "license_keys"

    @classmethod
    async def find_for_app(cls, app_name: str, key: str) -> Optional["LicenseKey"]:
        """Look up a key that belongs to the given application."""
        return await cls.get_or_none(key=key, app_name=app_name)

    def __str__(self) -> str:
        return f"{self.app_name}:{self.key}"
