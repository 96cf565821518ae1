# license_service/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- LicenseKey: License key bound to an application, with expiration or unlimited flag
"""
from .license_key import LicenseKey
