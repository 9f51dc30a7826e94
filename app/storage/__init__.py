# app/storage/__init__.py
"""
Storage provider abstraction for service documents.

Document bytes are stored in object storage (Cloudinary), not Postgres.
This module provides upload/delete and delivery URL primitives.
"""

from app.storage.base import (
    DELIVERY_TYPE_ORDER,
    RESOURCE_TYPE_ORDER,
    DeliveryType,
    ResourceType,
    StorageProvider,
    UploadResult,
)
from app.storage.cloudinary_provider import CloudinaryStorageProvider
from app.storage.factory import (
    get_storage_provider,
    reset_storage_provider,
    set_storage_provider,
)

__all__ = [
    "StorageProvider",
    "UploadResult",
    "ResourceType",
    "DeliveryType",
    "RESOURCE_TYPE_ORDER",
    "DELIVERY_TYPE_ORDER",
    "CloudinaryStorageProvider",
    "get_storage_provider",
    "set_storage_provider",
    "reset_storage_provider",
]
