# app/storage/factory.py
"""
Factory function for creating storage providers.
"""

import logging

from app.config import Settings, get_settings
from app.storage.base import StorageProvider

logger = logging.getLogger(__name__)

# Global singleton instance
_storage_provider: StorageProvider | None = None


def get_storage_provider(settings: Settings | None = None) -> StorageProvider:
    """
    Get or create the storage provider instance.

    Built once (at startup, from the lifespan hook) and reused by every
    request. Raises ConfigurationError when credentials are missing so a
    misconfigured process fails before serving traffic.

    Returns:
        StorageProvider instance (singleton)
    """
    global _storage_provider

    if _storage_provider is not None:
        return _storage_provider

    from app.storage.cloudinary_provider import CloudinaryStorageProvider

    _storage_provider = CloudinaryStorageProvider.from_settings(settings or get_settings())

    logger.info(f"Storage provider initialized: {_storage_provider.name}")
    return _storage_provider


def set_storage_provider(provider: StorageProvider) -> None:
    """
    Set a custom storage provider (useful for testing).
    """
    global _storage_provider
    _storage_provider = provider


def reset_storage_provider() -> None:
    """
    Reset the storage provider singleton (for testing).
    """
    global _storage_provider
    _storage_provider = None
