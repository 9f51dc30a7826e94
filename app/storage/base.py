# app/storage/base.py
"""
Storage provider interface for service documents.

Design principles:
- Documents live in object storage; Postgres stores only metadata + references
- public_id is the durable key; delivery URLs are derived from it
- Objects may have been stored under different resource types and become
  visibility-restricted later, so URL construction is exposed as primitives
  (public, signed, time-limited) rather than a single "get URL" call
- URL construction is pure computation and never performs network I/O
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ResourceType(str, Enum):
    """Provider-side content classification an object was stored under."""
    RAW = "raw"
    IMAGE = "image"


class DeliveryType(str, Enum):
    """Visibility/access mode used to deliver an object."""
    UPLOAD = "upload"  # Public
    AUTHENTICATED = "authenticated"
    PRIVATE = "private"


# Order in which cleanup and retrieval try resource types
RESOURCE_TYPE_ORDER = (ResourceType.RAW, ResourceType.IMAGE)
DELIVERY_TYPE_ORDER = (DeliveryType.UPLOAD, DeliveryType.AUTHENTICATED, DeliveryType.PRIVATE)


@dataclass
class UploadResult:
    """Result of storing one object."""
    url: str
    public_id: str
    resource_type: ResourceType
    size_bytes: int = 0


class StorageProvider(ABC):
    """
    Abstract interface for document object storage.

    Implementations must handle:
    - Upload under a folder and resource type
    - Idempotent delete (deleting an absent object returns False, not an error)
    - Delivery URL construction for every resource/delivery type combination
    - Time-limited private download URLs
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'cloudinary')."""
        pass

    @abstractmethod
    def upload(
        self,
        content: bytes,
        filename: str,
        folder: str | None = None,
        resource_type: ResourceType = ResourceType.RAW,
    ) -> UploadResult:
        """
        Upload content to storage.

        Args:
            content: Raw file bytes
            filename: Original file name (used to derive the stored name)
            folder: Folder to store under (provider default if None)
            resource_type: Classification to store the object under

        Returns:
            UploadResult with canonical URL and public id
        """
        pass

    @abstractmethod
    def delete(self, public_id: str, resource_type: ResourceType) -> bool:
        """
        Delete object from storage.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def delivery_url(
        self,
        public_id: str,
        resource_type: ResourceType,
        delivery_type: DeliveryType = DeliveryType.UPLOAD,
        *,
        version: int | None = None,
        extension: str | None = None,
        signed: bool = False,
    ) -> str:
        """Build a delivery URL for an object. Pure, no network I/O."""
        pass

    @abstractmethod
    def private_download_url(
        self,
        public_id: str,
        extension: str,
        resource_type: ResourceType,
        expires_at: int,
    ) -> str:
        """
        Build a time-limited download URL.

        Args:
            expires_at: Unix timestamp after which the URL stops working
        """
        pass
