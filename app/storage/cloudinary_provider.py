# app/storage/cloudinary_provider.py
"""
Cloudinary storage provider implementation using the cloudinary SDK.

Credentials are passed explicitly on every SDK call instead of through
cloudinary.config(), so the provider carries its own configuration and
nothing depends on process-global SDK state.
"""

import io
import logging

import cloudinary.uploader
import cloudinary.utils

from app.config import Settings
from app.exceptions import ConfigurationError
from app.logging_config import log_storage_operation
from app.storage.base import (
    DeliveryType,
    ResourceType,
    StorageProvider,
    UploadResult,
)

logger = logging.getLogger(__name__)


class CloudinaryStorageProvider(StorageProvider):
    """
    Cloudinary storage provider.

    Configuration (from Settings):
    - CLOUDINARY_CLOUD_NAME
    - CLOUDINARY_API_KEY
    - CLOUDINARY_API_SECRET
    - STORAGE_FOLDER: default upload folder
    """

    def __init__(
        self,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        default_folder: str = "service-documents",
    ):
        cloud_name = (cloud_name or "").strip()
        api_key = (api_key or "").strip()
        api_secret = (api_secret or "").strip()

        missing = [
            name
            for name, value in (
                ("CLOUDINARY_CLOUD_NAME", cloud_name),
                ("CLOUDINARY_API_KEY", api_key),
                ("CLOUDINARY_API_SECRET", api_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Cloudinary credentials are missing or empty: {', '.join(missing)}")

        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self._default_folder = default_folder

        logger.info(f"Cloudinary storage initialized: cloud={cloud_name}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryStorageProvider":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            default_folder=settings.STORAGE_FOLDER,
        )

    @property
    def name(self) -> str:
        return "cloudinary"

    def upload(
        self,
        content: bytes,
        filename: str,
        folder: str | None = None,
        resource_type: ResourceType = ResourceType.RAW,
    ) -> UploadResult:
        """Upload bytes with a unique name derived from the original filename."""
        with log_storage_operation("upload", filename) as metrics:
            result = cloudinary.uploader.upload(
                io.BytesIO(content),
                filename=filename,
                folder=folder or self._default_folder,
                resource_type=resource_type.value,
                use_filename=True,
                unique_filename=True,
                **self._credentials,
            )
            metrics["size_bytes"] = len(content)

        return UploadResult(
            url=result["secure_url"],
            public_id=result["public_id"],
            resource_type=ResourceType(result.get("resource_type", resource_type.value)),
            size_bytes=int(result.get("bytes") or len(content)),
        )

    def delete(self, public_id: str, resource_type: ResourceType) -> bool:
        """Destroy an object. Returns False when Cloudinary reports it absent."""
        with log_storage_operation("delete", public_id):
            result = cloudinary.uploader.destroy(
                public_id,
                resource_type=resource_type.value,
                invalidate=True,
                **self._credentials,
            )

        outcome = (result or {}).get("result")
        if outcome == "ok":
            logger.debug(f"Deleted from Cloudinary: {public_id} ({resource_type.value})")
            return True
        if outcome != "not found":
            logger.warning(f"Unexpected Cloudinary destroy result for {public_id}: {outcome}")
        return False

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
        options = {
            "secure": True,
            "resource_type": resource_type.value,
            "type": delivery_type.value,
            "sign_url": signed,
            **self._credentials,
        }
        if version:
            options["version"] = version
        if extension:
            options["format"] = extension

        url, _ = cloudinary.utils.cloudinary_url(public_id, **options)
        return url or ""

    def private_download_url(
        self,
        public_id: str,
        extension: str,
        resource_type: ResourceType,
        expires_at: int,
    ) -> str:
        return cloudinary.utils.private_download_url(
            public_id,
            extension,
            resource_type=resource_type.value,
            type=DeliveryType.UPLOAD.value,
            expires_at=expires_at,
            **self._credentials,
        )
