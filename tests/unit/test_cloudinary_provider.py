"""
Unit tests for CloudinaryStorageProvider.

The SDK is patched; these tests check what the provider passes to it and
how it interprets the results.
"""

from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import ConfigurationError
from app.storage.base import DeliveryType, ResourceType
from app.storage.cloudinary_provider import CloudinaryStorageProvider

CREDS = {"cloud_name": "demo", "api_key": "123456", "api_secret": "shh"}


@pytest.fixture
def provider():
    return CloudinaryStorageProvider(default_folder="service-documents", **CREDS)


class TestConfiguration:
    """Credential validation at construction."""

    def test_missing_credentials_listed(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CloudinaryStorageProvider(cloud_name="demo", api_key="  ", api_secret=None)

        assert "CLOUDINARY_API_KEY" in exc_info.value.message
        assert "CLOUDINARY_API_SECRET" in exc_info.value.message
        assert "CLOUDINARY_CLOUD_NAME" not in exc_info.value.message

    def test_from_settings(self):
        settings = MagicMock()
        settings.CLOUDINARY_CLOUD_NAME = "demo"
        settings.CLOUDINARY_API_KEY = "123456"
        settings.CLOUDINARY_API_SECRET = "shh"
        settings.STORAGE_FOLDER = "intake"

        provider = CloudinaryStorageProvider.from_settings(settings)

        assert provider.name == "cloudinary"


class TestDelete:
    """destroy() result interpretation."""

    def test_ok_is_deleted(self, provider):
        with patch("app.storage.cloudinary_provider.cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
            assert provider.delete("f/a", ResourceType.RAW) is True

        destroy.assert_called_once_with("f/a", resource_type="raw", invalidate=True, **CREDS)

    def test_not_found(self, provider):
        with patch("app.storage.cloudinary_provider.cloudinary.uploader.destroy", return_value={"result": "not found"}):
            assert provider.delete("f/a", ResourceType.IMAGE) is False

    def test_errors_propagate(self, provider):
        with patch("app.storage.cloudinary_provider.cloudinary.uploader.destroy", side_effect=RuntimeError("502")):
            with pytest.raises(RuntimeError):
                provider.delete("f/a", ResourceType.RAW)


class TestUpload:
    """upload() options and result mapping."""

    def test_upload(self, provider):
        sdk_result = {
            "secure_url": "https://res.cloudinary.com/demo/raw/upload/v1/service-documents/report_ab12.pdf",
            "public_id": "service-documents/report_ab12.pdf",
            "resource_type": "raw",
            "bytes": 4,
        }
        with patch("app.storage.cloudinary_provider.cloudinary.uploader.upload", return_value=sdk_result) as upload:
            result = provider.upload(b"%PDF", "report.pdf")

        _, kwargs = upload.call_args
        assert kwargs["folder"] == "service-documents"
        assert kwargs["resource_type"] == "raw"
        assert kwargs["use_filename"] is True
        assert kwargs["unique_filename"] is True
        assert result.public_id == "service-documents/report_ab12.pdf"
        assert result.resource_type == ResourceType.RAW
        assert result.size_bytes == 4


class TestUrls:
    """URL construction options."""

    def test_public_delivery_url(self, provider):
        with patch(
            "app.storage.cloudinary_provider.cloudinary.utils.cloudinary_url",
            return_value=("https://res.cloudinary.com/demo/raw/upload/f/a", {}),
        ) as build:
            url = provider.delivery_url("f/a", ResourceType.RAW)

        assert url == "https://res.cloudinary.com/demo/raw/upload/f/a"
        _, kwargs = build.call_args
        assert kwargs["type"] == "upload"
        assert kwargs["sign_url"] is False
        assert "version" not in kwargs
        assert "format" not in kwargs

    def test_signed_delivery_url(self, provider):
        with patch(
            "app.storage.cloudinary_provider.cloudinary.utils.cloudinary_url",
            return_value=("https://signed", {}),
        ) as build:
            provider.delivery_url(
                "f/a", ResourceType.IMAGE, DeliveryType.AUTHENTICATED, version=123, extension="pdf", signed=True
            )

        _, kwargs = build.call_args
        assert kwargs["resource_type"] == "image"
        assert kwargs["type"] == "authenticated"
        assert kwargs["sign_url"] is True
        assert kwargs["version"] == 123
        assert kwargs["format"] == "pdf"
        assert kwargs["secure"] is True

    def test_private_download_url(self, provider):
        with patch(
            "app.storage.cloudinary_provider.cloudinary.utils.private_download_url",
            return_value="https://api.cloudinary.com/v1_1/demo/raw/download?x=1",
        ) as build:
            url = provider.private_download_url("f/a", "pdf", ResourceType.RAW, expires_at=1700000600)

        assert url.startswith("https://api.cloudinary.com")
        build.assert_called_once_with(
            "f/a", "pdf", resource_type="raw", type="upload", expires_at=1700000600, **CREDS
        )
