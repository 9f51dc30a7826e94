"""Tests for Settings validation."""

import pytest
from pydantic import ValidationError

from app.config import Settings

BASE = {"DATABASE_URL": "sqlite:///:memory:", "ADMIN_API_KEY": "k"}


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None, **BASE)

        assert settings.STREAM_CHUNK_SIZE == 64 * 1024
        assert settings.PRIVATE_DOWNLOAD_TTL_SECONDS == 600
        assert settings.STORAGE_FOLDER == "service-documents"

    def test_postgres_url_rewritten(self):
        settings = Settings(_env_file=None, DATABASE_URL="postgresql://u:p@db/app", ADMIN_API_KEY="k")
        assert settings.DATABASE_URL == "postgresql+psycopg2://u:p@db/app"

    def test_blank_credentials_are_unset(self, monkeypatch):
        for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(
            _env_file=None,
            CLOUDINARY_CLOUD_NAME="demo",
            CLOUDINARY_API_KEY="   ",
            CLOUDINARY_API_SECRET="secret",
            **BASE,
        )

        assert settings.CLOUDINARY_API_KEY is None

    def test_cors_origins_parsed(self):
        settings = Settings(_env_file=None, CORS_ORIGINS="https://a.test, ,https://b.test", **BASE)
        assert settings.cors_origins == ["https://a.test", "https://b.test"]

    def test_chunk_size_lower_bound(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, STREAM_CHUNK_SIZE=16, **BASE)
