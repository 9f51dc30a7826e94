# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os
import uuid
from unittest.mock import MagicMock

import httpx
import pytest

# Set test environment before any app module reads it
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "demo")
os.environ.setdefault("CLOUDINARY_API_KEY", "123456")
os.environ.setdefault("CLOUDINARY_API_SECRET", "test-secret")
os.environ.setdefault("LOG_JSON", "false")

from app.database import Base, SessionLocal, engine, init_db  # noqa: E402
from app.models import ServiceDocument, ServiceRequest, ServiceStatus  # noqa: E402
from app.storage.base import (  # noqa: E402
    DeliveryType,
    ResourceType,
    StorageProvider,
    UploadResult,
)

ADMIN_ID = "admin-1"


class FakeStorageProvider(StorageProvider):
    """Deterministic in-memory provider; URLs encode every input so tests can assert on them."""

    def __init__(self):
        self.objects: dict[tuple[str, ResourceType], bytes] = {}
        self.delete_calls: list[tuple[str, ResourceType]] = []
        self.fail_deletes = False

    @property
    def name(self) -> str:
        return "fake"

    def upload(self, content, filename, folder=None, resource_type=ResourceType.RAW):
        public_id = f"{folder or 'service-documents'}/{filename}"
        self.objects[(public_id, resource_type)] = content
        return UploadResult(
            url=self.delivery_url(public_id, resource_type),
            public_id=public_id,
            resource_type=resource_type,
            size_bytes=len(content),
        )

    def delete(self, public_id, resource_type):
        self.delete_calls.append((public_id, resource_type))
        if self.fail_deletes:
            raise RuntimeError("storage unavailable")
        return self.objects.pop((public_id, resource_type), None) is not None

    def delivery_url(
        self,
        public_id,
        resource_type,
        delivery_type=DeliveryType.UPLOAD,
        *,
        version=None,
        extension=None,
        signed=False,
    ):
        parts = ["https://cdn.test", resource_type.value, delivery_type.value]
        if signed:
            parts.append("s--sig--")
        if version:
            parts.append(f"v{version}")
        path = "/".join(parts) + f"/{public_id}"
        return f"{path}.{extension}" if extension else path

    def private_download_url(self, public_id, extension, resource_type, expires_at):
        return (
            f"https://api.test/{resource_type.value}/download"
            f"?public_id={public_id}&format={extension}&expires_at={expires_at}"
        )


@pytest.fixture
def fake_provider():
    return FakeStorageProvider()


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory SQLite connection."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_service(db_session):
    """Persist a service request with the given documents (dicts of column values)."""

    def _make(documents=None, owner_id=ADMIN_ID, **fields):
        service = ServiceRequest(
            id=uuid.uuid4(),
            owner_id=owner_id,
            requester_email=fields.pop("requester_email", "requester@example.com"),
            title=fields.pop("title", "Quarterly filings"),
            description=fields.pop("description", ""),
            status=fields.pop("status", ServiceStatus.PENDING.value),
            **fields,
        )
        if documents is None:
            documents = [
                {
                    "original_name": "report.pdf",
                    "file_url": "https://cdn.test/raw/upload/v123/service-documents/report.pdf",
                    "public_id": "service-documents/report",
                    "mime_type": "application/pdf",
                }
            ]
        for position, doc in enumerate(documents):
            service.documents.append(
                ServiceDocument(
                    id=uuid.uuid4(),
                    position=position,
                    size_bytes=doc.pop("size_bytes", 1024),
                    **doc,
                )
            )
        db_session.add(service)
        db_session.commit()
        db_session.refresh(service)
        return service

    return _make


@pytest.fixture
def notifier():
    """Stand-in for EmailService that records review notifications."""
    mock = MagicMock()
    mock.send_service_review.return_value = True
    return mock


@pytest.fixture
def upstream_routes():
    """URL -> httpx.Response (or exception) served by the mock upstream transport."""
    return {}


@pytest.fixture
def upstream_client(upstream_routes):
    """AsyncClient whose transport answers from `upstream_routes`, 404 otherwise."""
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        requested.append(url)
        outcome = upstream_routes.get(url)
        if outcome is None:
            return httpx.Response(404)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client.requested = requested
    return client


@pytest.fixture
def client(db_session, fake_provider, notifier, upstream_client):
    """TestClient with DB, storage, email and upstream HTTP replaced."""
    from fastapi.testclient import TestClient

    from app.database import get_db
    from app.main import app
    from app.routers.services import get_email_service, get_http_client
    from app.storage.factory import reset_storage_provider, set_storage_provider

    set_storage_provider(fake_provider)
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_email_service] = lambda: notifier
    app.dependency_overrides[get_http_client] = lambda: upstream_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    reset_storage_provider()
