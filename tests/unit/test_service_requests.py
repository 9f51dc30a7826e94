"""
Unit tests for service request persistence.

Covers:
- Creation validation and document ordering
- Owner scoping on every lookup
- Listing filters
"""

import uuid

import pytest

from app.exceptions import NotFoundError, ValidationError
from app.schemas.services import ServiceDocumentCreate
from app.services import service_requests

OWNER = "admin-1"


def _upload(name="report.pdf", mime="application/pdf", **overrides) -> ServiceDocumentCreate:
    values = {
        "original_name": name,
        "file_url": f"https://cdn.test/raw/upload/v1/f/{name}",
        "public_id": f"f/{name}",
        "mime_type": mime,
        "size_bytes": 10,
    }
    values.update(overrides)
    return ServiceDocumentCreate(**values)


class TestCreate:
    """create_service_request validation."""

    def test_create_orders_documents(self, db_session):
        service = service_requests.create_service_request(
            db_session,
            owner_id=OWNER,
            requester_email="  Person@Example.com ",
            documents=[_upload("b.docx", ""), _upload("a.pdf")],
            title=" Filings ",
        )

        assert service.requester_email == "person@example.com"
        assert service.title == "Filings"
        assert service.status == "pending"
        assert [d.original_name for d in service.documents] == ["b.docx", "a.pdf"]
        assert [d.position for d in service.documents] == [0, 1]
        assert all(d.review_status == "pending" for d in service.documents)

    def test_invalid_email(self, db_session):
        with pytest.raises(ValidationError, match="Valid requester email is required"):
            service_requests.create_service_request(db_session, OWNER, "not-an-email", [_upload()])

    def test_no_documents(self, db_session):
        with pytest.raises(ValidationError, match="At least one document is required"):
            service_requests.create_service_request(db_session, OWNER, "a@example.com", [])

    def test_unsupported_type(self, db_session):
        with pytest.raises(ValidationError, match="Unsupported file type: photo.png"):
            service_requests.create_service_request(
                db_session, OWNER, "a@example.com", [_upload("photo.png", "image/png")]
            )

    def test_incomplete_metadata_dropped(self, db_session):
        service = service_requests.create_service_request(
            db_session, OWNER, "a@example.com", [_upload(public_id=""), _upload("keep.txt", "text/plain")]
        )
        assert [d.original_name for d in service.documents] == ["keep.txt"]

    def test_all_metadata_incomplete(self, db_session):
        with pytest.raises(ValidationError, match="Uploaded document metadata is invalid"):
            service_requests.create_service_request(db_session, OWNER, "a@example.com", [_upload(file_url=" ")])


class TestOwnerScoping:
    """Other owners' requests look exactly like missing ones."""

    def test_get_other_owner(self, db_session, make_service):
        service = make_service(owner_id="admin-2")

        with pytest.raises(NotFoundError) as exc_info:
            service_requests.get_service_request(db_session, OWNER, str(service.id))

        assert exc_info.value.message == "Service request not found"

    def test_get_malformed_id(self, db_session):
        with pytest.raises(NotFoundError):
            service_requests.get_service_request(db_session, OWNER, "not-a-uuid")

    def test_bulk_lookup_ignores_foreign_and_malformed(self, db_session, make_service):
        mine = make_service()
        theirs = make_service(owner_id="admin-2")

        found = service_requests.get_service_requests(
            db_session, OWNER, [str(mine.id), str(theirs.id), "junk", str(uuid.uuid4())]
        )

        assert [s.id for s in found] == [mine.id]

    def test_get_document(self, make_service):
        service = make_service()
        doc = service.documents[0]

        assert service_requests.get_service_document(service, str(doc.id).upper()) is doc
        with pytest.raises(NotFoundError, match="Document not found"):
            service_requests.get_service_document(service, str(uuid.uuid4()))


class TestList:
    """Listing filters."""

    def test_status_and_search(self, db_session, make_service):
        make_service(title="Tax return", status="reviewed")
        make_service(title="Lease agreement", requester_email="tenant@example.com")
        make_service(owner_id="admin-2", title="Lease copy")

        assert len(service_requests.list_service_requests(db_session, OWNER)) == 2
        assert len(service_requests.list_service_requests(db_session, OWNER, status="all")) == 2

        reviewed = service_requests.list_service_requests(db_session, OWNER, status="reviewed")
        assert [s.title for s in reviewed] == ["Tax return"]

        leases = service_requests.list_service_requests(db_session, OWNER, search="lease")
        assert [s.title for s in leases] == ["Lease agreement"]

        by_email = service_requests.list_service_requests(db_session, OWNER, search="TENANT@")
        assert len(by_email) == 1
