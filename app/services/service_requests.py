# app/services/service_requests.py
"""
Persistence operations for service requests.

Every lookup is scoped to an owner: a request that exists but belongs to a
different admin is reported exactly like a missing one.
"""

import logging
import re
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.exceptions import NotFoundError, ValidationError
from app.models import ServiceDocument, ServiceRequest, ServiceStatus
from app.schemas.services import ServiceDocumentCreate

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ALLOWED_MIME_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})
ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt", ".ppt", ".pptx", ".xls", ".xlsx")


def is_valid_email(email: str | None) -> bool:
    return bool(_EMAIL_RE.match((email or "").strip()))


def is_allowed_document(original_name: str, mime_type: str) -> bool:
    """Office/PDF/text documents, accepted by MIME type or by file extension."""
    if (mime_type or "").strip().lower() in ALLOWED_MIME_TYPES:
        return True
    return (original_name or "").strip().lower().endswith(ALLOWED_EXTENSIONS)


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None


def normalize_document_id(document_id: str) -> str:
    """Canonical string form used as the key of ServiceRequest.document_index()."""
    parsed = _parse_uuid(document_id)
    return str(parsed) if parsed is not None else str(document_id or "")


# -----------------------------------------------------------------------------
# Create
# -----------------------------------------------------------------------------


def create_service_request(
    db: Session,
    owner_id: str,
    requester_email: str,
    documents: list[ServiceDocumentCreate],
    title: str = "",
    description: str = "",
) -> ServiceRequest:
    """
    Create a service request with its full document set.

    Documents missing a name, URL or public id are dropped; if none remain
    the request is rejected.

    Raises:
        ValidationError: invalid email, no documents, or unsupported type
    """
    if not is_valid_email(requester_email):
        raise ValidationError("Valid requester email is required", {"requester_email": "invalid"})

    if not documents:
        raise ValidationError("At least one document is required")

    cleaned = []
    for doc in documents:
        original_name = doc.original_name.strip()
        file_url = doc.file_url.strip()
        public_id = doc.public_id.strip()
        if not (original_name and file_url and public_id):
            continue
        mime_type = doc.mime_type.strip()
        if not is_allowed_document(original_name, mime_type):
            raise ValidationError(f"Unsupported file type: {original_name}")
        cleaned.append((original_name, file_url, public_id, mime_type, doc.size_bytes))

    if not cleaned:
        raise ValidationError("Uploaded document metadata is invalid")

    service = ServiceRequest(
        id=uuid.uuid4(),
        owner_id=owner_id,
        requester_email=requester_email.strip().lower(),
        title=title.strip(),
        description=description.strip(),
        status=ServiceStatus.PENDING.value,
    )
    for position, (original_name, file_url, public_id, mime_type, size_bytes) in enumerate(cleaned):
        service.documents.append(
            ServiceDocument(
                id=uuid.uuid4(),
                position=position,
                original_name=original_name,
                file_url=file_url,
                public_id=public_id,
                mime_type=mime_type,
                size_bytes=size_bytes,
            )
        )

    db.add(service)
    db.commit()
    db.refresh(service)

    logger.info(
        f"[SERVICES] Created service request {service.id} with {len(cleaned)} document(s)",
        extra={"event": "service_created", "service_id": str(service.id)},
    )
    return service


# -----------------------------------------------------------------------------
# Read
# -----------------------------------------------------------------------------


def list_service_requests(
    db: Session,
    owner_id: str,
    status: str | None = None,
    search: str | None = None,
) -> list[ServiceRequest]:
    """Owner's service requests, newest first."""
    query = (
        db.query(ServiceRequest)
        .options(selectinload(ServiceRequest.documents))
        .filter(ServiceRequest.owner_id == owner_id)
    )

    if status and status != "all":
        query = query.filter(ServiceRequest.status == status)

    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                ServiceRequest.requester_email.ilike(pattern),
                ServiceRequest.title.ilike(pattern),
                ServiceRequest.description.ilike(pattern),
            )
        )

    return query.order_by(ServiceRequest.created_at.desc()).all()


def get_service_request(db: Session, owner_id: str, service_id: str) -> ServiceRequest:
    """
    Raises:
        NotFoundError: no request with this id for this owner
    """
    parsed = _parse_uuid(service_id)
    service = None
    if parsed is not None:
        service = (
            db.query(ServiceRequest)
            .options(selectinload(ServiceRequest.documents))
            .filter(ServiceRequest.id == parsed, ServiceRequest.owner_id == owner_id)
            .first()
        )
    if service is None:
        raise NotFoundError("Service request", service_id)
    return service


def get_service_requests(db: Session, owner_id: str, service_ids: list[str]) -> list[ServiceRequest]:
    """Owner's requests among `service_ids`; unknown or malformed ids are ignored."""
    parsed = [p for p in (_parse_uuid(s) for s in service_ids) if p is not None]
    if not parsed:
        return []
    return (
        db.query(ServiceRequest)
        .options(selectinload(ServiceRequest.documents))
        .filter(ServiceRequest.id.in_(parsed), ServiceRequest.owner_id == owner_id)
        .all()
    )


def get_service_document(service: ServiceRequest, document_id: str) -> ServiceDocument:
    """
    Raises:
        NotFoundError: the request has no document with this id
    """
    index = service.document_index().get(normalize_document_id(document_id))
    if index is None:
        raise NotFoundError("Document", document_id)
    return service.documents[index]


# -----------------------------------------------------------------------------
# Delete
# -----------------------------------------------------------------------------


def delete_service_requests(db: Session, services: list[ServiceRequest]) -> int:
    """Delete already-loaded requests (documents cascade). Returns the count."""
    deleted_ids = [str(service.id) for service in services]
    for service in services:
        db.delete(service)
    db.commit()

    for service_id in deleted_ids:
        logger.info(
            f"[SERVICES] Deleted service request {service_id}",
            extra={"event": "service_deleted", "service_id": service_id},
        )
    return len(deleted_ids)


def delete_service_request(db: Session, service: ServiceRequest) -> None:
    """Delete one already-loaded request (documents cascade)."""
    delete_service_requests(db, [service])
