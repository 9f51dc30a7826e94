# app/models.py
"""
Service review database models

Tables:
- ServiceRequest: A requester's submission bundling documents for review
- ServiceDocument: One stored file plus its review metadata, ordered within its request
"""

import uuid
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class ServiceStatus(str, Enum):
    """Aggregate status of a service request, derived from its documents."""
    PENDING = "pending"
    IN_REVIEW = "in-review"
    REVIEWED = "reviewed"


class ReviewStatus(str, Enum):
    """Review state of a single document."""
    PENDING = "pending"
    REVIEWED = "reviewed"
    NEEDS_UPDATE = "needs-update"


REVIEW_STATUS_VALUES = frozenset(s.value for s in ReviewStatus)


# -----------------------------------------------------------------------------
# ServiceRequest
# -----------------------------------------------------------------------------

class ServiceRequest(Base):
    """
    A submission of one or more documents for admin review.

    Owned by exactly one admin (owner_id). The document set is fixed at
    creation; review mutates documents and the aggregate status in place.
    """
    __tablename__ = "service_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(64), nullable=False, index=True)
    requester_email = Column(String(320), nullable=False)
    title = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default=ServiceStatus.PENDING.value)
    review_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    documents = relationship(
        "ServiceDocument",
        back_populates="service_request",
        order_by="ServiceDocument.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_service_requests_requester_email", "requester_email"),
        Index("ix_service_requests_status", "status"),
        Index("ix_service_requests_created_at", "created_at"),
    )

    def document_index(self) -> dict[str, int]:
        """Map document id (string form) to its position in `documents`."""
        return {str(doc.id): i for i, doc in enumerate(self.documents)}


# -----------------------------------------------------------------------------
# ServiceDocument
# -----------------------------------------------------------------------------

class ServiceDocument(Base):
    """
    One stored file within a service request.

    public_id is the durable storage key; file_url is the URL returned at
    upload time and is only a hint for retrieval.
    """
    __tablename__ = "service_documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    service_request_id = Column(
        Uuid,
        ForeignKey("service_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)

    # Storage reference
    original_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    public_id = Column(String(512), nullable=False)
    mime_type = Column(String(255), nullable=False, default="")
    size_bytes = Column(Integer, nullable=False, default=0)

    # Review
    review = Column(Text, nullable=False, default="")
    suggestion = Column(Text, nullable=False, default="")
    review_status = Column(String(20), nullable=False, default=ReviewStatus.PENDING.value)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    service_request = relationship("ServiceRequest", back_populates="documents")
