"""
Schemas for service request endpoints.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# -----------------------------------------------------------------------------
# Create
# -----------------------------------------------------------------------------


class ServiceDocumentCreate(BaseModel):
    """Metadata for one already-uploaded document."""

    original_name: str = Field("", description="File name as uploaded by the requester")
    file_url: str = Field("", description="URL returned by storage at upload time")
    public_id: str = Field("", description="Storage public id (durable key)")
    mime_type: str = Field("", description="MIME type reported at upload time")
    size_bytes: int = Field(0, ge=0, description="File size in bytes")


class ServiceRequestCreate(BaseModel):
    """Request to create a service request (admin or public intake)."""

    requester_email: str = Field(..., description="Where review feedback is sent")
    title: str = Field("", max_length=200)
    description: str = Field("", max_length=2000)
    documents: list[ServiceDocumentCreate] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Read
# -----------------------------------------------------------------------------


class ServiceDocumentResponse(BaseModel):
    """One document with its review state."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    original_name: str
    file_url: str
    public_id: str
    mime_type: str
    size_bytes: int
    review: str
    suggestion: str
    review_status: str
    reviewed_at: datetime | None = None


class ServiceRequestResponse(BaseModel):
    """Service request with documents in submission order."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: str
    requester_email: str
    title: str
    description: str
    status: str
    review_sent_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None
    documents: list[ServiceDocumentResponse] = Field(default_factory=list)


class ServiceRequestListResponse(BaseModel):
    """List of service requests."""

    services: list[ServiceRequestResponse]
    total: int


# -----------------------------------------------------------------------------
# Review
# -----------------------------------------------------------------------------


class DocumentReviewEntry(BaseModel):
    """Review for one document.

    Fields are loosely typed: an entry with an unusable document id is skipped
    and an unrecognized review_status keeps the current status, instead of
    failing the whole batch.
    """

    document_id: Any = ""
    review: Any = ""
    suggestion: Any = ""
    review_status: Any = Field(None, description="pending|reviewed|needs-update; anything else keeps the current status")


class ReviewRequest(BaseModel):
    """Batch of document reviews plus an optional message for the requester."""

    document_reviews: list[DocumentReviewEntry] = Field(default_factory=list)
    email_message: str | None = ""


class ReviewResponse(BaseModel):
    """Result of a review. email_sent is advisory; the review is saved either way."""

    message: str
    updated_count: int
    email_sent: bool
    service: ServiceRequestResponse


# -----------------------------------------------------------------------------
# Delete
# -----------------------------------------------------------------------------


class DeleteResponse(BaseModel):
    """Result of deleting one service request."""

    message: str
    storage_warnings: list[str] = Field(default_factory=list)


class BulkDeleteRequest(BaseModel):
    """Service request ids to delete."""

    ids: list[str] = Field(default_factory=list)


class BulkDeleteResponse(BaseModel):
    """Result of a bulk delete."""

    message: str
    deleted_count: int
    storage_warnings: list[str] = Field(default_factory=list)
