"""
Pydantic schemas for API request/response validation.
"""

from app.schemas.services import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    DeleteResponse,
    DocumentReviewEntry,
    ReviewRequest,
    ReviewResponse,
    ServiceDocumentCreate,
    ServiceDocumentResponse,
    ServiceRequestCreate,
    ServiceRequestListResponse,
    ServiceRequestResponse,
)

__all__ = [
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "DeleteResponse",
    "DocumentReviewEntry",
    "ReviewRequest",
    "ReviewResponse",
    "ServiceDocumentCreate",
    "ServiceDocumentResponse",
    "ServiceRequestCreate",
    "ServiceRequestListResponse",
    "ServiceRequestResponse",
]
