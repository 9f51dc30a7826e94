# app/routers/services.py
"""
Service request endpoints (admin).

GET    /v1/services                                        - List own service requests
POST   /v1/services                                        - Create a service request
POST   /v1/services/bulk-delete                            - Delete many + storage cleanup
GET    /v1/services/{id}                                   - Get one service request
GET    /v1/services/{id}/documents/{document_id}/file      - Stream document inline
GET    /v1/services/{id}/documents/{document_id}/download  - Stream document as attachment
POST   /v1/services/{id}/review                            - Save reviews and notify requester
DELETE /v1/services/{id}                                   - Delete + storage cleanup
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.auth import AdminIdentity, get_current_admin
from app.config import Settings, get_settings
from app.database import get_db
from app.exceptions import ConfigurationError, ValidationError
from app.schemas.services import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    DeleteResponse,
    ReviewRequest,
    ReviewResponse,
    ServiceRequestCreate,
    ServiceRequestListResponse,
    ServiceRequestResponse,
)
from app.services import service_requests
from app.services.cleanup import CleanupCoordinator
from app.services.document_fetcher import DocumentFetcher
from app.services.email_service import EmailService
from app.services.review_workflow import ReviewWorkflow
from app.services.storage_locator import StorageLocator
from app.services.streaming_proxy import Disposition, DocumentStreamingResponse, serve
from app.storage.base import StorageProvider
from app.storage.factory import get_storage_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/services", tags=["services"])


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


def get_storage(settings: Settings = Depends(get_settings)) -> StorageProvider:
    """Storage provider; a misconfigured provider is a hard 500."""
    return get_storage_provider(settings)


def get_optional_storage(settings: Settings = Depends(get_settings)) -> StorageProvider | None:
    """Storage provider for best-effort work that must proceed without it."""
    try:
        return get_storage_provider(settings)
    except ConfigurationError as e:
        logger.error(f"[SERVICES] Storage unavailable for cleanup: {e}")
        return None


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream client created in the app lifespan."""
    return request.app.state.http_client


def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService(settings)


def get_review_workflow(notifier: EmailService = Depends(get_email_service)) -> ReviewWorkflow:
    return ReviewWorkflow(notifier)


def get_cleanup_coordinator(
    provider: StorageProvider | None = Depends(get_optional_storage),
    settings: Settings = Depends(get_settings),
) -> CleanupCoordinator:
    return CleanupCoordinator(provider, max_workers=settings.CLEANUP_MAX_WORKERS)


# -----------------------------------------------------------------------------
# CRUD
# -----------------------------------------------------------------------------


@router.get("", response_model=ServiceRequestListResponse)
def list_services(
    status: str = Query("all", description="all|pending|in-review|reviewed"),
    search: str = Query("", description="Matches requester email, title or description"),
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> ServiceRequestListResponse:
    """List the admin's service requests, newest first."""
    services = service_requests.list_service_requests(db, admin.id, status=status, search=search)
    return ServiceRequestListResponse(
        services=[ServiceRequestResponse.model_validate(s) for s in services],
        total=len(services),
    )


@router.post("", response_model=ServiceRequestResponse, status_code=201)
def create_service(
    request: ServiceRequestCreate,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> ServiceRequestResponse:
    """Create a service request from already-uploaded document metadata."""
    service = service_requests.create_service_request(
        db,
        owner_id=admin.id,
        requester_email=request.requester_email,
        documents=request.documents,
        title=request.title,
        description=request.description,
    )
    return ServiceRequestResponse.model_validate(service)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_services(
    request: BulkDeleteRequest,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
    cleanup: CleanupCoordinator = Depends(get_cleanup_coordinator),
) -> BulkDeleteResponse:
    """Delete several service requests; storage cleanup is best-effort."""
    if not request.ids:
        raise ValidationError("Please provide service request IDs")

    services = service_requests.get_service_requests(db, admin.id, request.ids)
    report = cleanup.cleanup(services)
    deleted_count = service_requests.delete_service_requests(db, services)

    return BulkDeleteResponse(
        message=f"{deleted_count} service request(s) deleted successfully",
        deleted_count=deleted_count,
        storage_warnings=report.warnings,
    )


@router.get("/{service_id}", response_model=ServiceRequestResponse)
def get_service(
    service_id: str,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> ServiceRequestResponse:
    """Get one service request with its documents."""
    service = service_requests.get_service_request(db, admin.id, service_id)
    return ServiceRequestResponse.model_validate(service)


@router.delete("/{service_id}", response_model=DeleteResponse)
def delete_service(
    service_id: str,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
    cleanup: CleanupCoordinator = Depends(get_cleanup_coordinator),
) -> DeleteResponse:
    """Delete a service request; storage cleanup is best-effort."""
    service = service_requests.get_service_request(db, admin.id, service_id)
    report = cleanup.cleanup([service])
    service_requests.delete_service_request(db, service)

    return DeleteResponse(
        message="Service request deleted successfully",
        storage_warnings=report.warnings,
    )


# -----------------------------------------------------------------------------
# Review
# -----------------------------------------------------------------------------


@router.post("/{service_id}/review", response_model=ReviewResponse)
def review_service(
    service_id: str,
    request: ReviewRequest,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
) -> ReviewResponse:
    """Save document reviews, then email the requester (advisory)."""
    outcome = workflow.review(
        db,
        service_id,
        admin,
        request.document_reviews,
        email_message=request.email_message or "",
    )
    message = (
        "Review saved and sent to requester email"
        if outcome.email_sent
        else "Review saved, but email could not be sent"
    )
    return ReviewResponse(
        message=message,
        updated_count=outcome.updated_count,
        email_sent=outcome.email_sent,
        service=ServiceRequestResponse.model_validate(outcome.service),
    )


# -----------------------------------------------------------------------------
# Document streaming
# -----------------------------------------------------------------------------


async def _stream_document(
    service_id: str,
    document_id: str,
    disposition: Disposition,
    admin: AdminIdentity,
    db: Session,
    provider: StorageProvider,
    client: httpx.AsyncClient,
    settings: Settings,
) -> DocumentStreamingResponse:
    service = await run_in_threadpool(service_requests.get_service_request, db, admin.id, service_id)
    document = service_requests.get_service_document(service, document_id)

    locator = StorageLocator(provider, private_download_ttl_seconds=settings.PRIVATE_DOWNLOAD_TTL_SECONDS)
    result = await DocumentFetcher(client).fetch(locator.locate(document))
    return serve(result, document, disposition, chunk_size=settings.STREAM_CHUNK_SIZE)


@router.get("/{service_id}/documents/{document_id}/file")
async def get_document_file(
    service_id: str,
    document_id: str,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
    provider: StorageProvider = Depends(get_storage),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> DocumentStreamingResponse:
    """Stream a document for inline preview."""
    return await _stream_document(
        service_id, document_id, Disposition.INLINE, admin, db, provider, client, settings
    )


@router.get("/{service_id}/documents/{document_id}/download")
async def download_document_file(
    service_id: str,
    document_id: str,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
    provider: StorageProvider = Depends(get_storage),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> DocumentStreamingResponse:
    """Stream a document as a download with its original filename."""
    return await _stream_document(
        service_id, document_id, Disposition.ATTACHMENT, admin, db, provider, client, settings
    )
