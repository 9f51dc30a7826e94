# app/routers/public.py
"""
Public intake endpoint.

POST /v1/public/services/request - Submit documents for review (no auth)

Public submissions are owned by the single configured reviewer
(SERVICE_OWNER_ID). Documents must already be uploaded to storage; this
endpoint only records their metadata.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import get_db
from app.schemas.services import ServiceRequestCreate, ServiceRequestResponse
from app.services import service_requests

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/public", tags=["public"])

DEFAULT_TITLE = "Document review request"


@router.post("/services/request", response_model=ServiceRequestResponse, status_code=201)
def submit_service_request(
    request: ServiceRequestCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ServiceRequestResponse:
    """Create a service request on behalf of an anonymous requester."""
    if not settings.SERVICE_OWNER_ID:
        logger.warning("[PUBLIC] Intake rejected: SERVICE_OWNER_ID not set")
        raise HTTPException(status_code=503, detail="No active reviewer available right now")

    service = service_requests.create_service_request(
        db,
        owner_id=settings.SERVICE_OWNER_ID,
        requester_email=request.requester_email,
        documents=request.documents,
        title=request.title.strip() or DEFAULT_TITLE,
        description=request.description,
    )
    return ServiceRequestResponse.model_validate(service)
