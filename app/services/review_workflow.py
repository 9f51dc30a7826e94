# app/services/review_workflow.py
"""
Review workflow for service requests.

Applies a batch of per-document reviews, derives the aggregate status and
then notifies the requester. The review is committed before notification
and notification is advisory: its outcome is returned as `email_sent` and
can never fail or roll back the review.

Aggregate status rule:
    reviewed   - no document is pending
    in-review  - some document is pending, but at least one was reviewed before
    pending    - no document has been reviewed yet

An entry whose review_status is not one of pending/reviewed/needs-update
keeps the document's current status; its review text is still written.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.auth import AdminIdentity
from app.exceptions import ValidationError
from app.models import (
    REVIEW_STATUS_VALUES,
    ReviewStatus,
    ServiceDocument,
    ServiceRequest,
    ServiceStatus,
    utcnow,
)
from app.schemas.services import DocumentReviewEntry
from app.services.email_service import EmailService
from app.services.service_requests import get_service_request, normalize_document_id

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    """Saved service request plus the advisory notification result."""

    service: ServiceRequest
    updated_count: int
    email_sent: bool


def _text(value: object) -> str:
    return str(value) if value is not None else ""


def derive_status(documents: Iterable[ServiceDocument]) -> ServiceStatus:
    documents = list(documents)
    if all(doc.review_status != ReviewStatus.PENDING.value for doc in documents):
        return ServiceStatus.REVIEWED
    if any(doc.reviewed_at is not None for doc in documents):
        return ServiceStatus.IN_REVIEW
    return ServiceStatus.PENDING


class ReviewWorkflow:
    """Applies review batches and dispatches the requester notification."""

    def __init__(
        self,
        notifier: EmailService,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._notifier = notifier
        self._clock = clock

    def review(
        self,
        db: Session,
        service_id: str,
        reviewer: AdminIdentity,
        entries: list[DocumentReviewEntry],
        email_message: str = "",
    ) -> ReviewOutcome:
        """
        Apply a review batch to one of the reviewer's service requests.

        Raises:
            NotFoundError: no such request for this reviewer
            ValidationError: empty batch, or no entry matched a document
        """
        service = get_service_request(db, reviewer.id, service_id)

        if not entries:
            raise ValidationError("Document reviews are required")

        now = self._clock()
        index = service.document_index()
        updated_count = 0

        for entry in entries:
            position = index.get(normalize_document_id(_text(entry.document_id)))
            if position is None:
                logger.debug(f"[REVIEW] Skipping unknown document {entry.document_id!r} on {service.id}")
                continue

            document = service.documents[position]
            document.review = _text(entry.review).strip()
            document.suggestion = _text(entry.suggestion).strip()
            if isinstance(entry.review_status, str) and entry.review_status in REVIEW_STATUS_VALUES:
                document.review_status = entry.review_status
            document.reviewed_at = now
            updated_count += 1

        if updated_count == 0:
            raise ValidationError("No valid document reviews found")

        service.status = derive_status(service.documents).value
        service.review_sent_at = now
        db.commit()
        db.refresh(service)

        logger.info(
            f"[REVIEW] Saved {updated_count} document review(s) on {service.id}, status={service.status}",
            extra={"event": "review_saved", "service_id": str(service.id)},
        )

        email_sent = self._notify(service, reviewer, (email_message or "").strip())
        return ReviewOutcome(service=service, updated_count=updated_count, email_sent=email_sent)

    def _notify(self, service: ServiceRequest, reviewer: AdminIdentity, email_message: str) -> bool:
        try:
            return self._notifier.send_service_review(
                service,
                reviewer_name=reviewer.name,
                reviewer_email=reviewer.email,
                email_message=email_message,
            )
        except Exception as e:
            logger.error(f"[REVIEW] Notification for {service.id} failed: {e}")
            return False
