# app/services/__init__.py
"""
Business logic services.
"""

from app.services.cleanup import CleanupCoordinator, CleanupReport
from app.services.document_fetcher import DocumentFetcher, FetchResult
from app.services.email_service import EmailService
from app.services.review_workflow import ReviewOutcome, ReviewWorkflow
from app.services.storage_locator import StorageLocator

__all__ = [
    "CleanupCoordinator",
    "CleanupReport",
    "DocumentFetcher",
    "FetchResult",
    "EmailService",
    "ReviewOutcome",
    "ReviewWorkflow",
    "StorageLocator",
]
