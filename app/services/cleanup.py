# app/services/cleanup.py
"""
Best-effort storage cleanup for deleted service requests.

Each stored object is deleted by public id, trying the raw resource type
first and image second. Objects are independent and deletes are
idempotent, so all objects fan out on a thread pool and are joined before
returning. Failures never propagate: they are logged and returned as
warnings in the CleanupReport so metadata deletion always proceeds.
"""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum

from app.models import ServiceRequest
from app.storage.base import RESOURCE_TYPE_ORDER, StorageProvider

logger = logging.getLogger(__name__)


class ObjectOutcome(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class CleanupReport:
    """Advisory summary of a cleanup run."""

    attempted: int = 0
    deleted: int = 0
    not_found: int = 0
    failed: int = 0
    warnings: list[str] = field(default_factory=list)


def collect_public_ids(services: Iterable[ServiceRequest]) -> list[str]:
    """Unique, non-empty public ids across all documents, in document order."""
    seen: set[str] = set()
    public_ids = []
    for service in services:
        for doc in service.documents or []:
            public_id = (doc.public_id or "").strip()
            if public_id and public_id not in seen:
                seen.add(public_id)
                public_ids.append(public_id)
    return public_ids


class CleanupCoordinator:
    """Deletes the stored objects behind a set of service requests."""

    def __init__(self, provider: StorageProvider | None, max_workers: int = 8):
        self._provider = provider
        self._max_workers = max(1, max_workers)

    def cleanup(self, services: Iterable[ServiceRequest]) -> CleanupReport:
        public_ids = collect_public_ids(services)
        report = CleanupReport(attempted=len(public_ids))

        if not public_ids:
            return report

        if self._provider is None:
            message = f"Storage provider not configured; {len(public_ids)} object(s) left in storage"
            logger.warning(f"[CLEANUP] {message}")
            report.failed = len(public_ids)
            report.warnings.append(message)
            return report

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(public_ids))) as executor:
            futures = {executor.submit(self._delete_object, public_id): public_id for public_id in public_ids}

            for future in as_completed(futures):
                public_id = futures[future]
                try:
                    outcome, errors = future.result()
                except Exception as e:
                    outcome, errors = ObjectOutcome.FAILED, [str(e)]

                if outcome == ObjectOutcome.DELETED:
                    report.deleted += 1
                elif outcome == ObjectOutcome.NOT_FOUND:
                    report.not_found += 1
                else:
                    report.failed += 1
                    report.warnings.append(f"{public_id}: {'; '.join(errors) or 'delete failed'}")

        logger.info(
            f"[CLEANUP] {report.deleted} deleted, {report.not_found} not found, "
            f"{report.failed} failed of {report.attempted} object(s)",
            extra={"event": "cleanup_complete", "attempts": report.attempted},
        )
        return report

    def _delete_object(self, public_id: str) -> tuple[ObjectOutcome, list[str]]:
        """Try each resource type until one deletes the object. Never raises."""
        errors = []
        for resource_type in RESOURCE_TYPE_ORDER:
            try:
                if self._provider.delete(public_id, resource_type):
                    return ObjectOutcome.DELETED, []
            except Exception as e:
                logger.warning(
                    f"[CLEANUP] Failed to delete {public_id} as {resource_type.value}: {e}",
                    extra={"event": "cleanup_object_failed", "key": public_id, "resource_type": resource_type.value},
                )
                errors.append(f"{resource_type.value}: {e}")

        if errors:
            return ObjectOutcome.FAILED, errors
        return ObjectOutcome.NOT_FOUND, []
