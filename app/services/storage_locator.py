# app/services/storage_locator.py
"""
Candidate URL resolution for stored service documents.

The URL saved at upload time is not reliable: documents were stored under
different resource types over time (raw vs image) and some accounts later
switched to restricted delivery. StorageLocator turns a document's metadata
into an ordered list of URLs to try, cheapest and most likely first:

    1. the stored URL as-is
    2. public raw/image URLs without extension
    3. public raw/image URLs with extension
    4. signed URLs for {raw, image} x {upload, authenticated, private}
    5. short-lived private download URLs for {raw, image}

Pure computation: no network I/O, never raises. Without a storage provider
or a usable public id it degrades to the stored URL alone, or to no
candidates at all when that is blank.
"""

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import quote, urlsplit

from app.models import ServiceDocument
from app.storage.base import (
    DELIVERY_TYPE_ORDER,
    RESOURCE_TYPE_ORDER,
    StorageProvider,
)

logger = logging.getLogger(__name__)

MIME_EXTENSIONS = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "text/plain": "txt",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
}

_EXTENSION_RE = re.compile(r"^[a-z0-9]{1,10}$")
_VERSION_SEGMENT_RE = re.compile(r"^v(\d+)$")

# Characters left as-is when re-encoding a stored URL
_URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"


@dataclass(frozen=True)
class PublicIdParts:
    """Public id split into the extension-less base and the derived extension."""
    raw_public_id: str
    base_public_id: str
    extension: str


def normalize_remote_url(url: str | None) -> str:
    """Trim a stored URL and percent-encode characters that are not URL-safe."""
    raw = (url or "").strip()
    if not raw:
        return ""
    return quote(raw, safe=_URL_SAFE_CHARS)


def _extension_of(name: str) -> str:
    """Lower-cased extension of the last path segment, or '' if none/implausible."""
    last_segment = name.rsplit("/", 1)[-1]
    if "." not in last_segment:
        return ""
    ext = last_segment.rsplit(".", 1)[-1].lower()
    return ext if _EXTENSION_RE.match(ext) else ""


def split_public_id(document: ServiceDocument) -> PublicIdParts:
    """
    Derive the extension-less public id and the best-guess extension.

    Extension priority: original file name, then public id, then mime type.
    """
    raw_public_id = (document.public_id or "").strip()
    original_name = (document.original_name or "").strip()
    mime_type = (document.mime_type or "").strip().lower()

    public_id_ext = _extension_of(raw_public_id)
    base_public_id = raw_public_id
    if public_id_ext and raw_public_id.lower().endswith(f".{public_id_ext}"):
        base_public_id = raw_public_id[: -(len(public_id_ext) + 1)]

    extension = _extension_of(original_name) or public_id_ext or MIME_EXTENSIONS.get(mime_type, "")

    return PublicIdParts(
        raw_public_id=raw_public_id,
        base_public_id=base_public_id or raw_public_id,
        extension=extension,
    )


def extract_version(url: str | None) -> int | None:
    """Return NNN from a `vNNN` path segment of a storage URL, if present."""
    normalized = normalize_remote_url(url)
    if not normalized:
        return None
    try:
        path = urlsplit(normalized).path
    except ValueError:
        return None
    for segment in path.split("/"):
        match = _VERSION_SEGMENT_RE.match(segment)
        if match:
            return int(match.group(1))
    return None


class StorageLocator:
    """Builds the ordered candidate list for a document."""

    def __init__(
        self,
        provider: StorageProvider | None,
        private_download_ttl_seconds: int = 600,
        clock: Callable[[], float] = time.time,
    ):
        self._provider = provider
        self._ttl = private_download_ttl_seconds
        self._clock = clock

    def locate(self, document: ServiceDocument) -> list[str]:
        canonical = normalize_remote_url(document.file_url)
        parts = split_public_id(document)

        if self._provider is None or not parts.base_public_id:
            return [canonical] if canonical else []

        version = extract_version(canonical)
        base = parts.base_public_id
        ext = parts.extension

        candidates = [canonical]

        # Public, no extension
        for resource_type in RESOURCE_TYPE_ORDER:
            candidates.append(self._build(self._provider.delivery_url, base, resource_type))

        # Public, with extension
        if ext:
            for resource_type in RESOURCE_TYPE_ORDER:
                candidates.append(
                    self._build(self._provider.delivery_url, base, resource_type, extension=ext)
                )

        # Signed, pinned to the stored revision
        for resource_type in RESOURCE_TYPE_ORDER:
            for delivery_type in DELIVERY_TYPE_ORDER:
                candidates.append(
                    self._build(
                        self._provider.delivery_url,
                        base,
                        resource_type,
                        delivery_type,
                        version=version,
                        extension=ext or None,
                        signed=True,
                    )
                )

        # Time-limited private downloads need an explicit format
        if ext:
            expires_at = int(self._clock()) + self._ttl
            for resource_type in RESOURCE_TYPE_ORDER:
                candidates.append(
                    self._build(self._provider.private_download_url, base, ext, resource_type, expires_at)
                )

        return _dedupe(candidates)

    def _build(self, builder: Callable[..., str], *args, **kwargs) -> str:
        """Run one URL builder; a failing builder only drops its own candidate."""
        try:
            return builder(*args, **kwargs) or ""
        except Exception as e:
            logger.debug(f"[LOCATOR] Skipping candidate for {args[0]}: {e}")
            return ""


def _dedupe(candidates: list[str]) -> list[str]:
    """Drop empty entries and repeats, keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.add(candidate)
            result.append(candidate)
    return result
