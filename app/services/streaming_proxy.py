# app/services/streaming_proxy.py
"""
Streams a resolved upstream document to the client.

The body is relayed as it arrives in bounded chunks, never buffered whole:
documents can be tens of megabytes. The upstream response is closed
however the transfer ends (completion, client disconnect, upstream failure).
An upstream failure mid-transfer is re-raised so the server aborts the
response instead of finishing it cleanly with a truncated body.
"""

import logging
from collections.abc import AsyncIterator
from enum import Enum
from urllib.parse import quote

import httpx
from fastapi.responses import StreamingResponse

from app.models import ServiceDocument
from app.services.document_fetcher import FetchResult

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
FALLBACK_CONTENT_TYPE = "application/octet-stream"
CACHE_CONTROL = "private, max-age=600"


class Disposition(str, Enum):
    """How the browser should treat the streamed document."""
    INLINE = "inline"  # Preview
    ATTACHMENT = "attachment"  # Download


def content_disposition(disposition: Disposition, filename: str | None) -> str:
    """Content-Disposition with an RFC 5987 encoded filename (non-ASCII safe)."""
    safe_name = quote((filename or "").strip() or "document", safe="")
    return f"{disposition.value}; filename*=UTF-8''{safe_name}"


def resolve_content_type(document: ServiceDocument, upstream_content_type: str | None) -> str:
    return (document.mime_type or "").strip() or (upstream_content_type or "").strip() or FALLBACK_CONTENT_TYPE


def build_headers(result: FetchResult, document: ServiceDocument, disposition: Disposition) -> dict[str, str]:
    headers = {
        "Content-Type": resolve_content_type(document, result.content_type),
        "Content-Disposition": content_disposition(disposition, document.original_name),
        "Cache-Control": CACHE_CONTROL,
        "X-Content-Type-Options": "nosniff",
    }

    # aiter_bytes() decodes content-encoding, so the upstream length only holds for identity bodies
    upstream_length = result.response.headers.get("content-length")
    if upstream_length and not result.response.headers.get("content-encoding"):
        headers["Content-Length"] = upstream_length

    return headers


async def iter_document_body(
    result: FetchResult,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """Yield the upstream body as it arrives, in chunks of at most `chunk_size` bytes."""
    sent = 0
    try:
        async for piece in result.response.aiter_bytes():
            for start in range(0, len(piece), chunk_size):
                chunk = piece[start:start + chunk_size]
                sent += len(chunk)
                yield chunk
    except httpx.HTTPError as e:
        logger.error(
            f"[STREAM] Upstream failed after {sent} bytes from {result.url}: {e}",
            extra={"event": "stream_upstream_failed", "size_bytes": sent},
        )
        raise
    else:
        logger.debug(
            f"[STREAM] Sent {sent} bytes from {result.url}",
            extra={"event": "stream_complete", "size_bytes": sent},
        )
    finally:
        await result.aclose()


class DocumentStreamingResponse(StreamingResponse):
    """StreamingResponse that always releases the upstream connection."""

    def __init__(
        self,
        result: FetchResult,
        document: ServiceDocument,
        disposition: Disposition,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._upstream = result
        super().__init__(
            iter_document_body(result, chunk_size),
            status_code=200,
            headers=build_headers(result, document, disposition),
        )

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            # Covers client disconnects that cancel the transfer between chunks
            await self._upstream.aclose()


def serve(
    result: FetchResult,
    document: ServiceDocument,
    disposition: Disposition,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> DocumentStreamingResponse:
    return DocumentStreamingResponse(result, document, disposition, chunk_size=chunk_size)
