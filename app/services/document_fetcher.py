# app/services/document_fetcher.py
"""
Sequential retrieval of a document byte stream from candidate URLs.

Candidates are tried one at a time, never in parallel: signed-URL
candidates cost provider quota and most documents resolve on the first or
second attempt. The first 2xx response that carries a body wins and is
returned still open (streaming); every other response is closed before the
next attempt so no connection is left dangling.

Usage:
    fetcher = DocumentFetcher(client)
    result = await fetcher.fetch(locator.locate(document))
    try:
        ...  # stream result.response
    finally:
        await result.aclose()
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx

from app.exceptions import NO_CANDIDATES, RetrievalFailedError

logger = logging.getLogger(__name__)

_NO_BODY_STATUSES = {204, 205}


@dataclass
class FetchResult:
    """An open upstream response plus the attempts that led to it."""

    response: httpx.Response
    url: str
    trail: list[str] = field(default_factory=list)

    @property
    def content_type(self) -> str | None:
        return self.response.headers.get("content-type")

    async def aclose(self) -> None:
        await self.response.aclose()


def _has_body(response: httpx.Response) -> bool:
    if not response.is_success or response.status_code in _NO_BODY_STATUSES:
        return False
    return response.headers.get("content-length", "").strip() != "0"


def _describe_error(exc: Exception) -> str:
    message = str(exc).strip()
    name = exc.__class__.__name__
    return f"{name}: {message}" if message else name


class DocumentFetcher:
    """Tries candidate URLs in order and returns the first usable stream."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def fetch(self, candidates: Iterable[str]) -> FetchResult:
        """
        Fetch the first candidate that returns a usable body.

        Raises:
            RetrievalFailedError: every candidate failed; carries the
                "candidate -> outcome" trail
        """
        trail: list[str] = []

        for candidate in candidates:
            if not candidate:
                continue

            try:
                request = self._client.build_request("GET", candidate)
                response = await self._client.send(request, stream=True, follow_redirects=True)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                trail.append(f"{candidate} -> {_describe_error(e)}")
                continue

            trail.append(f"{candidate} -> {response.status_code}")

            if _has_body(response):
                logger.info(
                    f"[FETCH] Resolved document after {len(trail)} attempt(s)",
                    extra={"event": "document_resolved", "attempts": len(trail), "candidate": candidate},
                )
                return FetchResult(response=response, url=candidate, trail=trail)

            await response.aclose()

        if not trail:
            logger.warning(
                "[FETCH] Document has no storage candidates",
                extra={"event": "document_unresolved", "attempts": 0},
            )
            raise RetrievalFailedError([NO_CANDIDATES], attempts=0)

        logger.warning(
            f"[FETCH] All {len(trail)} storage candidate(s) failed: {' | '.join(trail)}",
            extra={"event": "document_unresolved", "attempts": len(trail)},
        )
        raise RetrievalFailedError(trail)
