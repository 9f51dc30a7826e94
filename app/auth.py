# app/auth.py
"""Shared authentication dependencies."""

import secrets
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from app.config import Settings, get_settings


@dataclass(frozen=True)
class AdminIdentity:
    """The admin a request acts as. Service requests are scoped to `id`."""

    id: str
    name: str = "Admin Reviewer"
    email: str | None = None


def require_admin_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Validate admin API key. Fails closed if ADMIN_API_KEY is not set."""
    expected_key = settings.ADMIN_API_KEY

    if not expected_key:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: admin authentication not configured",
        )

    if not x_api_key or not secrets.compare_digest(x_api_key, expected_key):
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API key",
        )


def get_current_admin(
    _: None = Depends(require_admin_key),
    x_admin_id: str | None = Header(default=None, alias="X-Admin-Id"),
    x_admin_name: str | None = Header(default=None, alias="X-Admin-Name"),
    x_admin_email: str | None = Header(default=None, alias="X-Admin-Email"),
) -> AdminIdentity:
    """Resolve the acting admin from identity headers set by the upstream gateway."""
    admin_id = (x_admin_id or "").strip()
    if not admin_id:
        raise HTTPException(
            status_code=401,
            detail="Missing X-Admin-Id header",
        )

    return AdminIdentity(
        id=admin_id,
        name=(x_admin_name or "").strip() or "Admin Reviewer",
        email=(x_admin_email or "").strip() or None,
    )
