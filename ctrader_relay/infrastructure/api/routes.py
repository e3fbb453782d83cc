"""API routes for the relay.

This module defines all FastAPI routes, keeping the web framework
concerns separate from the sync logic.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from ...application.sync_service import SyncService
from .dependencies import enforce_body_limit, get_sync_service, verify_relay_secret

logger = logging.getLogger(__name__)

SERVICE_NAME = "ctrader-relay"


class HealthResponse(BaseModel):
    """API response model for health endpoint."""

    ok: bool
    service: str


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check, exempt from the relay secret."""
    return HealthResponse(ok=True, service=SERVICE_NAME)


@router.post(
    "/sync",
    dependencies=[Depends(enforce_body_limit), Depends(verify_relay_secret)],
)
async def sync(
    body: dict[str, Any] | None = Body(default=None),  # noqa: B008
    sync_service: SyncService = Depends(get_sync_service),  # noqa: B008
) -> dict[str, Any]:
    """Pull the trade history of one cTrader account.

    Always answers 200; failures are reported as ``{"ok": false, "error": ...}``.
    """
    return await sync_service.sync(body or {})
