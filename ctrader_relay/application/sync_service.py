"""Application service for the sync operation.

This is the boundary callers talk to. It validates the raw request,
runs the session sequencer and maps every outcome, including unexpected
failures, to a plain ``{"ok": ...}`` result.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..domain.exceptions import DomainException, SyncValidationException
from ..domain.models import REQUIRED_SYNC_FIELDS, SyncRequest
from .sync_session import SessionSequencer

logger = logging.getLogger(__name__)


def find_missing_fields(body: Mapping[str, Any]) -> list[str]:
    """Required fields that are absent, null or empty strings."""
    return [field for field in REQUIRED_SYNC_FIELDS if body.get(field) in (None, "")]


def parse_sync_request(body: Mapping[str, Any]) -> SyncRequest:
    """Validate a raw request body.

    Raises:
        SyncValidationException: If fields are missing or cannot be coerced
    """
    missing = find_missing_fields(body)
    if missing:
        raise SyncValidationException(f"Missing fields: {', '.join(missing)}", missing)

    try:
        return SyncRequest.model_validate({field: body[field] for field in REQUIRED_SYNC_FIELDS})
    except ValidationError as e:
        invalid = sorted(
            {str(err["loc"][0]) for err in e.errors() if err.get("loc")},
            key=_field_order,
        )
        raise SyncValidationException(f"Invalid fields: {', '.join(invalid)}") from e


def _field_order(field: str) -> int:
    if field in REQUIRED_SYNC_FIELDS:
        return REQUIRED_SYNC_FIELDS.index(field)
    return len(REQUIRED_SYNC_FIELDS)


def failure(message: str) -> dict[str, Any]:
    """Render the failure envelope."""
    return {"ok": False, "error": message}


class SyncService:
    """Application service that exposes the sync operation."""

    def __init__(self, sequencer: SessionSequencer):
        """Initialize the sync service.

        Args:
            sequencer: Session sequencer used for every sync
        """
        self._sequencer = sequencer

    async def sync(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """Pull trades and symbol tables for the account described by ``body``.

        Args:
            body: Raw request fields (host, clientId, clientSecret, accessToken,
                ctidAccountId, fromTimestamp, toTimestamp)

        Returns:
            ``{"ok": True, deals, symbols, lotSizes, pages, total}`` on success,
            ``{"ok": False, "error": message}`` otherwise. Never raises.
        """
        try:
            request = parse_sync_request(body)
        except SyncValidationException as e:
            logger.info(f"Rejected sync request: {e.message}")
            return failure(e.message)

        started = time.monotonic()
        try:
            result = await self._sequencer.run(request)
        except DomainException as e:
            logger.error(f"[sync] Error for ctid={request.ctid_account_id}: {e.message}")
            return failure(e.message)
        except Exception as e:
            logger.exception(f"[sync] Unexpected error for ctid={request.ctid_account_id}")
            return failure(str(e) or type(e).__name__)

        logger.info(
            f"[sync] ctid={request.ctid_account_id}: {result.total} deals, "
            f"{len(result.symbols)} symbols in {time.monotonic() - started:.1f}s"
        )
        return result.to_response()
