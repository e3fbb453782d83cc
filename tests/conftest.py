"""Shared pytest fixtures for relay tests."""

from __future__ import annotations

from typing import Any

import pytest

from ctrader_relay.domain.models import SessionLimits


@pytest.fixture
def fast_limits() -> SessionLimits:
    """Session limits with short timeouts so silent servers fail quickly."""
    return SessionLimits(
        connect_timeout=0.5,
        auth_timeout=0.5,
        symbol_list_timeout=0.05,
        deal_page_timeout=0.5,
        symbol_detail_timeout=0.05,
    )


@pytest.fixture
def sync_body() -> dict[str, Any]:
    """A complete, valid sync request body."""
    return {
        "host": "demo.ctraderapi.com",
        "clientId": "1234_abcdef",
        "clientSecret": "s3cr3t",
        "accessToken": "token-xyz",
        "ctidAccountId": "987654",
        "fromTimestamp": "0",
        "toTimestamp": 1_700_000_000_000,
    }
