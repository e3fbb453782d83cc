"""FastAPI dependency injection setup.

This module configures dependency injection for the FastAPI application,
providing a clean separation between the framework and the application logic.
Configuration is read once and shared read-only by every request.
"""

from __future__ import annotations

import json
import logging
import secrets
from functools import lru_cache
from typing import Any

from fastapi import Depends, Request

from ...application.sync_service import SyncService
from ...domain.exceptions import PayloadTooLargeException, UnauthorizedException
from ...domain.models import ServiceConfiguration
from ...ports.configuration import ConfigurationPort
from ..factory import InfrastructureFactory

logger = logging.getLogger(__name__)

RELAY_SECRET_HEADER = "x-relay-secret"
RELAY_SECRET_BODY_FIELD = "secret"


@lru_cache
def get_configuration_port() -> ConfigurationPort:
    """Get the configuration port instance using factory.

    Returns:
        ConfigurationPort: Configuration port implementation
    """
    return InfrastructureFactory.create_configuration_port()


@lru_cache
def get_service_configuration() -> ServiceConfiguration:
    """Get the service configuration.

    Returns:
        ServiceConfiguration: Loaded service configuration
    """
    config_port = get_configuration_port()
    return config_port.load_configuration()


@lru_cache
def get_sync_service() -> SyncService:
    """Get the sync service instance.

    Returns:
        SyncService: Application service for the sync operation
    """
    return InfrastructureFactory.create_sync_service(get_service_configuration())


async def _body_secret(request: Request) -> Any:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(body, dict):
        return body.get(RELAY_SECRET_BODY_FIELD)
    return None


async def enforce_body_limit(
    request: Request,
    config: ServiceConfiguration = Depends(get_service_configuration),  # noqa: B008
) -> None:
    """Reject request bodies above the configured size.

    Raises:
        PayloadTooLargeException: If the body is too large
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > config.max_body_bytes:
        raise PayloadTooLargeException(config.max_body_bytes)
    if len(await request.body()) > config.max_body_bytes:
        raise PayloadTooLargeException(config.max_body_bytes)


async def verify_relay_secret(
    request: Request,
    config: ServiceConfiguration = Depends(get_service_configuration),  # noqa: B008
) -> None:
    """Check the shared relay secret from the header or the body.

    An unconfigured secret rejects every caller.

    Raises:
        UnauthorizedException: If the secret is missing or wrong
    """
    # An empty header falls through to the body field
    supplied = request.headers.get(RELAY_SECRET_HEADER) or await _body_secret(request)

    if not config.is_protected or not supplied:
        raise UnauthorizedException()
    if not secrets.compare_digest(str(supplied).encode(), config.relay_secret.encode()):
        logger.warning(f"Rejected request to {request.url.path}: bad relay secret")
        raise UnauthorizedException()
