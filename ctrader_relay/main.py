"""Main entry point for the cTrader relay.

This module sets up the FastAPI application using hexagonal architecture,
with clear separation between framework concerns and the sync logic.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from . import __version__
from .domain.models import ValidationLevel
from .infrastructure.api.dependencies import get_configuration_port, get_service_configuration
from .infrastructure.api.error_handlers import register_error_handlers
from .infrastructure.api.routes import router
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Loads and validates configuration once at startup.
    """
    try:
        config = get_service_configuration()
    except Exception as e:
        logger.error(f"Failed to start service: {e}")
        raise

    setup_logging(config.log_level)
    logger.info("Starting cTrader relay")
    logger.info(f"Service configured for environment: {config.environment}")
    logger.info(f"Transport: {config.transport.value} (remote port {config.remote_port})")
    logger.info(f"Lot sizes: {'enabled' if config.include_lot_sizes else 'disabled'}")
    logger.info(f"cTrader relay listening on port {config.api_port}")

    validation = get_configuration_port().validate_configuration(config)
    for issue in validation.get_issues_by_level(ValidationLevel.WARNING):
        logger.warning(f"WARNING: {issue.message}")

    logger.info("Service is ready to handle requests")
    yield
    logger.info("Shutting down cTrader relay")


app = FastAPI(
    title="cTrader Relay",
    description="Relays trade history requests to the cTrader Open API",
    version=__version__,
    lifespan=lifespan,
)

# Register error handlers
register_error_handlers(app)

app.include_router(router)


def run() -> None:
    """Run the relay with uvicorn on the configured port."""
    config = get_service_configuration()
    uvicorn.run(app, host="0.0.0.0", port=config.api_port, log_config=None)  # nosec B104


if __name__ == "__main__":
    run()
