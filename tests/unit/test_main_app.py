"""Tests for main app module.

These tests cover the FastAPI application initialization.
"""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from ctrader_relay.domain.exceptions import ConfigurationException
from ctrader_relay.domain.models import (
    ServiceConfiguration,
    ValidationIssue,
    ValidationLevel,
    ValidationResult,
)


class TestMainApp:
    """Tests for main app module."""

    @pytest.mark.asyncio
    async def test_app_lifespan_success(self) -> None:
        """Test successful app lifespan management."""
        from ctrader_relay.main import lifespan

        config = ServiceConfiguration(relay_secret="x")
        mock_config_port = Mock()
        mock_config_port.validate_configuration.return_value = ValidationResult()

        with (
            patch("ctrader_relay.main.get_service_configuration", return_value=config),
            patch("ctrader_relay.main.get_configuration_port", return_value=mock_config_port),
            patch("ctrader_relay.main.setup_logging") as mock_setup_logging,
        ):
            async with lifespan(Mock()):
                pass

        mock_setup_logging.assert_called_once_with("INFO")
        mock_config_port.validate_configuration.assert_called_once_with(config)

    @pytest.mark.asyncio
    async def test_app_lifespan_logs_warnings(self, caplog) -> None:
        """Test that configuration warnings are logged at startup."""
        from ctrader_relay.main import lifespan

        result = ValidationResult()
        result.add_issue(
            ValidationIssue(
                level=ValidationLevel.WARNING, category="security", message="no secret"
            )
        )
        mock_config_port = Mock()
        mock_config_port.validate_configuration.return_value = result

        with (
            patch(
                "ctrader_relay.main.get_service_configuration",
                return_value=ServiceConfiguration(),
            ),
            patch("ctrader_relay.main.get_configuration_port", return_value=mock_config_port),
            patch("ctrader_relay.main.setup_logging"),
            caplog.at_level("WARNING", logger="ctrader_relay.main"),
        ):
            async with lifespan(Mock()):
                pass

        assert "no secret" in caplog.text

    @pytest.mark.asyncio
    async def test_app_lifespan_startup_error(self) -> None:
        """Test app lifespan with startup error."""
        from ctrader_relay.main import lifespan

        with patch(
            "ctrader_relay.main.get_service_configuration",
            side_effect=ConfigurationException("Config error"),
        ):
            with pytest.raises(ConfigurationException) as exc_info:
                async with lifespan(Mock()):
                    pass

        assert "Config error" in str(exc_info.value)

    def test_app_routes_registered(self) -> None:
        """Test that the app exposes the relay routes."""
        from ctrader_relay.main import app

        assert app.url_path_for("health_check") == "/health"
        assert app.url_path_for("sync") == "/sync"

    def test_run_uses_configured_port(self) -> None:
        """Test the uvicorn entry point."""
        from ctrader_relay import main

        with (
            patch.object(
                main, "get_service_configuration", return_value=ServiceConfiguration(api_port=4100)
            ),
            patch.object(main.uvicorn, "run") as mock_run,
        ):
            main.run()

        mock_run.assert_called_once_with(main.app, host="0.0.0.0", port=4100, log_config=None)
