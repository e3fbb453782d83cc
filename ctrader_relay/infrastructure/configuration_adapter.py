"""Configuration adapter implementation.

Concrete implementation of the ConfigurationPort interface.
Loads configuration from environment variables, after reading a local
``.env`` file when one exists.
"""

from __future__ import annotations

import os
from typing import Literal, cast

from dotenv import load_dotenv

from ..domain.enums import TransportKind
from ..domain.exceptions import ConfigurationException
from ..domain.models import (
    ServiceConfiguration,
    SessionLimits,
    ValidationIssue,
    ValidationLevel,
    ValidationResult,
)
from ..ports.configuration import ConfigurationPort

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw}")


class EnvironmentConfigurationAdapter(ConfigurationPort):
    """Adapter that loads configuration from environment variables."""

    def __init__(self, env_file: str | None = None, use_dotenv: bool = True) -> None:
        """Initialize the configuration adapter.

        Args:
            env_file: Optional path of a dotenv file, defaults to ``.env`` lookup
            use_dotenv: Whether to read the dotenv file at all
        """
        self._env_file = env_file
        self._use_dotenv = use_dotenv

    def load_configuration(self) -> ServiceConfiguration:
        """Load service configuration from environment variables.

        Returns:
            ServiceConfiguration: Validated configuration

        Raises:
            ConfigurationException: If configuration is invalid
        """
        if self._use_dotenv:
            # Real environment variables win over the file
            load_dotenv(self._env_file, override=False)

        try:
            api_port = int(os.getenv("PORT", "3000"))
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            environment = os.getenv("ENVIRONMENT", "development").lower()
            transport = os.getenv("RELAY_TRANSPORT", TransportKind.TCP.value).lower()
            remote_port = int(os.getenv("CTRADER_PORT", "5036"))
            max_body_bytes = int(os.getenv("RELAY_MAX_BODY_BYTES", "2000000"))

            if log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                raise ValueError(f"Invalid log level: {log_level}")

            if environment not in ["development", "staging", "production"]:
                raise ValueError(f"Invalid environment: {environment}")

            if transport not in [kind.value for kind in TransportKind]:
                raise ValueError(f"Invalid transport: {transport} (must be tcp or websocket)")

            defaults = SessionLimits()
            limits = SessionLimits(
                connect_timeout=float(
                    os.getenv("RELAY_CONNECT_TIMEOUT", str(defaults.connect_timeout))
                ),
                deals_per_page=int(os.getenv("RELAY_DEALS_PER_PAGE", str(defaults.deals_per_page))),
                max_pages=int(os.getenv("RELAY_MAX_PAGES", str(defaults.max_pages))),
            )

            config = ServiceConfiguration(
                api_port=api_port,
                log_level=cast(Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], log_level),
                environment=cast(Literal["development", "staging", "production"], environment),
                relay_secret=os.getenv("RELAY_SECRET", ""),
                transport=TransportKind(transport),
                remote_port=remote_port,
                include_lot_sizes=_env_bool("RELAY_INCLUDE_LOT_SIZES", True),
                max_body_bytes=max_body_bytes,
                limits=limits,
            )

            validation_result = self.validate_configuration(config)
            if not validation_result.is_valid:
                error_messages = [
                    issue.message
                    for issue in validation_result.get_issues_by_level(ValidationLevel.ERROR)
                ]
                raise ConfigurationException(
                    f"Configuration validation failed: {'; '.join(error_messages)}"
                )
            return config

        except ConfigurationException:
            raise
        except Exception as e:
            raise ConfigurationException(f"Failed to load configuration: {str(e)}") from e

    def validate_configuration(self, config: ServiceConfiguration) -> ValidationResult:
        """Validate a configuration object.

        Args:
            config: Configuration to validate

        Returns:
            ValidationResult: Result with validation status and any issues
        """
        result = ValidationResult(context="ServiceConfiguration")

        if not config.is_protected:
            level = (
                ValidationLevel.ERROR
                if config.environment == "production"
                else ValidationLevel.WARNING
            )
            result.add_issue(
                ValidationIssue(
                    level=level,
                    category="security",
                    message="RELAY_SECRET is not set, every sync request will be rejected",
                    resolution="Set RELAY_SECRET to a long random value shared with callers",
                )
            )

        if config.limits.deals_per_page > 1000:
            result.add_issue(
                ValidationIssue(
                    level=ValidationLevel.WARNING,
                    category="config",
                    message=f"Page size {config.limits.deals_per_page} may exceed the server cap",
                )
            )

        return result
