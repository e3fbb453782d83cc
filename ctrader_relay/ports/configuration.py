"""Configuration port interface.

The relay is configured from process environment variables (``PORT``,
``RELAY_SECRET``, ``RELAY_TRANSPORT``, ``CTRADER_PORT`` and the ``RELAY_*``
limits), optionally seeded from a local ``.env`` file.
"""

from __future__ import annotations

from typing import Protocol

from ..domain.models import ServiceConfiguration, ValidationResult


class ConfigurationPort(Protocol):
    """Source of the relay's ServiceConfiguration."""

    def load_configuration(self) -> ServiceConfiguration:
        """Read and validate the relay settings.

        Raises:
            ConfigurationException: If a value cannot be parsed, or if
                validation reports an error (an unset RELAY_SECRET in production)
        """
        ...

    def validate_configuration(self, config: ServiceConfiguration) -> ValidationResult:
        """Check a loaded configuration for unsafe or suspicious settings.

        An unset relay secret is a WARNING, since every sync is then rejected,
        and an ERROR when the environment is production. Oversized deal pages
        are reported as a WARNING.
        """
        ...
