"""Infrastructure factory for creating adapters and dependencies.

This module follows the Factory pattern to centralize the creation of
infrastructure components, so the wire variant is chosen in one place and
the application layer never knows which one it is talking through.
"""

from __future__ import annotations

from ..application.sync_service import SyncService
from ..application.sync_session import SessionSequencer
from ..domain.enums import TransportKind
from ..domain.models import ServiceConfiguration
from ..ports.configuration import ConfigurationPort
from ..ports.transport import MessageTransportPort, TransportFactory
from .configuration_adapter import EnvironmentConfigurationAdapter
from .tcp_transport import TcpTransport
from .websocket_transport import WebSocketTransport


class InfrastructureFactory:
    """Factory for creating infrastructure adapters following hexagonal architecture."""

    @staticmethod
    def create_configuration_port() -> ConfigurationPort:
        """Create a configuration port adapter.

        Returns:
            ConfigurationPort implementation
        """
        return EnvironmentConfigurationAdapter()

    @staticmethod
    def create_transport_factory(config: ServiceConfiguration) -> TransportFactory:
        """Create a factory of unconnected transports for the configured wire variant.

        Args:
            config: Service configuration

        Returns:
            Callable taking a host and returning a MessageTransportPort
        """
        port = config.remote_port
        timeout = config.limits.connect_timeout

        if config.transport == TransportKind.WEBSOCKET:

            def websocket_factory(host: str) -> MessageTransportPort:
                return WebSocketTransport(host, port=port, connect_timeout=timeout)

            return websocket_factory

        def tcp_factory(host: str) -> MessageTransportPort:
            return TcpTransport(host, port=port, connect_timeout=timeout)

        return tcp_factory

    @staticmethod
    def create_sync_service(config: ServiceConfiguration) -> SyncService:
        """Create the sync application service wired to the configured transport.

        Args:
            config: Service configuration

        Returns:
            SyncService instance
        """
        sequencer = SessionSequencer(
            InfrastructureFactory.create_transport_factory(config),
            limits=config.limits,
            include_lot_sizes=config.include_lot_sizes,
        )
        return SyncService(sequencer)
