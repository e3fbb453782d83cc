"""Ports layer - Interfaces for external communication."""

from .configuration import ConfigurationPort
from .transport import MessageTransportPort, TransportFactory

__all__ = ["ConfigurationPort", "MessageTransportPort", "TransportFactory"]
