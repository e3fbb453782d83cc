"""Transport port interface.

Defines the protocol interface for a single encrypted connection to the
remote API. Implementations own both the socket and its frame codec, so
callers only ever see whole ``ProtocolMessage`` objects.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Protocol

from ..domain.models import ProtocolMessage


class MessageTransportPort(Protocol):
    """Protocol interface for a message-oriented connection."""

    @property
    def is_open(self) -> bool:
        """Whether the connection is established and not yet closed."""
        ...

    async def connect(self) -> None:
        """Open the connection.

        Raises:
            ConnectTimeoutException: If the connection is not established in time
            ConnectException: If the network or TLS layer fails
        """
        ...

    async def send(self, message: ProtocolMessage) -> None:
        """Write one message. Does not wait for any reply."""
        ...

    def messages(self) -> AsyncIterator[ProtocolMessage]:
        """Iterate decoded inbound messages until the stream ends.

        Malformed frames are dropped by the codec and never surface here.
        """
        ...

    async def close(self) -> None:
        """Close the connection. Idempotent and safe before connect()."""
        ...


# Builds a fresh, unconnected transport for a host
TransportFactory = Callable[[str], MessageTransportPort]
