"""TLS TCP transport for the cTrader JSON port.

Concrete implementation of the MessageTransportPort over a raw encrypted
stream using 4-byte length-prefixed frames.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import AsyncIterator

from ..domain.exceptions import ConnectException, ConnectTimeoutException
from ..domain.models import ProtocolMessage
from ..ports.transport import MessageTransportPort
from .framing import LengthPrefixedFrameCodec

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class TcpTransport(MessageTransportPort):
    """One TLS connection to ``host:port`` speaking length-prefixed JSON."""

    def __init__(
        self,
        host: str,
        port: int = 5036,
        connect_timeout: float = 12.0,
        ssl_context: ssl.SSLContext | None = None,
    ):
        """Initialize the transport without connecting.

        Args:
            host: Remote host name, also used for certificate verification
            port: Remote port
            connect_timeout: Seconds allowed for TCP connect plus TLS handshake
            ssl_context: Optional TLS context, defaults to a verifying client context
        """
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._ssl_context = ssl_context or ssl.create_default_context()
        self._codec = LengthPrefixedFrameCodec()
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._writer is not None and not self._closed

    async def connect(self) -> None:
        if self._closed:
            raise ConnectException("TCP error: transport already closed")
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self._host,
                    self._port,
                    ssl=self._ssl_context,
                    server_hostname=self._host,
                ),
                timeout=self._connect_timeout,
            )
        except TimeoutError as e:
            raise ConnectTimeoutException(self._host, self._port) from e
        except (OSError, ssl.SSLError) as e:
            raise ConnectException(f"TCP error: {e}") from e
        logger.info(f"Connected to {self._host}:{self._port}")

    async def send(self, message: ProtocolMessage) -> None:
        if not self.is_open or self._writer is None:
            raise ConnectException("TCP error: not connected")
        try:
            self._writer.write(self._codec.encode(message))
            await self._writer.drain()
        except (OSError, ssl.SSLError) as e:
            raise ConnectException(f"TCP error: {e}") from e

    async def messages(self) -> AsyncIterator[ProtocolMessage]:
        if self._reader is None:
            raise ConnectException("TCP error: not connected")
        while not self._closed:
            try:
                chunk = await self._reader.read(READ_CHUNK_SIZE)
            except (OSError, ssl.SSLError) as e:
                raise ConnectException(f"TCP error: {e}") from e
            if not chunk:
                logger.debug(f"Stream from {self._host}:{self._port} reached EOF")
                return
            for message in self._codec.feed(chunk):
                yield message

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        writer, self._writer = self._writer, None
        if writer is None:
            return
        # Forced close, no TLS close_notify round trip
        writer.transport.abort()
        logger.debug(f"Closed connection to {self._host}:{self._port}")
