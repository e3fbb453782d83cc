"""TLS WebSocket transport for the cTrader JSON API.

Concrete implementation of the MessageTransportPort where every WebSocket
frame carries exactly one JSON message.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import aiohttp

from ..domain.exceptions import ConnectException, ConnectTimeoutException
from ..domain.models import ProtocolMessage
from ..ports.transport import MessageTransportPort
from .framing import TextFrameCodec

logger = logging.getLogger(__name__)


class WebSocketTransport(MessageTransportPort):
    """One ``wss://`` connection to the remote API."""

    def __init__(self, host: str, port: int = 5036, connect_timeout: float = 12.0):
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._codec = TextFrameCodec()
        self._session: aiohttp.ClientSession | None = None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._closed = False

    @property
    def url(self) -> str:
        return f"wss://{self._host}:{self._port}"

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed and not self._closed

    async def connect(self) -> None:
        if self._closed:
            raise ConnectException("WebSocket error: transport already closed")
        self._session = aiohttp.ClientSession()
        try:
            self._ws = await asyncio.wait_for(
                self._session.ws_connect(self.url, autoping=True),
                timeout=self._connect_timeout,
            )
        except TimeoutError as e:
            await self.close()
            raise ConnectTimeoutException(self._host, self._port, scheme="WebSocket") from e
        except (aiohttp.ClientError, OSError) as e:
            await self.close()
            raise ConnectException(f"WebSocket error: {e}") from e
        logger.info(f"Connected to {self.url}")

    async def send(self, message: ProtocolMessage) -> None:
        if not self.is_open or self._ws is None:
            raise ConnectException("WebSocket error: not connected")
        try:
            await self._ws.send_str(self._codec.encode(message))
        except (aiohttp.ClientError, ConnectionResetError) as e:
            raise ConnectException(f"WebSocket error: {e}") from e

    async def messages(self) -> AsyncIterator[ProtocolMessage]:
        if self._ws is None:
            raise ConnectException("WebSocket error: not connected")
        async for frame in self._ws:
            if frame.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                for message in self._codec.feed(frame.data):
                    yield message
            elif frame.type == aiohttp.WSMsgType.ERROR:
                raise ConnectException(f"WebSocket error: {self._ws.exception()}")
        logger.debug(f"WebSocket {self.url} closed")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        ws, self._ws = self._ws, None
        session, self._session = self._session, None
        try:
            if ws is not None:
                await ws.close()
        finally:
            if session is not None:
                await session.close()
        logger.debug(f"Closed connection to {self.url}")
