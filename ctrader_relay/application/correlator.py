"""Request/response correlation over one transport.

The remote API answers requests asynchronously on the same stream that also
carries heartbeats and unsolicited events. The correlator owns a single
reader task for the connection and resolves pending waits keyed by the
payload type they expect.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

from ..domain.enums import ERROR_PAYLOAD_TYPES, HEARTBEAT_PAYLOAD_TYPES
from ..domain.exceptions import (
    ConnectException,
    ConnectionClosedException,
    DomainException,
    ProtocolException,
    RemoteProtocolException,
    ResponseTimeoutException,
)
from ..domain.models import ProtocolMessage
from ..ports.transport import MessageTransportPort

logger = logging.getLogger(__name__)


class RequestCorrelator:
    """Matches inbound messages to pending waits on one connection.

    Each pending wait is a single-shot future registered under the payload
    type it expects. It is removed exactly once, on resolution, rejection or
    timeout, so a late reply can never settle a later wait.

    Use as an async context manager to run the reader task::

        async with RequestCorrelator(transport) as correlator:
            reply = await correlator.request(2100, payload, 2101, timeout=12)
    """

    def __init__(
        self,
        transport: MessageTransportPort,
        error_types: frozenset[int] = ERROR_PAYLOAD_TYPES,
        heartbeat_types: frozenset[int] = HEARTBEAT_PAYLOAD_TYPES,
    ):
        self._transport = transport
        self._error_types = error_types
        self._heartbeat_types = heartbeat_types
        self._pending: dict[int, asyncio.Future[ProtocolMessage]] = {}
        self._reader_task: asyncio.Task[None] | None = None
        self._closed_error: ProtocolException | None = None

    @property
    def pending_types(self) -> list[int]:
        """Payload types currently awaited."""
        return list(self._pending)

    async def __aenter__(self) -> RequestCorrelator:
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    def start(self) -> None:
        """Start draining the transport."""
        if self._reader_task is None:
            self._reader_task = asyncio.create_task(self._read_loop())

    async def stop(self) -> None:
        """Stop the reader task and fail whatever is still pending."""
        task, self._reader_task = self._reader_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._closed_error is None:
            self._closed_error = ConnectionClosedException("Correlator stopped")
        self._fail_pending(self._closed_error)

    async def _read_loop(self) -> None:
        try:
            async for message in self._transport.messages():
                self.dispatch(message)
        except asyncio.CancelledError:
            raise
        except ProtocolException as e:
            self._closed_error = e
        except Exception as e:
            self._closed_error = ConnectException(f"Connection error: {e}")
        else:
            self._closed_error = ConnectionClosedException()
        logger.debug(f"Reader stopped: {self._closed_error.message}")
        self._fail_pending(self._closed_error)

    def dispatch(self, message: ProtocolMessage) -> None:
        """Route one inbound message to the wait it settles, if any."""
        payload_type = message.payload_type

        future = self._pending.pop(payload_type, None)
        if future is not None:
            if not future.done():
                future.set_result(message)
            return

        if payload_type in self._error_types:
            error = RemoteProtocolException.from_payload(payload_type, message.payload)
            if self._pending:
                logger.warning(f"Remote error while awaiting {self.pending_types}: {error.message}")
            else:
                logger.warning(f"Unsolicited remote error: {error.message}")
            self._fail_pending(error)
            return

        if payload_type in self._heartbeat_types:
            logger.debug("Heartbeat received")
        else:
            logger.debug(f"Ignoring unsolicited message {message.type_name}")

    def _fail_pending(self, error: DomainException) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)

    def expect(self, want_type: int) -> asyncio.Future[ProtocolMessage]:
        """Register a wait for ``want_type`` before triggering it.

        Raises:
            ProtocolException: If the stream has already ended
            ValueError: If a wait for the same type is already pending
        """
        if self._closed_error is not None:
            raise self._closed_error
        want_type = int(want_type)
        if want_type in self._pending:
            raise ValueError(f"Already awaiting payloadType {want_type}")
        future: asyncio.Future[ProtocolMessage] = asyncio.get_running_loop().create_future()
        self._pending[want_type] = future
        return future

    async def _settle(
        self, want_type: int, future: asyncio.Future[ProtocolMessage], timeout: float
    ) -> ProtocolMessage:
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except TimeoutError:
            raise ResponseTimeoutException(want_type, timeout) from None
        finally:
            if self._pending.get(want_type) is future:
                del self._pending[want_type]

    async def wait_for(self, want_type: int, timeout: float) -> ProtocolMessage:
        """Wait for the next message of ``want_type``.

        Raises:
            ResponseTimeoutException: If nothing matching arrives in time
            RemoteProtocolException: If an error-type message arrives first
            ConnectionClosedException: If the stream ends first
        """
        want_type = int(want_type)
        future = self._pending.get(want_type) or self.expect(want_type)
        return await self._settle(want_type, future, timeout)

    async def send(self, payload_type: int, payload: dict[str, Any]) -> None:
        """Write one request without waiting for its reply."""
        message = ProtocolMessage.create(payload_type, payload)
        logger.debug(f"Sending {message.type_name} ({message.client_msg_id})")
        await self._transport.send(message)

    async def request(
        self,
        payload_type: int,
        payload: dict[str, Any],
        want_type: int,
        timeout: float,
    ) -> ProtocolMessage:
        """Send a request and wait for its reply.

        The wait is registered before the request is written, so a reply
        can't slip past between the two.
        """
        want_type = int(want_type)
        future = self.expect(want_type)
        try:
            await self.send(payload_type, payload)
        except BaseException:
            if self._pending.get(want_type) is future:
                del self._pending[want_type]
            future.cancel()
            raise
        return await self._settle(want_type, future, timeout)
