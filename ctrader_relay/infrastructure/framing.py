"""Frame codecs for the cTrader JSON API.

Two wire variants carry the same JSON messages:

* the raw TLS stream, where each message is a 4-byte unsigned big-endian
  byte length followed by that many bytes of UTF-8 JSON;
* the WebSocket endpoint, where every frame already holds one JSON message.

Codecs are stateful per connection and never raise on bad input; malformed
data is logged and dropped.
"""

from __future__ import annotations

import json
import logging
import struct
from typing import Any

from pydantic import ValidationError

from ..domain.exceptions import MalformedFrameException
from ..domain.models import ProtocolMessage

logger = logging.getLogger(__name__)

HEADER = struct.Struct(">I")
MAX_FRAME_SIZE = 2_000_000


def encode_message(message: ProtocolMessage) -> bytes:
    """Serialize a message to compact UTF-8 JSON."""
    return json.dumps(message.to_wire(), separators=(",", ":")).encode("utf-8")


def decode_message(body: bytes | str) -> ProtocolMessage:
    """Parse one JSON message body.

    Raises:
        MalformedFrameException: If the body is not a JSON object message
    """
    try:
        data: Any = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedFrameException(f"Invalid JSON frame: {e}") from e
    if not isinstance(data, dict):
        raise MalformedFrameException(f"Expected JSON object, got {type(data).__name__}")
    try:
        return ProtocolMessage.model_validate(data)
    except ValidationError as e:
        raise MalformedFrameException(f"Invalid message envelope: {e.error_count()} errors") from e


class LengthPrefixedFrameCodec:
    """Codec for the length-prefixed TLS stream.

    Bytes are buffered across reads, so one ``feed`` may yield zero, one or
    many messages regardless of where the stream was split.
    """

    def __init__(self, max_frame_size: int = MAX_FRAME_SIZE) -> None:
        self._buffer = bytearray()
        self._max_frame_size = max_frame_size

    @property
    def buffered(self) -> int:
        """Number of bytes waiting for the rest of their frame."""
        return len(self._buffer)

    def encode(self, message: ProtocolMessage) -> bytes:
        body = encode_message(message)
        return HEADER.pack(len(body)) + body

    def feed(self, data: bytes) -> list[ProtocolMessage]:
        """Buffer ``data`` and return every message completed by it."""
        self._buffer.extend(data)
        messages: list[ProtocolMessage] = []

        while len(self._buffer) >= HEADER.size:
            (length,) = HEADER.unpack_from(self._buffer)
            if length <= 0 or length > self._max_frame_size:
                # Frame boundaries are lost, nothing after this point is recoverable
                logger.warning(
                    f"Discarding {len(self._buffer)} buffered bytes: invalid frame length {length}"
                )
                self._buffer.clear()
                break

            end = HEADER.size + length
            if len(self._buffer) < end:
                break

            body = bytes(self._buffer[HEADER.size : end])
            del self._buffer[:end]
            try:
                messages.append(decode_message(body))
            except MalformedFrameException as e:
                logger.warning(f"Dropping malformed frame of {length} bytes: {e.message}")

        return messages


class TextFrameCodec:
    """Codec for transports that deliver one message per frame."""

    def encode(self, message: ProtocolMessage) -> str:
        return encode_message(message).decode("utf-8")

    def feed(self, data: bytes | str) -> list[ProtocolMessage]:
        """Parse one inbound frame; malformed frames yield nothing."""
        try:
            return [decode_message(data)]
        except MalformedFrameException as e:
            logger.debug(f"Dropping malformed frame: {e.message}")
            return []
