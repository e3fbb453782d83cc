"""Domain exceptions for the cTrader relay.

Every failure the relay can report carries a stable error code so the
service boundary and the HTTP layer can render it uniformly.
"""

from __future__ import annotations

import json
from typing import Any


class DomainException(Exception):
    """Base exception for all domain-related errors."""

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class SyncValidationException(DomainException):
    """Raised when a sync request is missing fields or has unusable values."""

    def __init__(self, message: str, missing_fields: list[str] | None = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.missing_fields = missing_fields or []


class ConfigurationException(DomainException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class UnauthorizedException(DomainException):
    """Raised when the shared relay secret is missing or wrong."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "UNAUTHORIZED")


class PayloadTooLargeException(DomainException):
    """Raised when a request body exceeds the configured limit."""

    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes", "PAYLOAD_TOO_LARGE")
        self.limit = limit


class ProtocolException(DomainException):
    """Base for failures of the exchange with the remote API."""


class ConnectTimeoutException(ProtocolException):
    """Raised when the connection is not established in time."""

    def __init__(self, host: str, port: int, scheme: str = "TCP"):
        super().__init__(f"{scheme} connect timeout to {host}:{port}", "CONNECT_TIMEOUT")
        self.host = host
        self.port = port


class ConnectException(ProtocolException):
    """Raised when the network or TLS layer fails."""

    def __init__(self, message: str):
        super().__init__(message, "CONNECT_ERROR")


class ConnectionClosedException(ProtocolException):
    """Raised when the remote side closes the stream while a reply is pending."""

    def __init__(self, message: str = "Connection closed by remote host"):
        super().__init__(message, "CONNECTION_CLOSED")


class ResponseTimeoutException(ProtocolException):
    """Raised when no reply of the awaited payload type arrives in time."""

    def __init__(self, payload_type: int, timeout: float):
        super().__init__(f"Timeout waiting for payloadType {payload_type}", "RESPONSE_TIMEOUT")
        self.payload_type = payload_type
        self.timeout = timeout


class RemoteProtocolException(ProtocolException):
    """Raised when the remote API answers with an error message."""

    def __init__(
        self,
        payload_type: int,
        description: str,
        remote_error_code: str | None = None,
    ):
        super().__init__(f"cTrader error ({payload_type}): {description}", "REMOTE_ERROR")
        self.payload_type = payload_type
        self.description = description
        self.remote_error_code = remote_error_code

    @classmethod
    def from_payload(cls, payload_type: int, payload: dict[str, Any]) -> RemoteProtocolException:
        """Build the exception from an error message payload."""
        error_code = payload.get("errorCode")
        description = payload.get("description")
        if description is None:
            description = error_code if error_code is not None else json.dumps(payload)
        return cls(
            payload_type,
            str(description),
            str(error_code) if error_code is not None else None,
        )


class MalformedFrameException(DomainException):
    """Raised by codecs for unparseable or oversize frames."""

    def __init__(self, message: str):
        super().__init__(message, "MALFORMED_FRAME")
