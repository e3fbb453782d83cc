"""Domain layer - protocol catalogue, models, exceptions and symbol tables."""

from .enums import ERROR_PAYLOAD_TYPES, HEARTBEAT_PAYLOAD_TYPES, PayloadType, TransportKind
from .exceptions import (
    ConfigurationException,
    ConnectException,
    ConnectionClosedException,
    ConnectTimeoutException,
    DomainException,
    MalformedFrameException,
    PayloadTooLargeException,
    ProtocolException,
    RemoteProtocolException,
    ResponseTimeoutException,
    SyncValidationException,
    UnauthorizedException,
)
from .models import (
    REQUIRED_SYNC_FIELDS,
    ProtocolMessage,
    ServiceConfiguration,
    SessionLimits,
    SyncRequest,
    SyncResult,
)
from .symbols import SymbolCatalog

__all__ = [
    "ERROR_PAYLOAD_TYPES",
    "HEARTBEAT_PAYLOAD_TYPES",
    "REQUIRED_SYNC_FIELDS",
    "ConfigurationException",
    "ConnectException",
    "ConnectTimeoutException",
    "ConnectionClosedException",
    "DomainException",
    "MalformedFrameException",
    "PayloadTooLargeException",
    "PayloadType",
    "ProtocolException",
    "ProtocolMessage",
    "RemoteProtocolException",
    "ResponseTimeoutException",
    "ServiceConfiguration",
    "SessionLimits",
    "SymbolCatalog",
    "SyncRequest",
    "SyncResult",
    "SyncValidationException",
    "TransportKind",
    "UnauthorizedException",
]
