"""Domain enums for the cTrader Open API wire catalogue.

Payload types are the dispatch key of every protocol message. Only the
subset used by the trade history exchange is listed here.
"""

from enum import Enum, IntEnum


class PayloadType(IntEnum):
    """cTrader Open API payload type codes."""

    ERROR_RES = 50  # Common error response
    HEARTBEAT_EVENT = 51
    APPLICATION_AUTH_REQ = 2100
    APPLICATION_AUTH_RES = 2101
    ACCOUNT_AUTH_REQ = 2102
    ACCOUNT_AUTH_RES = 2103
    SYMBOL_BY_ID_REQ = 2116
    SYMBOL_BY_ID_RES = 2117
    SYMBOLS_LIST_REQ = 2119
    SYMBOLS_LIST_RES = 2120
    OA_ERROR_RES = 2142  # Open API error response
    DEAL_LIST_REQ = 2155
    DEAL_LIST_RES = 2156


ERROR_PAYLOAD_TYPES = frozenset({PayloadType.ERROR_RES, PayloadType.OA_ERROR_RES})
HEARTBEAT_PAYLOAD_TYPES = frozenset({PayloadType.HEARTBEAT_EVENT})


class TransportKind(str, Enum):
    """Wire variant used to reach the remote API.

    Both variants speak the same JSON messages; they differ only in framing.
    """

    TCP = "tcp"  # TLS stream with 4-byte big-endian length prefix
    WEBSOCKET = "websocket"  # TLS WebSocket, one JSON message per frame
