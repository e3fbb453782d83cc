"""Domain models for the cTrader relay.

This module contains the protocol message envelope, the sync request and
result aggregates, and the service configuration, all as Pydantic v2 models.
Domain models are free from any infrastructure dependencies.
"""

from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import PayloadType, TransportKind

# Wire names of the sync request, in the order they are reported when missing
REQUIRED_SYNC_FIELDS: tuple[str, ...] = (
    "host",
    "clientId",
    "clientSecret",
    "accessToken",
    "ctidAccountId",
    "fromTimestamp",
    "toTimestamp",
)


def new_client_msg_id() -> str:
    """Generate a unique client message id."""
    return f"relay_{int(time.time() * 1000)}_{uuid.uuid4().hex[:10]}"


class ProtocolMessage(BaseModel):
    """One cTrader Open API JSON message.

    ``payload_type`` is the dispatch key. Inbound messages from the remote
    side may carry it as a string, and may omit ``clientMsgId`` entirely.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    payload_type: int = Field(default=0, alias="payloadType", description="Dispatch key")
    client_msg_id: str | None = Field(
        default=None, alias="clientMsgId", description="Client-side correlation tag"
    )
    payload: dict[str, Any] = Field(default_factory=dict, description="Message body")

    @field_validator("payload", mode="before")
    @classmethod
    def default_empty_payload(cls, v: Any) -> Any:
        """Treat a null payload as an empty one."""
        return {} if v is None else v

    @field_validator("client_msg_id", mode="before")
    @classmethod
    def stringify_client_msg_id(cls, v: Any) -> Any:
        """Accept numeric message ids."""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @classmethod
    def create(cls, payload_type: int, payload: dict[str, Any] | None = None) -> ProtocolMessage:
        """Build an outbound message with a fresh client message id."""
        return cls(
            payload_type=int(payload_type),
            client_msg_id=new_client_msg_id(),
            payload=payload or {},
        )

    def to_wire(self) -> dict[str, Any]:
        """Return the message as the JSON object sent on the wire."""
        return self.model_dump(by_alias=True)

    @property
    def type_name(self) -> str:
        """Human-readable payload type for logging."""
        try:
            return PayloadType(self.payload_type).name
        except ValueError:
            return str(self.payload_type)


class SyncRequest(BaseModel):
    """Validated request to pull the trade history of one trading account."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )

    host: str = Field(..., min_length=1, description="cTrader API host name")
    client_id: str = Field(..., alias="clientId", min_length=1)
    client_secret: str = Field(..., alias="clientSecret", min_length=1)
    access_token: str = Field(..., alias="accessToken", min_length=1)
    ctid_account_id: int = Field(..., alias="ctidAccountId", description="ctidTraderAccountId")
    from_timestamp: int = Field(..., alias="fromTimestamp", ge=0, description="Epoch millis")
    to_timestamp: int = Field(..., alias="toTimestamp", ge=0, description="Epoch millis")

    def __repr__(self) -> str:
        # Credentials stay out of logs and tracebacks
        return (
            f"SyncRequest(host={self.host!r}, ctid_account_id={self.ctid_account_id}, "
            f"from_timestamp={self.from_timestamp}, to_timestamp={self.to_timestamp})"
        )

    __str__ = __repr__


class SyncResult(BaseModel):
    """Aggregate produced by one sync: deals plus symbol lookup tables."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    deals: list[dict[str, Any]] = Field(default_factory=list, description="Deals in page order")
    symbols: dict[int, str] = Field(default_factory=dict, description="symbolId -> name")
    lot_sizes: dict[int, int | float] | None = Field(
        default=None, alias="lotSizes", description="symbolId -> units per lot"
    )
    pages: int = Field(default=0, ge=0, description="Non-empty pages retrieved")
    total: int = Field(default=0, ge=0, description="Number of deals")

    @model_validator(mode="after")
    def check_total(self) -> SyncResult:
        """Ensure the total matches the deal list."""
        if self.total != len(self.deals):
            raise ValueError(f"total {self.total} does not match {len(self.deals)} deals")
        return self

    def to_response(self) -> dict[str, Any]:
        """Render the successful result envelope."""
        response: dict[str, Any] = {
            "ok": True,
            "deals": list(self.deals),
            "symbols": dict(self.symbols),
        }
        if self.lot_sizes is not None:
            response["lotSizes"] = dict(self.lot_sizes)
        response["pages"] = self.pages
        response["total"] = self.total
        return response


class SessionLimits(BaseModel):
    """Timeouts and bounds of the protocol exchange (seconds / counts)."""

    model_config = ConfigDict(strict=True, frozen=True)

    connect_timeout: float = Field(default=12.0, gt=0)
    auth_timeout: float = Field(default=12.0, gt=0)
    symbol_list_timeout: float = Field(default=15.0, gt=0)
    deal_page_timeout: float = Field(default=20.0, gt=0)
    symbol_detail_timeout: float = Field(default=15.0, gt=0)
    deals_per_page: int = Field(default=500, ge=1)
    max_pages: int = Field(default=40, ge=1)
    symbol_detail_chunk_size: int = Field(default=50, ge=1)


class ServiceConfiguration(BaseModel):
    """Domain model for service configuration."""

    model_config = ConfigDict(strict=True, frozen=True)

    api_port: int = Field(default=3000, ge=1, le=65535, description="HTTP listen port")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )
    relay_secret: str = Field(default="", repr=False, description="Shared secret for callers")
    transport: TransportKind = Field(default=TransportKind.TCP, description="Wire variant")
    remote_port: int = Field(default=5036, ge=1, le=65535, description="cTrader JSON port")
    include_lot_sizes: bool = Field(default=True, description="Fetch symbol lot sizes")
    max_body_bytes: int = Field(default=2_000_000, ge=1, description="Request body limit")
    limits: SessionLimits = Field(default_factory=SessionLimits)

    @property
    def is_protected(self) -> bool:
        """Whether a relay secret is configured."""
        return bool(self.relay_secret)


class ValidationLevel(str, Enum):
    """Value object representing validation issue severity levels."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ValidationIssue(BaseModel):
    """Value object representing a configuration validation issue."""

    model_config = ConfigDict(frozen=True, strict=True)

    level: ValidationLevel = Field(..., description="Issue severity")
    category: str = Field(..., description="Issue category: CONFIG, SECURITY, ...")
    message: str = Field(..., description="Human-readable issue description")
    resolution: str | None = Field(None, description="Suggested resolution steps")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Ensure category is uppercase."""
        return v.upper()


class ValidationResult(BaseModel):
    """Aggregate root representing the complete validation result."""

    model_config = ConfigDict(strict=True)

    is_valid: bool = Field(default=True, description="Overall validation status")
    context: str = Field(default="", description="Validation context")
    issues: list[ValidationIssue] = Field(default_factory=list, description="All validation issues")

    def add_issue(self, issue: ValidationIssue) -> None:
        """Add a validation issue to the result."""
        self.issues.append(issue)
        if issue.level == ValidationLevel.ERROR:
            self.is_valid = False

    def get_issues_by_level(self, level: ValidationLevel) -> list[ValidationIssue]:
        """Get all issues of a specific level."""
        return [issue for issue in self.issues if issue.level == level]
