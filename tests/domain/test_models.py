"""Tests for domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ctrader_relay.domain.enums import PayloadType
from ctrader_relay.domain.models import (
    ProtocolMessage,
    ServiceConfiguration,
    SyncRequest,
    SyncResult,
)


class TestProtocolMessage:
    """Test cases for the protocol message envelope."""

    def test_parses_wire_aliases(self):
        """Test parsing the camelCase wire form."""
        message = ProtocolMessage.model_validate(
            {"payloadType": 2101, "clientMsgId": "abc", "payload": {"x": 1}}
        )

        assert message.payload_type == 2101
        assert message.client_msg_id == "abc"
        assert message.payload == {"x": 1}

    def test_coerces_string_payload_type(self):
        """Test that a string payload type is accepted."""
        message = ProtocolMessage.model_validate({"payloadType": "2156", "payload": {}})
        assert message.payload_type == PayloadType.DEAL_LIST_RES

    def test_missing_fields_default(self):
        """Test defaults for heartbeat-like messages without payload."""
        message = ProtocolMessage.model_validate({"payloadType": 51, "payload": None})

        assert message.payload == {}
        assert message.client_msg_id is None

    def test_missing_payload_type_defaults_to_zero(self):
        """Test that a message without payloadType dispatches as 0."""
        assert ProtocolMessage.model_validate({}).payload_type == 0

    def test_create_assigns_unique_client_ids(self):
        """Test that every outbound message gets its own id."""
        first = ProtocolMessage.create(PayloadType.APPLICATION_AUTH_REQ, {"clientId": "a"})
        second = ProtocolMessage.create(PayloadType.APPLICATION_AUTH_REQ, {"clientId": "a"})

        assert first.client_msg_id != second.client_msg_id
        assert first.client_msg_id.startswith("relay_")

    def test_to_wire_uses_camel_case(self):
        """Test the wire representation."""
        message = ProtocolMessage.create(2100, {"clientId": "a"})
        wire = message.to_wire()

        assert set(wire) == {"payloadType", "clientMsgId", "payload"}
        assert wire["payloadType"] == 2100

    def test_type_name(self):
        """Test readable payload type names for logs."""
        assert ProtocolMessage(payload_type=2142).type_name == "OA_ERROR_RES"
        assert ProtocolMessage(payload_type=9999).type_name == "9999"


class TestSyncRequest:
    """Test cases for the sync request model."""

    def test_coerces_numeric_strings(self, sync_body):
        """Test that numeric fields accept strings."""
        request = SyncRequest.model_validate(sync_body)

        assert request.ctid_account_id == 987654
        assert request.from_timestamp == 0
        assert request.to_timestamp == 1_700_000_000_000

    def test_numeric_client_id_becomes_text(self, sync_body):
        """Test that numbers are accepted for text credentials."""
        sync_body["clientId"] = 1234
        assert SyncRequest.model_validate(sync_body).client_id == "1234"

    def test_rejects_non_numeric_account(self, sync_body):
        """Test that a non-numeric account id is invalid."""
        sync_body["ctidAccountId"] = "abc"
        with pytest.raises(ValidationError):
            SyncRequest.model_validate(sync_body)

    def test_repr_hides_credentials(self, sync_body):
        """Test that credentials never appear in the representation."""
        text = repr(SyncRequest.model_validate(sync_body))

        assert "s3cr3t" not in text
        assert "token-xyz" not in text
        assert "987654" in text


class TestSyncResult:
    """Test cases for the sync result aggregate."""

    def test_to_response_with_lot_sizes(self):
        """Test the success envelope."""
        result = SyncResult(
            deals=[{"dealId": 1, "symbolId": 7}],
            symbols={7: "EURUSD"},
            lot_sizes={7: 100000},
            pages=1,
            total=1,
        )

        assert result.to_response() == {
            "ok": True,
            "deals": [{"dealId": 1, "symbolId": 7}],
            "symbols": {7: "EURUSD"},
            "lotSizes": {7: 100000},
            "pages": 1,
            "total": 1,
        }

    def test_to_response_without_lot_sizes(self):
        """Test that the lot-size table is omitted when not fetched."""
        response = SyncResult().to_response()

        assert "lotSizes" not in response
        assert response["total"] == 0

    def test_total_must_match_deals(self):
        """Test that an inconsistent total is rejected."""
        with pytest.raises(ValidationError):
            SyncResult(deals=[{"dealId": 1}], pages=1, total=2)

    def test_is_frozen(self):
        """Test immutability after construction."""
        result = SyncResult()
        with pytest.raises(ValidationError):
            result.pages = 3


class TestServiceConfiguration:
    """Test cases for the service configuration."""

    def test_defaults(self):
        """Test reference defaults."""
        config = ServiceConfiguration()

        assert config.remote_port == 5036
        assert config.limits.connect_timeout == 12.0
        assert config.limits.deals_per_page == 500
        assert config.limits.max_pages == 40
        assert config.limits.symbol_detail_chunk_size == 50
        assert not config.is_protected

    def test_secret_not_in_repr(self):
        """Test that the relay secret is hidden."""
        config = ServiceConfiguration(relay_secret="topsecret")

        assert config.is_protected
        assert "topsecret" not in repr(config)
