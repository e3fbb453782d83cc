"""Tests for domain exceptions."""

from __future__ import annotations

from ctrader_relay.domain.exceptions import (
    ConnectTimeoutException,
    ProtocolException,
    RemoteProtocolException,
    ResponseTimeoutException,
)


class TestRemoteProtocolException:
    """Test cases for remote error rendering."""

    def test_prefers_description(self):
        """Test that the description is used when present."""
        error = RemoteProtocolException.from_payload(
            2142, {"errorCode": "CH_CLIENT_AUTH_FAILURE", "description": "Bad credentials"}
        )

        assert error.message == "cTrader error (2142): Bad credentials"
        assert error.remote_error_code == "CH_CLIENT_AUTH_FAILURE"
        assert error.error_code == "REMOTE_ERROR"

    def test_falls_back_to_error_code(self):
        """Test the error code fallback."""
        error = RemoteProtocolException.from_payload(50, {"errorCode": "INVALID_REQUEST"})
        assert error.message == "cTrader error (50): INVALID_REQUEST"

    def test_falls_back_to_payload_json(self):
        """Test the serialized payload fallback."""
        error = RemoteProtocolException.from_payload(2142, {"foo": 1})
        assert error.message == 'cTrader error (2142): {"foo": 1}'


def test_protocol_exception_hierarchy():
    """Test that transport and response failures share one base."""
    assert isinstance(ConnectTimeoutException("h", 5036), ProtocolException)
    assert isinstance(ResponseTimeoutException(2101, 12), ProtocolException)


def test_timeout_messages_name_target():
    """Test the messages of timeout errors."""
    assert ConnectTimeoutException("h", 5036).message == "TCP connect timeout to h:5036"
    assert ResponseTimeoutException(2101, 12).message == "Timeout waiting for payloadType 2101"
