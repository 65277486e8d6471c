"""
Tests for custom exception classes
"""

import pytest
from adsb2loki.exceptions import (
    Adsb2LokiError,
    NetworkError,
    HTTPStatusError,
    AuthenticationError,
    DecodeError,
    EncodeError,
    ConfigurationError,
)


class TestExceptions:
    """Test custom exception classes."""

    def test_base_error(self):
        """Test base Adsb2LokiError."""
        error = Adsb2LokiError("Test error", {"key": "value"})
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details == {"key": "value"}

    def test_network_error(self):
        error = NetworkError("http://receiver.test/data/aircraft.json", "timeout", {"timeout": 30})
        assert "timeout" in str(error)
        assert "http://receiver.test/data/aircraft.json" in str(error)
        assert error.cause == "timeout"
        assert error.details["timeout"] == 30

    def test_http_status_error(self):
        error = HTTPStatusError("http://loki.test/loki/api/v1/push", 503, "Service Unavailable")
        assert "503" in str(error)
        assert "Service Unavailable" in str(error)
        assert error.status_code == 503
        assert error.reason == "Service Unavailable"

        # Test with minimal parameters
        error2 = HTTPStatusError("http://loki.test", 500)
        assert error2.reason is None
        assert error2.details == {}

    def test_authentication_error(self):
        error = AuthenticationError("http://loki.test/loki/api/v1/push", {"tenant_id": "123456"})
        assert "401" in str(error)
        assert "Authentication failed" in str(error)
        assert error.status_code == 401
        assert isinstance(error, HTTPStatusError)

    def test_decode_error(self):
        error = DecodeError("http://receiver.test", "invalid JSON")
        assert "invalid JSON" in str(error)
        assert error.url == "http://receiver.test"

    def test_encode_error(self):
        error = EncodeError("abc123", "Out of range float", {"index": 3})
        assert "abc123" in str(error)
        assert error.hex == "abc123"
        assert error.details["index"] == 3

    def test_configuration_error(self):
        error = ConfigurationError("loki_url", "Field required")
        assert "loki_url" in str(error)
        assert error.config_item == "loki_url"
        assert error.reason == "Field required"

    @pytest.mark.parametrize("exc", [
        NetworkError("http://x", "connection"),
        HTTPStatusError("http://x", 500),
        AuthenticationError("http://x"),
        DecodeError("http://x", "reason"),
        EncodeError("abc123", "reason"),
        ConfigurationError("item", "reason"),
    ])
    def test_exception_inheritance(self, exc):
        """Test that all exceptions inherit from Adsb2LokiError."""
        assert isinstance(exc, Adsb2LokiError)
        assert isinstance(exc, Exception)
