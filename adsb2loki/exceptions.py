"""
adsb2loki Exception Classes

This module defines the error taxonomy shared by the fetch, transform and
push stages so a failed cycle can be logged with enough context to diagnose.
"""

from typing import Optional, Dict, Any


class Adsb2LokiError(Exception):
    """Base exception for all adsb2loki errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(Adsb2LokiError):
    """Raised when a request fails before a response is received"""

    def __init__(self, url: str, cause: str, details: Optional[Dict[str, Any]] = None):
        message = f"Network error ({cause}) contacting {url}"
        super().__init__(message, details)
        self.url = url
        self.cause = cause


class HTTPStatusError(Adsb2LokiError):
    """Raised when an endpoint answers with a non-success status"""

    def __init__(self, url: str, status_code: int, reason: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        message = f"HTTP request to '{url}' failed with status {status_code}"
        if reason:
            message += f" {reason}"
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code
        self.reason = reason


class AuthenticationError(HTTPStatusError):
    """Raised when the ingestion endpoint rejects the credentials"""

    def __init__(self, url: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(url, 401, "Authentication failed", details)


class DecodeError(Adsb2LokiError):
    """Raised when a response body is not a valid aircraft snapshot"""

    def __init__(self, url: str, reason: str, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to decode response from '{url}': {reason}"
        super().__init__(message, details)
        self.url = url
        self.reason = reason


class EncodeError(Adsb2LokiError):
    """Raised when an aircraft record cannot be re-serialized"""

    def __init__(self, hex: str, reason: str, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to encode aircraft '{hex}': {reason}"
        super().__init__(message, details)
        self.hex = hex
        self.reason = reason


class ConfigurationError(Adsb2LokiError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, config_item: str, reason: str, details: Optional[Dict[str, Any]] = None):
        message = f"Configuration error for '{config_item}': {reason}"
        super().__init__(message, details)
        self.config_item = config_item
        self.reason = reason
