"""
Pytest configuration and fixtures for adsb2loki tests
"""

import json
import logging
from typing import Callable, List

import httpx
import pytest

from adsb2loki.config.loader import ENV_VARS

FLIGHT_DATA_URL = "http://receiver.test/data/aircraft.json"
LOKI_URL = "http://loki.test:3100"


@pytest.fixture
def aircraft_payload():
    """The single aircraft used in the end-to-end scenario."""
    return {
        "hex": "abc123",
        "flight": "UAL123",
        "lat": 40.1,
        "lon": -73.9,
        "alt_baro": 35000,
    }


@pytest.fixture
def snapshot_payload(aircraft_payload):
    """Sample dump1090 aircraft.json response."""
    return {
        "now": 1700000000.5,
        "messages": 42,
        "aircraft": [aircraft_payload],
    }


@pytest.fixture
def multi_aircraft_payload():
    """dump1090 response with ground traffic and receiver-specific fields."""
    return {
        "now": 1234567890.5,
        "messages": 1000,
        "aircraft": [
            {
                "hex": "abc123",
                "flight": "TEST001 ",
                "lat": 32.5,
                "lon": -95.5,
                "alt_baro": 35000,
                "alt_geom": 35100,
                "gs": 450.2,
                "squawk": "1234",
                "mlat": [],
                "rssi": -20.5,
            },
            {
                "hex": "def456",
                "alt_baro": "ground",
                "category": "A3",
                "seen": 10.1,
            },
            {
                "hex": "~2a0b1c",
                "type": "tisb_other",
                "messages": 12,
            },
        ]
    }


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it answers."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)

    def json_bodies(self) -> list:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def make_transport():
    """Factory for recording transports."""
    return RecordingTransport


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the config loader reads."""
    for env_name in list(ENV_VARS) + ["CONFIG_FILE"]:
        monkeypatch.delenv(env_name, raising=False)
    return monkeypatch


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            handler.close()
            root_logger.removeHandler(handler)
    # Per-phase capture handlers are re-attached by pytest itself
    for handler in handlers:
        if type(handler).__name__ != "LogCaptureHandler" and handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)
    logging.getLogger("httpx").setLevel(logging.NOTSET)
    logging.getLogger("httpcore").setLevel(logging.NOTSET)
