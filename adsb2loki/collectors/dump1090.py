import time
import logging
from typing import Optional
import httpx
from opentelemetry import trace
from pydantic import ValidationError

from .base import BaseCollector
from ..models.aircraft import AircraftSnapshot
from ..exceptions import DecodeError, HTTPStatusError, NetworkError

DEFAULT_TIMEOUT = 30.0


class Dump1090Collector(BaseCollector):
    """dump1090 ADS-B receiver collector"""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT, name: Optional[str] = None,
                 logger: Optional[logging.Logger] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 tracer: Optional[trace.Tracer] = None):
        super().__init__(url, name=name or "dump1090", logger=logger or logging.getLogger(__name__))
        self.timeout = timeout
        self.transport = transport
        self.tracer = tracer or trace.NoOpTracer()

        self.logger.debug(f"dump1090 collector configured for {self.name} at {self.url} (timeout {self.timeout}s)")

    async def fetch_data(self) -> AircraftSnapshot:
        """Fetch and decode one aircraft.json snapshot from the receiver"""
        with self.tracer.start_as_current_span(
            "adsb2loki.fetch",
            attributes={"http.request.method": "GET", "url.full": self.url}
        ) as span:
            snapshot = await self._fetch_snapshot(span)
            span.set_attribute("adsb.aircraft_count", len(snapshot.aircraft))
            return snapshot

    async def _fetch_snapshot(self, span: trace.Span) -> AircraftSnapshot:
        fetch_start = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url)
        except httpx.TimeoutException as e:
            self.update_stats(False)
            raise NetworkError(
                url=self.url,
                cause="timeout",
                details={'error': str(e), 'timeout': self.timeout,
                         'duration_ms': _elapsed_ms(fetch_start)}
            ) from e
        except httpx.RequestError as e:
            self.update_stats(False)
            raise NetworkError(
                url=self.url,
                cause="connection",
                details={'error': str(e), 'duration_ms': _elapsed_ms(fetch_start)}
            ) from e

        fetch_time = time.time() - fetch_start
        self.logger.debug(f"GET {self.url} -> {response.status_code} in {fetch_time * 1000:.0f}ms")
        span.set_attribute("http.response.status_code", response.status_code)

        if response.status_code != 200:
            self.update_stats(False)
            raise HTTPStatusError(
                url=self.url,
                status_code=response.status_code,
                reason=response.reason_phrase,
                details={'duration_ms': _elapsed_ms(fetch_start)}
            )

        try:
            data = response.json()
        except ValueError as e:
            self.update_stats(False)
            raise DecodeError(url=self.url, reason=f"invalid JSON: {e}") from e

        try:
            snapshot = AircraftSnapshot.model_validate(data)
        except ValidationError as e:
            self.update_stats(False)
            raise DecodeError(
                url=self.url,
                reason="response does not match aircraft snapshot shape",
                details={'errors': e.errors(include_url=False)}
            ) from e

        self.update_stats(True, len(snapshot.aircraft))

        self.logger.debug(
            f"dump1090 ({self.name}): {len(snapshot.aircraft)} aircraft, "
            f"now={snapshot.now}, messages={snapshot.messages}, fetched in {fetch_time:.2f}s"
        )

        return snapshot

    def get_stats(self) -> dict:
        """Get collector statistics including dump1090-specific info"""
        stats = super().get_stats()
        stats.update({
            "local_receiver": True,
            "timeout": self.timeout
        })
        return stats


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)
