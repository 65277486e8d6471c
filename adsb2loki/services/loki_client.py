import time
import logging
from typing import Dict, List, Optional
import httpx
from opentelemetry import trace

from ..models.log_entry import LogEntry
from ..exceptions import AuthenticationError, HTTPStatusError, NetworkError

PUSH_PATH = "/loki/api/v1/push"
DEFAULT_TIMEOUT = 10.0


class LokiClient:
    """Pushes log entries to a Loki (or Grafana Cloud Logs) push endpoint.

    Credentials are fixed at construction. When both the tenant id and the
    password are set, requests carry HTTP Basic auth with the tenant id as
    username; otherwise no auth header is sent.
    """

    def __init__(self, url: str, tenant_id: str = "", password: str = "",
                 timeout: float = DEFAULT_TIMEOUT, logger: Optional[logging.Logger] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 tracer: Optional[trace.Tracer] = None):
        self.url = url.rstrip("/")
        self.push_url = self.url + PUSH_PATH
        self.tenant_id = tenant_id or ""
        self._password = password or ""
        self.timeout = timeout
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.tracer = tracer or trace.NoOpTracer()

        self.stats = {
            "pushes": 0,
            "failures": 0,
            "entries_pushed": 0,
            "last_push": None
        }

        self.logger.debug(
            f"Loki client created: url={self.url} timeout={self.timeout}s "
            f"auth={self.is_authenticated} tenant_id={self.tenant_id or '-'} "
            f"password_set={bool(self._password)}"
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.tenant_id and self._password)

    def build_payload(self, entries: List[LogEntry]) -> Dict:
        """Build the push body: one stream per entry, never merged"""
        return {
            "streams": [
                {"stream": dict(entry.labels), "values": [entry.to_value()]}
                for entry in entries
            ]
        }

    async def push_logs(self, entries: List[LogEntry]) -> None:
        """Send entries to Loki; raises on any failure"""
        if not entries:
            self.logger.debug("No entries to push, skipping")
            return

        with self.tracer.start_as_current_span(
            "adsb2loki.push",
            attributes={"http.request.method": "POST", "url.full": self.push_url,
                        "loki.entries_count": len(entries)}
        ) as span:
            await self._post(entries, span)

    async def _post(self, entries: List[LogEntry], span: trace.Span) -> None:
        payload = self.build_payload(entries)
        auth = httpx.BasicAuth(self.tenant_id, self._password) if self.is_authenticated else None

        push_start = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.push_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    auth=auth
                )
        except httpx.TimeoutException as e:
            self.stats["failures"] += 1
            raise NetworkError(
                url=self.push_url,
                cause="timeout",
                details={'error': str(e), 'timeout': self.timeout, 'entries_count': len(entries)}
            ) from e
        except httpx.RequestError as e:
            self.stats["failures"] += 1
            raise NetworkError(
                url=self.push_url,
                cause="connection",
                details={'error': str(e), 'entries_count': len(entries)}
            ) from e

        duration_ms = int((time.time() - push_start) * 1000)
        self.logger.debug(f"POST {self.push_url} -> {response.status_code} in {duration_ms}ms "
                          f"({len(entries)} entries)")
        span.set_attribute("http.response.status_code", response.status_code)

        if response.status_code == 401:
            self.stats["failures"] += 1
            raise AuthenticationError(
                url=self.push_url,
                details={'tenant_id': self.tenant_id, 'duration_ms': duration_ms}
            )

        if response.status_code >= 400:
            self.stats["failures"] += 1
            raise HTTPStatusError(
                url=self.push_url,
                status_code=response.status_code,
                reason=response.reason_phrase,
                details={'duration_ms': duration_ms, 'entries_count': len(entries)}
            )

        self.stats["pushes"] += 1
        self.stats["entries_pushed"] += len(entries)
        self.stats["last_push"] = time.time()

    def get_stats(self) -> Dict:
        return {
            "url": self.url,
            "authenticated": self.is_authenticated,
            **self.stats
        }
