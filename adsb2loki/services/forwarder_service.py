import asyncio
import logging
import time
from typing import Dict, Optional

from opentelemetry import trace

from ..collectors.dump1090 import Dump1090Collector
from ..config.loader import Config
from ..exceptions import Adsb2LokiError
from ..utils.tracing import set_span_error
from .loki_client import LokiClient
from .transform import to_log_entries


class ForwarderService:
    """Runs fetch -> transform -> push cycles on a fixed-rate ticker"""

    def __init__(self, collector: Dump1090Collector, loki_client: LokiClient,
                 interval: float = 5.0, logger: Optional[logging.Logger] = None,
                 tracer: Optional[trace.Tracer] = None):
        self.collector = collector
        self.loki_client = loki_client
        self.interval = interval
        self.logger = logger or logging.getLogger(__name__)
        self.tracer = tracer or trace.NoOpTracer()

        self._cycle_task: Optional[asyncio.Task] = None
        self.stats = {
            "cycles": 0,
            "successes": 0,
            "failures": 0,
            "skipped_ticks": 0,
            "last_error": None
        }

    @classmethod
    def from_config(cls, config: Config, logger: Optional[logging.Logger] = None,
                    tracer: Optional[trace.Tracer] = None) -> "ForwarderService":
        collector = Dump1090Collector(config.flight_data_url, timeout=config.fetch_timeout,
                                      logger=logger, tracer=tracer)
        loki_client = LokiClient(
            config.loki_url,
            tenant_id=config.grafana_tenant_id,
            password=config.grafana_password,
            timeout=config.push_timeout,
            logger=logger,
            tracer=tracer
        )
        return cls(collector, loki_client, interval=config.poll_interval, logger=logger, tracer=tracer)

    async def run_cycle(self) -> int:
        """Fetch one snapshot and push it; returns the number of entries pushed"""
        cycle_start = time.time()

        snapshot = await self.collector.fetch_data()
        entries = to_log_entries(snapshot)

        if not entries:
            self.logger.debug("No aircraft in snapshot, nothing to push")
            return 0

        await self.loki_client.push_logs(entries)

        self.logger.info(
            f"Forwarded {len(entries)} aircraft to Loki in {time.time() - cycle_start:.2f}s"
        )
        return len(entries)

    async def run_once(self) -> bool:
        """Run one cycle, logging instead of raising on failure"""
        self.stats["cycles"] += 1
        cycle_start = time.time()

        with self.tracer.start_as_current_span(
            "adsb2loki.fetch_cycle", record_exception=False, set_status_on_exception=False
        ) as span:
            try:
                pushed = await self.run_cycle()
            except Adsb2LokiError as e:
                set_span_error(span, e)
                self.stats["failures"] += 1
                self.stats["last_error"] = e.message
                self.logger.error(
                    f"Cycle failed after {time.time() - cycle_start:.2f}s: "
                    f"{type(e).__name__}: {e.message} {e.details}"
                )
                return False
            except asyncio.CancelledError:
                self.logger.debug("Cycle cancelled")
                raise
            except Exception as e:
                set_span_error(span, e)
                self.stats["failures"] += 1
                self.stats["last_error"] = str(e)
                self.logger.exception(f"Unexpected error in cycle: {e}")
                return False

            span.set_attribute("adsb.entries_pushed", pushed)

        self.stats["successes"] += 1
        return True

    @property
    def cycle_in_flight(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    def _tick(self):
        if self.cycle_in_flight:
            self.stats["skipped_ticks"] += 1
            self.logger.warning("Previous cycle still running, skipping tick")
            return
        self._cycle_task = asyncio.create_task(self.run_once())

    async def run_continuous(self, stop_event: asyncio.Event):
        """Tick every interval until stop_event is set.

        Ticks follow a fixed schedule regardless of how long a cycle takes.
        """
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval

        self.logger.info(f"Starting data fetch loop (interval {self.interval}s)")

        try:
            while not stop_event.is_set():
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=max(0.0, next_tick - loop.time()))
                except asyncio.TimeoutError:
                    pass
                else:
                    break

                self._tick()
                next_tick += self.interval
                now = loop.time()
                if next_tick <= now:
                    # missed ticks are dropped, not replayed
                    next_tick += ((now - next_tick) // self.interval + 1) * self.interval
        finally:
            if self.cycle_in_flight:
                self._cycle_task.cancel()
                try:
                    await self._cycle_task
                except asyncio.CancelledError:
                    pass

        self.logger.info("Data fetch loop stopped")

    def get_stats(self) -> Dict:
        return {
            **self.stats,
            "interval": self.interval,
            "collector": self.collector.get_stats(),
            "loki": self.loki_client.get_stats()
        }
