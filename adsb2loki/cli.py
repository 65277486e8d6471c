#!/usr/bin/env python3
"""
adsb2loki CLI
Poll a dump1090 receiver and forward aircraft to Loki until interrupted
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from opentelemetry import trace

from .config.loader import Config, load_config
from .exceptions import ConfigurationError
from .services.forwarder_service import ForwarderService
from .utils.logging_config import setup_logging
from .utils.tracing import get_tracer, init_tracing, shutdown_tracing
from .version import VERSION_INFO


class ForwarderCLI:
    def __init__(self, config: Config, once: bool = False, tracer: Optional[trace.Tracer] = None):
        self.config = config
        self.once = once
        self.stop_event: Optional[asyncio.Event] = None
        self.forwarder_service = ForwarderService.from_config(config, tracer=tracer)

    def signal_handler(self, signum):
        """Handle shutdown signals"""
        logging.info(f"Received signal {signal.Signals(signum).name}, shutting down...")
        self.stop_event.set()

    async def run(self) -> int:
        """Run the forwarder"""
        self.stop_event = asyncio.Event()

        # Setup signal handlers
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self.signal_handler, signum)

        try:
            if self.config.has_auth:
                logging.info(f"Using Grafana Cloud authentication (tenant {self.config.grafana_tenant_id})")
            else:
                logging.info("No authentication configured - using local Loki instance mode")

            logging.info(f"Forwarding {self.config.flight_data_url} -> {self.config.loki_url}")

            if self.once:
                success = await self.forwarder_service.run_once()
                return 0 if success else 1

            logging.info("adsb2loki started successfully")
            await self.forwarder_service.run_continuous(self.stop_event)
        finally:
            for signum in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(signum)
            logging.info(f"Final stats: {self.forwarder_service.get_stats()}")

        logging.info("adsb2loki stopped")
        return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Forward dump1090 aircraft data to Loki"
    )
    parser.add_argument("--config", help="Optional YAML config file (env vars override it)")
    parser.add_argument("--env-file", help="Path to a .env file (default: .env found from the current directory)")
    parser.add_argument("--interval", type=float, help="Seconds between fetch cycles")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = parse_args(argv)

    try:
        config = load_config(args.config, env_file=args.env_file)
        overrides = {}
        if args.interval is not None:
            overrides["poll_interval"] = args.interval
        if args.log_level:
            overrides["log_level"] = args.log_level
        if overrides:
            config = Config(**{**config.model_dump(), **overrides})
    except ConfigurationError as e:
        setup_logging(args.log_level)
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)
    except ValueError as e:
        setup_logging(args.log_level)
        logging.error(f"Invalid command line option: {e}")
        sys.exit(1)

    setup_logging(config.log_level, config.log_dir)
    logging.info(f"adsb2loki v{VERSION_INFO['version']} ({VERSION_INFO['commit']})")

    provider = init_tracing()
    cli = ForwarderCLI(config, once=args.once, tracer=get_tracer(provider))
    try:
        exit_code = asyncio.run(cli.run())
    finally:
        shutdown_tracing(provider)
        logging.shutdown()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
