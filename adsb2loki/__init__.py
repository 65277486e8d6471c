"""
adsb2loki: forward dump1090 aircraft snapshots to Loki as log lines
"""

from .collectors.dump1090 import Dump1090Collector
from .models.aircraft import AircraftRecord, AircraftSnapshot, AtAltitude, OnGround
from .models.log_entry import LogEntry
from .services.forwarder_service import ForwarderService
from .services.loki_client import LokiClient
from .services.transform import to_log_entries
from .version import __version__

__all__ = [
    "AircraftRecord",
    "AircraftSnapshot",
    "AtAltitude",
    "Dump1090Collector",
    "ForwarderService",
    "LogEntry",
    "LokiClient",
    "OnGround",
    "to_log_entries",
    "__version__",
]
