import logging
from typing import List

from ..exceptions import EncodeError
from ..models.aircraft import AircraftSnapshot
from ..models.log_entry import LogEntry, SERVICE_LABELS

logger = logging.getLogger(__name__)


def to_log_entries(snapshot: AircraftSnapshot) -> List[LogEntry]:
    """Convert a snapshot into one Loki log entry per aircraft.

    Every entry carries the snapshot's own timestamp, so all lines from one
    cycle land on the same instant. Any record that cannot be serialized
    aborts the whole batch with EncodeError.
    """
    timestamp_ns = snapshot.timestamp_ns
    entries = []

    for index, aircraft in enumerate(snapshot.aircraft):
        logger.debug(f"Processing aircraft {index}: hex={aircraft.hex} flight={aircraft.flight} "
                     f"lat={aircraft.lat} lon={aircraft.lon}")
        try:
            line = aircraft.to_json()
        except (TypeError, ValueError) as e:
            raise EncodeError(aircraft.hex, str(e), {'index': index}) from e

        entries.append(LogEntry(timestamp_ns=timestamp_ns, labels=dict(SERVICE_LABELS), line=line))

    return entries
