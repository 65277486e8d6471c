from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

SERVICE_LABELS = {"service": "adsb"}


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp_ns: int = Field(..., description="Unix timestamp in nanoseconds")
    labels: Dict[str, str] = Field(default_factory=lambda: dict(SERVICE_LABELS), description="Stream labels")
    line: str = Field(..., description="Log line (aircraft JSON)")

    def to_value(self) -> list:
        """Loki [timestamp, line] pair"""
        return [str(self.timestamp_ns), self.line]
