import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional
from datetime import datetime

from ..models.aircraft import AircraftSnapshot


class BaseCollector(ABC):
    """Base class for aircraft snapshot sources"""

    def __init__(self, url: str, name: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self.url = url
        self.name = name or type(self).__name__
        self.logger = logger or logging.getLogger(__name__)

        # Statistics
        self.stats = {
            "requests": 0,
            "successes": 0,
            "failures": 0,
            "last_fetch": None,
            "last_aircraft_count": 0
        }

    @abstractmethod
    async def fetch_data(self) -> AircraftSnapshot:
        """Fetch one aircraft snapshot from the source"""
        pass

    def update_stats(self, success: bool, aircraft_count: int = 0):
        """Update collector statistics"""
        self.stats["requests"] += 1
        self.stats["last_fetch"] = datetime.now().isoformat()

        if success:
            self.stats["successes"] += 1
            self.stats["last_aircraft_count"] = aircraft_count
        else:
            self.stats["failures"] += 1

    def get_stats(self) -> Dict:
        """Get collector statistics"""
        total_requests = self.stats["requests"]
        if total_requests > 0:
            success_rate = (self.stats["successes"] / total_requests) * 100
        else:
            success_rate = 0

        return {
            "collector": self.name,
            "url": self.url,
            "requests": total_requests,
            "success_rate": round(success_rate, 1),
            "last_fetch": self.stats["last_fetch"],
            "last_aircraft_count": self.stats["last_aircraft_count"]
        }
