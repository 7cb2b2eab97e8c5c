# src/flightstats/providers/schedules/base.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from .errors import ScheduleFormatError

# A flight is the raw scheduledFlights[] object; the engine only adds
# "arrivalTimeUtc" / "departureTimeUtc" to it.
Flight = Dict[str, Any]


@dataclass(frozen=True)
class Airport:
    fs: str                  # FlightStats code, e.g. "JFK"
    utc_offset_hours: float  # may be fractional (5.5 for BOM)

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "Airport":
        try:
            return cls(fs=str(obj["fs"]), utc_offset_hours=float(obj["utcOffsetHours"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ScheduleFormatError(f"Bad airport entry in appendix: {obj!r} ({e})") from e


class ScheduleProvider(Protocol):
    def flights_arriving_before(self, time: datetime, from_: str, to: str,
                                now: Optional[datetime] = None) -> List[Flight]:
        """Flights from_ -> to whose UTC arrival is strictly before `time`."""
        ...

    def flights_departing_after(self, time: datetime, from_: str, to: str,
                                now: Optional[datetime] = None) -> List[Flight]:
        """Flights from_ -> to whose UTC departure is strictly after `time`."""
        ...
