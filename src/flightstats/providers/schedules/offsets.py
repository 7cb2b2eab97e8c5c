# src/flightstats/providers/schedules/offsets.py
from __future__ import annotations
import re
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .base import Airport, Flight
from .errors import AirportLookupError, ScheduleFormatError

_LOG = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r"^([+-])(\d{2})(\d{2})$")


def format_offset(hours: float) -> str:
    """
    5.5 -> "+0550", -5 -> "-0500", 0 -> "+0000".

    The value is hours * 100 with a forced sign; the last two digits are later
    read back as minutes (see parse_offset), so fractional hours are NOT
    converted to sixtieths.
    """
    return "%+05.0f" % (float(hours) * 100.0)


def parse_offset(text: str) -> timezone:
    """Read a "+HHMM" / "-HHMM" string into a fixed-offset tzinfo."""
    m = _OFFSET_RE.match(text or "")
    if not m:
        raise ScheduleFormatError(f"Bad UTC offset string: {text!r}")
    sign, hh, mm = m.groups()
    delta = timedelta(hours=int(hh), minutes=int(mm))
    if sign == "-":
        delta = -delta
    return timezone(delta)


def _parse_local(s: str) -> datetime:
    if not isinstance(s, str) or not s:
        raise ScheduleFormatError(f"Bad local timestamp: {s!r}")
    try:
        # fromisoformat only learned "Z" in 3.11
        return datetime.fromisoformat(s.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ScheduleFormatError(f"Bad local timestamp: {s!r} ({e})") from e


class AirportOffsetCache:
    """
    Airport code -> signed offset string, filled on first lookup.

    `airports` is a callable returning the most recently fetched airport list,
    so the cache always scans whatever the owning engine fetched last. Entries
    are never recomputed once stored.
    """
    def __init__(self, airports: Callable[[], Optional[List[Airport]]]):
        self._airports = airports
        self.offsets: Dict[str, str] = {}

    def offset(self, code: str) -> str:
        cached = self.offsets.get(code)
        if cached is not None:
            return cached
        return self._offset_from_airports(code)

    def _offset_from_airports(self, code: str) -> str:
        # first match wins if the appendix ever lists a code twice
        match = next((a for a in (self._airports() or []) if a.fs == code), None)
        if match is None:
            raise AirportLookupError(code)
        off = format_offset(match.utc_offset_hours)
        _LOG.debug(f"Offset for {code}: {match.utc_offset_hours}h -> {off}")
        self.offsets[code] = off
        return off

    def __len__(self) -> int:
        return len(self.offsets)


class UtcNormalizer:
    def __init__(self, cache: AirportOffsetCache):
        self.cache = cache

    def to_utc(self, local: str, airport: str) -> str:
        """
        Pin the wall-clock reading `local` to the airport's offset and return
        the same instant as an ISO string in UTC.
        """
        tz = parse_offset(self.cache.offset(airport))
        pinned = _parse_local(local).replace(tzinfo=tz)
        return pinned.astimezone(timezone.utc).isoformat()

    def annotate(self, flights: List[Flight]) -> List[Flight]:
        for flight in flights:
            try:
                arr_local, arr_ap = flight["arrivalTime"], flight["arrivalAirportFsCode"]
                dep_local, dep_ap = flight["departureTime"], flight["departureAirportFsCode"]
            except (KeyError, TypeError) as e:
                raise ScheduleFormatError(f"Scheduled flight missing field {e}: {flight!r}") from e
            flight["arrivalTimeUtc"] = self.to_utc(arr_local, arr_ap)
            flight["departureTimeUtc"] = self.to_utc(dep_local, dep_ap)
        return flights
