#!/usr/bin/env python3
# src/flightstats/providers/schedules/flightstats.py
"""
FlightStats schedules provider (planned flights for one route and day).

Flex schedules REST:
- arriving:   GET {base}/from/{FROM}/to/{TO}/arriving/{y}/{m}/{d}
- departing:  GET {base}/from/{FROM}/to/{TO}/departing/{y}/{m}/{d}
  headers appId / appKey

Notes:
- scheduledFlights[] carry LOCAL times only; the per-airport utcOffsetHours
  lives in appendix.airports[]. We pin every local time to its airport offset
  and add arrivalTimeUtc / departureTimeUtc to each flight.
- If the requested day has nothing on the right side of the boundary we look
  exactly one day further out (earlier for arrivals, later for departures),
  always filtering against the ORIGINAL boundary.
- Not safe to share one instance between concurrent callers: each fetch
  replaces the airport list the offset cache reads from.

Usage:
    from datetime import datetime, timezone
    from flightstats.providers.schedules.flightstats import FlightStatsSchedule

    fs = FlightStatsSchedule()
    flights = fs.flights_arriving_before(
        datetime(2026, 2, 10, 18, 0, tzinfo=timezone.utc), "LAX", "JFK")
    print(fs.to_frame(flights))
"""
from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import requests

from flightstats.config.creds import Settings, settings as default_settings
from .base import Airport, Flight, ScheduleProvider
from .errors import PastTimeError, ScheduleFormatError
from .offsets import AirportOffsetCache, UtcNormalizer
from .url_builder import UrlBuilder

_LOG = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "carrierFsCode", "flightNumber",
    "departureAirportFsCode", "arrivalAirportFsCode",
    "departureTime", "arrivalTime",
    "departureTimeUtc", "arrivalTimeUtc",
]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_utc(s: str) -> datetime:
    return datetime.fromisoformat(s)


def check_for_past_time(time: datetime, now: datetime) -> None:
    """Raise PastTimeError unless `time` is strictly after `now`."""
    if time.tzinfo is None or now.tzinfo is None:
        raise ValueError(f"Timezone-aware datetimes required (request: {time}, now: {now})")
    if not time > now:
        raise PastTimeError(time, now)


class FlightStatsSchedule(ScheduleProvider):
    """
    Query engine over the FlightStats schedules API.

    Owns the most recently fetched airport list and the offset cache built
    from it; both live exactly as long as the instance.

    clock:   zero-arg callable returning "now" when a call does not pass one
    session: anything with a requests-compatible .get (defaults to requests)
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utc_now,
        session: Optional[Any] = None,
        config: Optional[Settings] = None,
        url_builder: Optional[Callable[[], UrlBuilder]] = None,
    ):
        self.clock = clock
        self.config = config or default_settings
        self._http = session if session is not None else requests
        self._new_builder = url_builder or (lambda: UrlBuilder(self.config.FLIGHTSTATS_BASE_URL))

        self.airports: Optional[List[Airport]] = None
        self.offset_cache = AirportOffsetCache(lambda: self.airports)
        self.normalizer = UtcNormalizer(self.offset_cache)

    @property
    def airport_offsets(self) -> Dict[str, str]:
        return self.offset_cache.offsets

    # --------------------------
    # Public queries
    # --------------------------
    def flights_arriving_before(self, time: datetime, from_: str, to: str,
                                now: Optional[datetime] = None) -> List[Flight]:
        now = now if now is not None else self.clock()
        check_for_past_time(time, now)
        builder = self._new_builder().from_(from_).to(to).date(time)
        flights = self._arriving_flights(builder, time)
        if not flights:
            earlier = time - timedelta(days=1)
            check_for_past_time(earlier, now)
            _LOG.info(f"No arrivals {from_}->{to} before {time.isoformat()} on {time.date()}; "
                      f"retrying {earlier.date()}")
            builder.from_(from_).to(to).date(earlier)
            flights = self._arriving_flights(builder, time)
        return flights

    def flights_departing_after(self, time: datetime, from_: str, to: str,
                                now: Optional[datetime] = None) -> List[Flight]:
        now = now if now is not None else self.clock()
        check_for_past_time(time, now)
        builder = self._new_builder().from_(from_).to(to).date(time)
        flights = self._departing_flights(builder, time)
        if not flights:
            later = time + timedelta(days=1)
            # same guard as the arrival fallback; a later day can only pass
            check_for_past_time(later, now)
            _LOG.info(f"No departures {from_}->{to} after {time.isoformat()} on {time.date()}; "
                      f"retrying {later.date()}")
            builder.from_(from_).to(to).date(later)
            flights = self._departing_flights(builder, time)
        return flights

    # --------------------------
    # Fetch
    # --------------------------
    def scheduled_flights(self, url: str) -> List[Flight]:
        """GET one schedules URL, remember its airports and return UTC-annotated flights."""
        _LOG.debug(f"GET {url}")
        r = self._http.get(
            url,
            headers=self.config.headers_for("flightstats"),
            verify=self.config.VERIFY_SSL,
            timeout=self.config.REQUEST_TIMEOUT_SEC,
        )
        r.raise_for_status()
        try:
            data = r.json()
        except ValueError as e:
            raise ScheduleFormatError(f"FlightStats response not JSON: {e}") from e

        airports_raw, flights = self._split_payload(data)
        self.airports = [Airport.from_json(a) for a in airports_raw]
        _LOG.debug(f"{len(flights)} scheduled flights, {len(self.airports)} airports from {url}")
        return self.normalizer.annotate(flights)

    @staticmethod
    def _split_payload(data: Any):
        if not isinstance(data, dict):
            raise ScheduleFormatError("FlightStats returned unexpected payload (not an object).")
        appendix = data.get("appendix")
        airports = appendix.get("airports") if isinstance(appendix, dict) else None
        flights = data.get("scheduledFlights")
        if not isinstance(airports, list) or not isinstance(flights, list):
            # Errors arrive as {"error": {...}} with a 200 on some plans
            if data.get("error"):
                raise ScheduleFormatError(f"FlightStats error: {data.get('error')}")
            raise ScheduleFormatError("FlightStats payload missing appendix.airports or scheduledFlights.")
        return airports, flights

    # --------------------------
    # Internals
    # --------------------------
    def _arriving_flights(self, builder: UrlBuilder, time: datetime) -> List[Flight]:
        flights = self.scheduled_flights(builder.schedule_arriving_url)
        return [f for f in flights if _parse_utc(f["arrivalTimeUtc"]) < time]

    def _departing_flights(self, builder: UrlBuilder, time: datetime) -> List[Flight]:
        flights = self.scheduled_flights(builder.schedule_departing_url)
        return [f for f in flights if _parse_utc(f["departureTimeUtc"]) > time]

    # --------------------------
    # Export
    # --------------------------
    @staticmethod
    def to_frame(flights: List[Flight]) -> pd.DataFrame:
        if not flights:
            return pd.DataFrame(columns=FRAME_COLUMNS)
        df = pd.DataFrame(flights)
        for c in FRAME_COLUMNS:
            if c not in df.columns:
                df[c] = None
        df = df[FRAME_COLUMNS].copy()
        for c in ("departureTimeUtc", "arrivalTimeUtc"):
            df[c] = pd.to_datetime(df[c], utc=True, errors="coerce")
        return df
