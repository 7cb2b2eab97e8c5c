from __future__ import annotations
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
import requests

from flightstats.config.creds import Settings
from flightstats.providers.schedules.flightstats import FlightStatsSchedule

UTC = timezone.utc
BASE = "https://api.flightstats.com/flex/schedules/rest/v1/json"

AIRPORTS = [
    {"fs": "LAX", "iata": "LAX", "utcOffsetHours": -8.0},
    {"fs": "JFK", "iata": "JFK", "utcOffsetHours": -5.0},
    {"fs": "BOM", "iata": "BOM", "utcOffsetHours": 5.5},
]


class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200, text: Optional[str] = None):
        self.status_code = status
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Hands out queued responses (or raises queued exceptions) in order."""
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    @property
    def urls(self) -> List[str]:
        return [c["url"] for c in self.calls]


def flight(dep_time: str, arr_time: str, dep: str = "LAX", arr: str = "JFK", number: str = "1") -> Dict[str, Any]:
    return {
        "carrierFsCode": "AA",
        "flightNumber": number,
        "departureAirportFsCode": dep,
        "arrivalAirportFsCode": arr,
        "departureTime": dep_time,
        "arrivalTime": arr_time,
        "stops": 0,
    }


def payload(flights: List[Dict[str, Any]], airports: Optional[List[Dict[str, Any]]] = None) -> FakeResponse:
    return FakeResponse({
        "request": {},
        "scheduledFlights": flights,
        "appendix": {"airlines": [], "airports": AIRPORTS if airports is None else airports},
    })


def dt(s: str) -> datetime:
    return datetime.fromisoformat(s).replace(tzinfo=UTC)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(cfg={}, env={"FLIGHTSTATS_APP_ID": "test-id", "FLIGHTSTATS_APP_KEY": "test-key"})


@pytest.fixture
def make_engine(test_settings):
    def _make(*responses, clock=None):
        session = FakeSession(*responses)
        kwargs = {"session": session, "config": test_settings}
        if clock is not None:
            kwargs["clock"] = clock
        return FlightStatsSchedule(**kwargs), session
    return _make
