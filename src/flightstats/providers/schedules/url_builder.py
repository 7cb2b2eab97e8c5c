# src/flightstats/providers/schedules/url_builder.py
"""
Builds FlightStats flex schedules URLs, e.g.

    UrlBuilder().from_("lax").to("jfk").date(dt).schedule_arriving_url
    -> https://api.flightstats.com/flex/schedules/rest/v1/json/from/LAX/to/JFK/arriving/2024/1/2

Every setter returns the builder so calls can be chained, and a builder can be
re-pointed at another date and asked for a URL again.
"""
from __future__ import annotations
from datetime import date, datetime
from typing import Optional, Union

from flightstats.config.creds import settings

ROUTE_URL = "{base}/from/{origin}/to/{dest}/{direction}/{y}/{m}/{d}"


class UrlBuilder:
    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or settings.FLIGHTSTATS_BASE_URL).rstrip("/")
        self._from: Optional[str] = None
        self._to: Optional[str] = None
        self._date: Optional[date] = None

    def from_(self, code: str) -> "UrlBuilder":
        self._from = code.strip().upper()
        return self

    def to(self, code: str) -> "UrlBuilder":
        self._to = code.strip().upper()
        return self

    def date(self, when: Union[datetime, date]) -> "UrlBuilder":
        # calendar date of the instant as given (its own offset), not of UTC
        self._date = when.date() if isinstance(when, datetime) else when
        return self

    @property
    def schedule_arriving_url(self) -> str:
        return self._url("arriving")

    @property
    def schedule_departing_url(self) -> str:
        return self._url("departing")

    def _url(self, direction: str) -> str:
        if not (self._from and self._to and self._date):
            raise ValueError("UrlBuilder needs from_(), to() and date() before building a URL")
        return ROUTE_URL.format(
            base=self.base_url,
            origin=self._from,
            dest=self._to,
            direction=direction,
            y=self._date.year,
            m=self._date.month,
            d=self._date.day,
        )
