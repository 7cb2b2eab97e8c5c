# src/flightstats/providers/schedules/errors.py
from __future__ import annotations


class ScheduleError(Exception):
    """Marker base for everything the schedule engine raises on its own."""


class PastTimeError(ScheduleError, ValueError):
    def __init__(self, time, now):
        self.time = time
        self.now = now
        super().__init__(f"Time requested in the past (request: {time}, now: {now})")


class ScheduleFormatError(ScheduleError, RuntimeError):
    """Response body is not JSON or does not have the schedules shape."""


class AirportLookupError(ScheduleError, KeyError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(code)

    def __str__(self) -> str:
        return f"Airport {self.code!r} not found in the current schedule appendix"
