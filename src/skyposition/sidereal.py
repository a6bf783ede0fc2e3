"""Local sidereal time — USNO lookup with a closed-form mean sidereal time fallback."""

import logging
import math
import re
from datetime import date, datetime
from typing import Any

import httpx

from skyposition.config import Settings, load_settings
from skyposition.models import (
    SiderealReading,
    as_utc,
    check_latitude,
    check_longitude,
    wrap_hours,
)

LOG = logging.getLogger(__name__)

J2000 = 2451545.0
_JDN_ORDINAL_OFFSET = 1721425  # date(1970, 1, 1).toordinal() + 1721425 == 2440588

_HMS = re.compile(r"^\s*(\d{1,2}):(\d{1,2}):(\d{1,2}(?:\.\d+)?)\s*$")


class RemoteLookupFailure(Exception):
    """Sidereal-time service call failure (transport, status or payload)."""


def julian_day_number(day: date) -> int:
    """Julian day number of a Gregorian calendar date (the noon-based day count)."""
    return day.toordinal() + _JDN_ORDINAL_OFFSET


def julian_date(utc_dt: datetime) -> float:
    """Fractional Julian date for a UTC instant, to whole seconds.

    The day fraction uses a truncated remainder, so instants before noon
    land on the previous Julian date (JDN - fraction).
    """
    utc_dt = as_utc(utc_dt)
    hours = utc_dt.hour + utc_dt.minute / 60.0 + utc_dt.second / 3600.0
    return julian_day_number(utc_dt.date()) + math.fmod(hours - 12.0, 24) / 24


def greenwich_mean_sidereal_time(utc_dt: datetime) -> float:
    """Greenwich mean sidereal time in hours (IAU 1982 polynomial).

    May be negative for instants before J2000; callers normalise.
    """
    jd = julian_date(utc_dt)
    t = (jd - J2000) / 36525.0
    gmst_deg = (
        280.46061837
        + 360.98564736629 * (jd - J2000)
        + 0.000387933 * t * t
        - t * t * t / 38710000.0
    )
    return math.fmod(gmst_deg, 360.0) / 15


def local_mean_sidereal_time(utc_dt: datetime, lng: float) -> float:
    """Closed-form local mean sidereal time in hours, normalised into [0, 24)."""
    lst = greenwich_mean_sidereal_time(utc_dt) + lng / 15
    return wrap_hours(lst)


def parse_sidereal_time(text: str) -> float:
    """Convert an ``HH:MM:SS[.s]`` string to decimal hours.

    Raises:
        RemoteLookupFailure: If the string is not a valid time of day.
    """
    match = _HMS.match(text) if isinstance(text, str) else None
    if match is None:
        raise RemoteLookupFailure(f"unparsable sidereal time: {text!r}")
    h, m, s = int(match.group(1)), int(match.group(2)), float(match.group(3))
    if h >= 24 or m >= 60 or s >= 60:
        raise RemoteLookupFailure(f"sidereal time out of range: {text!r}")
    return h + m / 60 + s / 3600


def _find_field(payload: Any, key: str) -> Any:
    """Depth-first search for the first value stored under key."""
    if isinstance(payload, dict):
        if key in payload:
            return payload[key]
        children = payload.values()
    elif isinstance(payload, list):
        children = payload
    else:
        return None
    for child in children:
        found = _find_field(child, key)
        if found is not None:
            return found
    return None


class SiderealTimeResolver:
    """Resolve local sidereal time, preferring the remote service.

    Args:
        settings: Lookup URL, timeout and the remote on/off switch.
            Defaults to ``load_settings()``.
        client: Optional ``httpx.Client`` used for the remote call.
            A one-off request is made through ``httpx.get`` when None.
    """

    def __init__(
        self, settings: Settings | None = None, client: httpx.Client | None = None
    ):
        self.settings = settings if settings is not None else load_settings()
        self._client = client

    def lookup_remote(self, utc_dt: datetime, lat: float, lng: float) -> float:
        """Single sidereal-time service call. Returns LST hours.

        Raises:
            RemoteLookupFailure: On transport error, timeout, non-2xx status,
                or when the ``last`` field is missing or malformed.
        """
        utc_dt = as_utc(utc_dt)
        params = {
            "date": utc_dt.strftime("%Y-%m-%d"),
            "time": f"{utc_dt.hour}:{utc_dt.minute}:{utc_dt.second}",
            "coords": f"{lat},{lng}",
            "reps": 1,
            "intv_mag": 1,
            "intv_unit": "minutes",
        }
        get = self._client.get if self._client is not None else httpx.get
        try:
            resp = get(
                self.settings.sidereal_url,
                params=params,
                timeout=self.settings.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            raise RemoteLookupFailure(f"sidereal time request failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteLookupFailure("sidereal time response is not JSON") from exc

        value = _find_field(data, "last")
        if value is None:
            raise RemoteLookupFailure("sidereal time response has no 'last' field")
        return parse_sidereal_time(value)

    def read(self, utc_dt: datetime, lat: float, lng: float) -> SiderealReading:
        """Resolve LST and report which path produced it.

        The remote service is tried at most once; any RemoteLookupFailure
        falls through to the closed-form computation.
        """
        utc_dt = as_utc(utc_dt)
        lat = check_latitude(lat)
        lng = check_longitude(lng)

        if self.settings.remote_lookup:
            try:
                hours = self.lookup_remote(utc_dt, lat, lng)
            except RemoteLookupFailure as exc:
                LOG.warning(
                    "Remote sidereal time unavailable (%s); computing locally", exc
                )
            else:
                LOG.debug(
                    "Remote LST %.6f h for %s at (%s, %s)",
                    hours,
                    utc_dt.isoformat(),
                    lat,
                    lng,
                )
                return SiderealReading(hours=hours, source="remote")

        hours = local_mean_sidereal_time(utc_dt, lng)
        LOG.debug("Local LST %.6f h for %s at lng %s", hours, utc_dt.isoformat(), lng)
        return SiderealReading(hours=hours, source="local")

    def resolve(self, utc_dt: datetime, lat: float, lng: float) -> float:
        """Local sidereal time in hours, [0, 24)."""
        return self.read(utc_dt, lat, lng).hours
