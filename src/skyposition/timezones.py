"""Observer timezone lookup — presentation only, never used for sidereal time."""

from datetime import datetime

from pytz import timezone, utc
from timezonefinder import TimezoneFinder

from skyposition.models import as_utc

_tf = TimezoneFinder()


def timezone_name(lat: float, lng: float) -> str:
    """IANA timezone at a location, or "UTC" when none is found."""
    return _tf.timezone_at(lat=lat, lng=lng) or "UTC"


def local_time(utc_dt: datetime, lat: float, lng: float) -> datetime:
    """Convert a UTC instant to the observer's wall-clock time."""
    return as_utc(utc_dt).astimezone(timezone(timezone_name(lat, lng)))


def utc_from_local(when: str, lat: float, lng: float) -> datetime:
    """Parse a local "YYYY-MM-DD HH:MM" string at a location into a UTC datetime.

    Raises:
        ValueError: On a malformed string.
        pytz.InvalidTimeError: If the wall time does not exist or is
            ambiguous in the local timezone (DST transitions).
    """
    dt = datetime.strptime(when, "%Y-%m-%d %H:%M")
    local_tz = timezone(timezone_name(lat, lng))
    return local_tz.localize(dt, is_dst=None).astimezone(utc)
