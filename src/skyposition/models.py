"""Data model definitions — coordinate value types and input range checks."""

import math
from dataclasses import dataclass
from datetime import datetime

from pytz import utc


class ValidationError(ValueError):
    """Coordinate or instant outside its valid range."""


def _check_range(
    value: float, low: float, high: float, label: str, *, high_open: bool = False
) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be finite, got {value}")
    upper_ok = value < high if high_open else value <= high
    if not (low <= value and upper_ok):
        bracket = ")" if high_open else "]"
        raise ValidationError(f"{label} {value} outside [{low}, {high}{bracket}")
    return value


def check_latitude(lat: float) -> float:
    return _check_range(lat, -90.0, 90.0, "latitude")


def check_longitude(lng: float) -> float:
    return _check_range(lng, -180.0, 180.0, "longitude")


def check_declination(dec_deg: float) -> float:
    return _check_range(dec_deg, -90.0, 90.0, "declination")


def check_right_ascension(ra_hours: float) -> float:
    return _check_range(ra_hours, 0.0, 24.0, "right ascension", high_open=True)


def check_hours(hours: float) -> float:
    return _check_range(hours, -math.inf, math.inf, "hours")


def wrap_hours(hours: float) -> float:
    """Reduce an hour value into [0, 24)."""
    wrapped = hours % 24
    # float % returns 24.0 for tiny negative inputs
    return 0.0 if wrapped >= 24 else wrapped


def as_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime. Naive values are taken as UTC."""
    if not isinstance(dt, datetime):
        raise ValidationError(f"expected a datetime, got {type(dt).__name__}")
    if dt.tzinfo is None:
        return utc.localize(dt)
    return dt.astimezone(utc)


@dataclass(frozen=True)
class EquatorialCoordinates:
    """Fixed position on the celestial sphere."""

    ra_hours: float  # Right ascension (hours, 0-24)
    dec_deg: float  # Declination (degrees)


@dataclass(frozen=True)
class HorizontalCoordinates:
    """Position relative to the observer's horizon."""

    alt_deg: float  # Altitude (degrees, negative = below horizon)
    az_deg: float  # Azimuth (degrees, 0=N, 90=E, 180=S, 270=W)


@dataclass(frozen=True)
class SiderealReading:
    """Local sidereal time and the path that produced it."""

    hours: float  # Local sidereal time (hours, 0-24)
    source: str  # "remote" (lookup service) or "local" (closed-form)
