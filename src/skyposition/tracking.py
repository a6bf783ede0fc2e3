"""Per-object horizontal coordinates, recomputed lazily against a shared context."""

import math

from skyposition.context import ObservationContext
from skyposition.models import (
    EquatorialCoordinates,
    HorizontalCoordinates,
    check_declination,
    check_right_ascension,
)


def equatorial_to_horizontal(
    ra_hours: float, dec_deg: float, lat: float, lst_hours: float
) -> HorizontalCoordinates:
    """Convert a fixed equatorial position to altitude/azimuth.

    Args:
        ra_hours: Right ascension (hours).
        dec_deg: Declination (degrees).
        lat: Observer latitude (degrees).
        lst_hours: Local sidereal time (hours).

    Returns:
        HorizontalCoordinates with azimuth measured from north through east.
    """
    hour_angle = math.radians((lst_hours - ra_hours) * 15)
    lat_rad = math.radians(lat)
    dec_rad = math.radians(dec_deg)

    sin_alt = math.sin(lat_rad) * math.sin(dec_rad) + math.cos(lat_rad) * math.cos(
        dec_rad
    ) * math.cos(hour_angle)
    alt_deg = math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))

    y = -math.sin(hour_angle) * math.cos(dec_rad)
    x = math.sin(dec_rad) * math.cos(lat_rad) - math.cos(dec_rad) * math.sin(
        lat_rad
    ) * math.cos(hour_angle)
    az_deg = math.degrees(math.atan2(y, x)) % 360

    return HorizontalCoordinates(alt_deg=alt_deg, az_deg=az_deg)


class TrackedObject:
    """A fixed celestial object whose position follows its context.

    The horizontal position is cached and only recomputed after the context
    marks the object stale.
    """

    def __init__(
        self, name: str, ra_hours: float, dec_deg: float, context: ObservationContext
    ):
        self._name = name
        self._equatorial = EquatorialCoordinates(
            ra_hours=check_right_ascension(ra_hours),
            dec_deg=check_declination(dec_deg),
        )
        self._context = context
        self._horizontal: HorizontalCoordinates | None = None
        self.in_sync = False
        context.subscribe(self)

    @property
    def name(self) -> str:
        return self._name

    @property
    def equatorial(self) -> EquatorialCoordinates:
        return self._equatorial

    def get_right_ascension(self) -> float:
        return self._equatorial.ra_hours

    def get_declination(self) -> float:
        return self._equatorial.dec_deg

    def mark_stale(self) -> None:
        self.in_sync = False

    def _recompute(self) -> None:
        lst = self._context.get_local_sidereal_time()
        if lst is None:
            raise RuntimeError("observation time has not been set")
        self._horizontal = equatorial_to_horizontal(
            self._equatorial.ra_hours,
            self._equatorial.dec_deg,
            self._context.lat,
            lst,
        )
        self.in_sync = True

    def horizontal(self) -> HorizontalCoordinates:
        if not self.in_sync or self._horizontal is None:
            self._recompute()
        assert self._horizontal is not None
        return self._horizontal

    def get_altitude(self) -> float:
        """Altitude in degrees above the horizon."""
        return self.horizontal().alt_deg

    def get_azimuth(self) -> float:
        """Azimuth in degrees (0=N, 90=E)."""
        return self.horizontal().az_deg

    def is_visible(self) -> bool:
        return self.get_altitude() > 0

    def __str__(self) -> str:
        verdict = "Yes" if self.is_visible() else "No"
        return (
            f"{self._name}:\n"
            f"\tAltitude: {self.get_altitude()} degrees\n"
            f"\tVisible: {verdict}"
        )

    def __repr__(self) -> str:
        return (
            f"TrackedObject(name={self._name!r}, ra_hours={self._equatorial.ra_hours}, "
            f"dec_deg={self._equatorial.dec_deg})"
        )
