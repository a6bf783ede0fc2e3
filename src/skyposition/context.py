"""Shared observation state — observer location, UTC instant, local sidereal time."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from pytz import utc

from skyposition.models import (
    as_utc,
    check_hours,
    check_latitude,
    check_longitude,
    wrap_hours,
)
from skyposition.sidereal import SiderealTimeResolver

if TYPE_CHECKING:
    from skyposition.tracking import TrackedObject

LOG = logging.getLogger(__name__)

# Sidereal hours elapsed per solar hour
SIDEREAL_RATE = 1.002737909350795


class ObservationContext:
    """Mutable observation state shared by every TrackedObject bound to it.

    Sidereal time is resolved once, on the first ``set_time``; after that it
    is advanced incrementally. Every mutation marks all subscribed objects
    stale so their next read recomputes.

    Args:
        lat: Observer latitude (decimal degrees).
        lng: Observer longitude (decimal degrees, east positive).
        resolver: Sidereal-time source used for first initialisation.
    """

    def __init__(
        self,
        lat: float = 0.0,
        lng: float = 0.0,
        resolver: SiderealTimeResolver | None = None,
    ):
        self._lat = check_latitude(lat)
        self._lng = check_longitude(lng)
        self._utc_dt: datetime | None = None
        self._lst_hours: float | None = None
        self.resolver = resolver if resolver is not None else SiderealTimeResolver()
        self._subscribers: list[TrackedObject] = []

    @property
    def lat(self) -> float:
        return self._lat

    @property
    def lng(self) -> float:
        return self._lng

    @property
    def utc_dt(self) -> datetime | None:
        return self._utc_dt

    @property
    def lst_hours(self) -> float | None:
        return self._lst_hours

    @property
    def initialised(self) -> bool:
        return self._lst_hours is not None

    def subscribe(self, obj: TrackedObject) -> None:
        if not any(s is obj for s in self._subscribers):
            self._subscribers.append(obj)

    def unsubscribe(self, obj: TrackedObject) -> None:
        self._subscribers = [s for s in self._subscribers if s is not obj]

    def invalidate(self) -> None:
        """Mark every subscribed object out of sync."""
        for obj in self._subscribers:
            obj.mark_stale()

    def set_location(self, lat: float, lng: float) -> None:
        """Move the observer.

        A longitude change shifts sidereal time by the longitude difference
        (15 degrees per hour) instead of resolving it again.
        """
        lat = check_latitude(lat)
        lng = check_longitude(lng)

        if lng != self._lng and self._lst_hours is not None:
            self._lst_hours = wrap_hours(self._lst_hours + (lng - self._lng) / 15.0)
        self._lng = lng
        self._lat = lat
        LOG.debug("Location set to (%s, %s)", lat, lng)
        self.invalidate()

    def set_time(self, utc_dt: datetime) -> None:
        """Set the observation instant.

        The first call resolves sidereal time for the instant. Later calls
        advance by the elapsed duration truncated to whole hours, so any
        fractional hour of the jump is dropped.
        """
        utc_dt = as_utc(utc_dt)
        if self._lst_hours is None:
            self._utc_dt = utc_dt
            reading = self.resolver.read(utc_dt, self._lat, self._lng)
            self._lst_hours = reading.hours
            LOG.info(
                "Sidereal time initialised to %.6f h (%s)", reading.hours, reading.source
            )
            self.invalidate()
            return

        elapsed = (utc_dt - self._utc_dt).total_seconds()
        self.advance_time(int(elapsed / 3600))

    def advance_time(self, hours: float) -> None:
        """Move the observation instant forward (or back) by ``hours`` solar hours."""
        if self._utc_dt is None or self._lst_hours is None:
            raise RuntimeError("observation time has not been set")
        hours = check_hours(hours)
        self._utc_dt = self._utc_dt + timedelta(seconds=int(3600 * hours))
        self._lst_hours = wrap_hours(self._lst_hours + hours * SIDEREAL_RATE)
        self.invalidate()

    def ensure_initialised(self) -> None:
        """Initialise with the current wall-clock instant if no time was ever set."""
        if self._lst_hours is None:
            LOG.info("No observation time set; using the current UTC time")
            self.set_time(datetime.now(utc))

    def get_coordinates(self) -> tuple[float, float]:
        return self._lat, self._lng

    def get_utc_time(self) -> datetime | None:
        return self._utc_dt

    def get_local_sidereal_time(self) -> float | None:
        return self._lst_hours
