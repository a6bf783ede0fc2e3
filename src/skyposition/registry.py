"""Name-keyed collection of tracked objects sharing one observation context."""

import logging
from collections.abc import Iterator
from datetime import datetime

from skyposition.context import ObservationContext
from skyposition.sidereal import SiderealTimeResolver
from skyposition.timezones import local_time
from skyposition.tracking import TrackedObject

LOG = logging.getLogger(__name__)


class ObjectRegistry:
    """Searchable set of celestial objects observed from one place at one time.

    Args:
        utc_dt: Observation instant. When None, the current UTC time is used
            the first time an object is added.
        lat: Observer latitude (decimal degrees).
        lng: Observer longitude (decimal degrees).
        resolver: Sidereal-time source for the owned context.
    """

    def __init__(
        self,
        utc_dt: datetime | None = None,
        lat: float = 0.0,
        lng: float = 0.0,
        resolver: SiderealTimeResolver | None = None,
    ):
        self.context = ObservationContext(lat=lat, lng=lng, resolver=resolver)
        self._objects: dict[str, TrackedObject] = {}
        if utc_dt is not None:
            self.context.set_time(utc_dt)

    def add(self, name: str, ra_hours: float, dec_deg: float) -> TrackedObject:
        """Track a new object. An existing entry with the same name is replaced."""
        self.context.ensure_initialised()
        obj = TrackedObject(name, ra_hours, dec_deg, self.context)
        previous = self._objects.get(name)
        if previous is not None:
            LOG.debug("Replacing tracked object %r", name)
            self.context.unsubscribe(previous)
        self._objects[name] = obj
        return obj

    def get(self, name: str) -> TrackedObject | None:
        return self._objects.get(name)

    def remove(self, name: str) -> TrackedObject | None:
        obj = self._objects.pop(name, None)
        if obj is not None:
            self.context.unsubscribe(obj)
        return obj

    def names(self) -> list[str]:
        return sorted(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, name: object) -> bool:
        return name in self._objects

    def __iter__(self) -> Iterator[TrackedObject]:
        return iter(list(self._objects.values()))

    def set_coordinates(self, lat: float, lng: float) -> None:
        self.context.set_location(lat, lng)

    def set_time(self, utc_dt: datetime) -> None:
        self.context.set_time(utc_dt)

    def advance_time(self, hours: float) -> None:
        self.context.advance_time(hours)

    def get_coordinates(self) -> tuple[float, float]:
        return self.context.get_coordinates()

    def get_utc_time(self) -> datetime | None:
        return self.context.get_utc_time()

    def get_local_sidereal_time(self) -> float | None:
        return self.context.get_local_sidereal_time()

    def describe(self) -> str:
        """Multi-line report: local time, location, then altitude/visibility per object."""
        lat, lng = self.context.get_coordinates()
        utc_dt = self.context.get_utc_time()
        if utc_dt is None:
            header = "(time not set)"
        else:
            header = local_time(utc_dt, lat, lng).isoformat()
        lines = [header, f"Location: {lat}, {lng}"]
        for name in self.names():
            obj = self._objects[name]
            lines.append("\t" + str(obj).replace("\n", "\n\t"))
        return "\n".join(lines)
