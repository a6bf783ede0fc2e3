"""Entry point that prints how a target's altitude changes over time.

Edit the location/when/target variables at the top, then run:
    uv run skyposition-watch
"""

import logging

from dotenv import load_dotenv

from skyposition.config import load_settings
from skyposition.registry import ObjectRegistry
from skyposition.sidereal import SiderealTimeResolver
from skyposition.timezones import utc_from_local

lat, lng = 40.80518, -73.71100
when: str | None = None  # Local "YYYY-MM-DD HH:MM" at (lat, lng); None = now

# Object at/near the centre of the Great Rift
target = ("Shaula", 17.5602777778, -37.103889)

steps = 24
step_hours = 1.0


def main() -> None:
    load_dotenv()
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level, format="%(levelname)s %(name)s: %(message)s"
    )

    utc_dt = utc_from_local(when, lat, lng) if when else None
    registry = ObjectRegistry(
        utc_dt=utc_dt, lat=lat, lng=lng, resolver=SiderealTimeResolver(settings)
    )
    name, ra_hours, dec_deg = target
    registry.add(name, ra_hours, dec_deg)

    for _ in range(steps):
        print(registry.describe())
        print()
        registry.advance_time(step_hours)


if __name__ == "__main__":
    main()
