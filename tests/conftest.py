"""Pytest configuration for skyposition."""

import pytest

from skyposition.config import Settings
from skyposition.models import SiderealReading, as_utc
from skyposition.sidereal import SiderealTimeResolver


class FixedResolver:
    """Resolver stand-in that always reports the same sidereal time."""

    def __init__(self, hours: float):
        self.hours = hours
        self.calls: list[tuple] = []

    def read(self, utc_dt, lat, lng) -> SiderealReading:
        self.calls.append((as_utc(utc_dt), lat, lng))
        return SiderealReading(hours=self.hours, source="local")

    def resolve(self, utc_dt, lat, lng) -> float:
        return self.read(utc_dt, lat, lng).hours


class CountingSubscriber:
    def __init__(self):
        self.stale_marks = 0

    def mark_stale(self) -> None:
        self.stale_marks += 1


@pytest.fixture(autouse=True)
def _no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SKYPOSITION_REMOTE_LOOKUP", "0")


@pytest.fixture
def offline_resolver() -> SiderealTimeResolver:
    return SiderealTimeResolver(Settings(remote_lookup=False))


@pytest.fixture
def fixed_resolver():
    return FixedResolver


@pytest.fixture
def counting_subscriber() -> CountingSubscriber:
    return CountingSubscriber()
