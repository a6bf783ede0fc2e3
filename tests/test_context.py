from datetime import datetime, timedelta

import pytest
from pytz import timezone, utc

from skyposition.context import SIDEREAL_RATE, ObservationContext
from skyposition.models import ValidationError
from skyposition.sidereal import local_mean_sidereal_time

START = datetime(2024, 6, 1, 0, 0, tzinfo=utc)


@pytest.fixture
def context(offline_resolver) -> ObservationContext:
    ctx = ObservationContext(lat=40.75, lng=-73.5, resolver=offline_resolver)
    ctx.set_time(START)
    return ctx


def test_uninitialised_context(offline_resolver):
    ctx = ObservationContext(resolver=offline_resolver)
    assert not ctx.initialised
    assert ctx.get_utc_time() is None
    assert ctx.get_local_sidereal_time() is None
    assert ctx.get_coordinates() == (0.0, 0.0)
    with pytest.raises(RuntimeError):
        ctx.advance_time(1)


def test_first_set_time_resolves_sidereal_time(context):
    assert context.initialised
    assert context.get_utc_time() == START
    assert context.get_local_sidereal_time() == local_mean_sidereal_time(START, -73.5)


def test_first_set_time_converts_to_utc(offline_resolver):
    ctx = ObservationContext(resolver=offline_resolver)
    eastern = timezone("America/New_York").localize(datetime(2024, 6, 1, 20, 0))
    ctx.set_time(eastern)
    assert ctx.get_utc_time() == datetime(2024, 6, 2, 0, 0, tzinfo=utc)


def test_set_time_advances_in_whole_hours(context):
    lst = context.get_local_sidereal_time()
    context.set_time(START + timedelta(hours=2, minutes=30))

    assert context.get_utc_time() == START + timedelta(hours=2)
    assert context.get_local_sidereal_time() == pytest.approx((lst + 2 * SIDEREAL_RATE) % 24)


def test_set_time_backwards_truncates_toward_zero(context):
    lst = context.get_local_sidereal_time()
    context.set_time(START - timedelta(hours=1, minutes=30))

    assert context.get_utc_time() == START - timedelta(hours=1)
    assert context.get_local_sidereal_time() == pytest.approx((lst - SIDEREAL_RATE) % 24)


def test_set_time_under_an_hour_keeps_instant(context):
    lst = context.get_local_sidereal_time()
    context.set_time(START + timedelta(minutes=59))
    assert context.get_utc_time() == START
    assert context.get_local_sidereal_time() == lst


def test_advance_time_full_day_drifts(context):
    lst = context.get_local_sidereal_time()
    context.advance_time(24)

    assert context.get_utc_time() == START + timedelta(days=1)
    assert context.get_local_sidereal_time() != lst
    drift = (context.get_local_sidereal_time() - lst) % 24
    assert drift == pytest.approx(24 * SIDEREAL_RATE - 24)
    assert drift == pytest.approx(0.0657, abs=1e-4)


def test_advance_time_stays_in_range(context):
    for hours in (0.5, 13, -30, 100.25):
        context.advance_time(hours)
        assert 0 <= context.get_local_sidereal_time() < 24


def test_longitude_change_shifts_sidereal_time(context):
    lst = context.get_local_sidereal_time()
    context.set_location(40.75, -163.5)
    assert context.get_local_sidereal_time() == pytest.approx((lst - 6) % 24)
    assert context.get_coordinates() == (40.75, -163.5)


def test_latitude_change_keeps_sidereal_time(context):
    lst = context.get_local_sidereal_time()
    context.set_location(-33.9, -73.5)
    assert context.get_local_sidereal_time() == lst
    assert context.get_coordinates() == (-33.9, -73.5)


def test_location_change_before_time_is_set(offline_resolver):
    ctx = ObservationContext(resolver=offline_resolver)
    ctx.set_location(51.5, -0.1)
    ctx.set_time(START)
    assert ctx.get_local_sidereal_time() == local_mean_sidereal_time(START, -0.1)


def test_each_mutation_invalidates_once(context, counting_subscriber):
    context.subscribe(counting_subscriber)
    context.subscribe(counting_subscriber)

    context.set_location(40.75, -73.5)
    assert counting_subscriber.stale_marks == 1
    context.set_time(START + timedelta(hours=3))
    assert counting_subscriber.stale_marks == 2
    context.advance_time(1)
    assert counting_subscriber.stale_marks == 3

    context.unsubscribe(counting_subscriber)
    context.advance_time(1)
    assert counting_subscriber.stale_marks == 3


@pytest.mark.parametrize("lat,lng", [(-95.0, 0.0), (90.5, 0.0), (0.0, 180.5), (0.0, float("nan"))])
def test_invalid_location_rejected(context, lat, lng):
    with pytest.raises(ValidationError):
        context.set_location(lat, lng)
    assert context.get_coordinates() == (40.75, -73.5)


def test_invalid_construction_rejected(offline_resolver):
    with pytest.raises(ValidationError):
        ObservationContext(lat=-95.0, resolver=offline_resolver)


def test_ensure_initialised_runs_once(fixed_resolver):
    resolver = fixed_resolver(3.0)
    ctx = ObservationContext(resolver=resolver)
    ctx.ensure_initialised()
    first = ctx.get_utc_time()
    ctx.ensure_initialised()

    assert len(resolver.calls) == 1
    assert ctx.get_utc_time() == first
    assert ctx.get_local_sidereal_time() == 3.0


def test_tiny_negative_longitude_shift_stays_below_24(fixed_resolver):
    ctx = ObservationContext(resolver=fixed_resolver(0.0))
    ctx.set_time(START)

    ctx.set_location(0.0, -1e-15)

    assert ctx.get_local_sidereal_time() == 0.0


def test_tiny_negative_advance_stays_below_24(fixed_resolver):
    ctx = ObservationContext(resolver=fixed_resolver(0.0))
    ctx.set_time(START)

    ctx.advance_time(-1e-16)

    assert ctx.get_local_sidereal_time() == 0.0
    assert ctx.get_utc_time() == START


@pytest.mark.parametrize("hours", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_advance_rejected(context, counting_subscriber, hours):
    context.subscribe(counting_subscriber)
    lst = context.get_local_sidereal_time()

    with pytest.raises(ValidationError):
        context.advance_time(hours)

    assert context.get_utc_time() == START
    assert context.get_local_sidereal_time() == lst
    assert counting_subscriber.stale_marks == 0


@pytest.mark.parametrize("attr", ["lat", "lng", "utc_dt", "lst_hours"])
def test_state_is_read_only(context, attr):
    with pytest.raises(AttributeError):
        setattr(context, attr, 1.0)
    assert context.get_coordinates() == (40.75, -73.5)
    assert context.get_utc_time() == START
