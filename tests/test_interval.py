from datetime import date, datetime, timezone

import pytest
import pytz

from slotwise.services.availability.exceptions import InvalidTimeRangeError, InvalidTimezoneError
from slotwise.services.availability.interval import Interval, merge_intervals
from slotwise.services.availability.timezones import (
    as_utc,
    local_time_to_utc,
    parse_date,
    resolve_timezone,
)

UTC = timezone.utc


def at(hour, minute=0):
    return datetime(2031, 6, 4, hour, minute, tzinfo=UTC)


def test_touching_intervals_do_not_overlap():
    morning = Interval(at(9), at(10))
    later = Interval(at(10), at(11))

    assert not morning.overlaps(later)
    assert not later.overlaps(morning)


def test_partial_overlap_is_symmetric():
    a = Interval(at(9), at(10, 30))
    b = Interval(at(10), at(11))

    assert a.overlaps(b)
    assert b.overlaps(a)


def test_contains_is_half_open():
    interval = Interval(at(9), at(10))

    assert interval.contains(at(9))
    assert interval.contains(at(9, 59))
    assert not interval.contains(at(10))


def test_covers():
    day = Interval(at(9), at(17))

    assert day.covers(Interval(at(9), at(17)))
    assert day.covers(Interval(at(12), at(13)))
    assert not day.covers(Interval(at(16, 30), at(17, 30)))


def test_end_must_be_after_start():
    with pytest.raises(InvalidTimeRangeError):
        Interval(at(10), at(10))
    with pytest.raises(InvalidTimeRangeError):
        Interval(at(11), at(10))


def test_naive_bounds_rejected():
    with pytest.raises(InvalidTimeRangeError):
        Interval(datetime(2031, 6, 4, 9), datetime(2031, 6, 4, 10))


def test_padded_and_duration():
    padded = Interval(at(10), at(11)).padded(15, 10)

    assert padded == Interval(at(9, 45), at(11, 10))
    assert padded.duration_minutes == 85


def test_merge_intervals_coalesces_touching_and_overlapping():
    merged = merge_intervals([
        Interval(at(13), at(15)),
        Interval(at(9), at(11)),
        Interval(at(11), at(12)),
        Interval(at(14), at(16)),
    ])

    assert merged == [Interval(at(9), at(12)), Interval(at(13), at(16))]


# ============================================================================
# Timezone boundary
# ============================================================================

def test_local_time_to_utc_summer_and_winter():
    oslo = pytz.timezone("Europe/Oslo")

    assert local_time_to_utc(date(2031, 6, 4), "09:00", oslo) == at(7)
    assert local_time_to_utc(date(2025, 1, 15), "09:00", oslo) == datetime(2025, 1, 15, 8, 0, tzinfo=UTC)


def test_local_time_inside_dst_gap_maps_to_a_single_instant():
    oslo = pytz.timezone("Europe/Oslo")

    # 02:30 does not exist on 2025-03-30 in Oslo; it is read as standard time
    assert local_time_to_utc(date(2025, 3, 30), "02:30", oslo) == datetime(2025, 3, 30, 1, 30, tzinfo=UTC)


def test_resolve_timezone_fallback_and_unknown():
    assert resolve_timezone(None).zone == "UTC"
    assert resolve_timezone("", fallback="Europe/Oslo").zone == "Europe/Oslo"

    with pytest.raises(InvalidTimezoneError):
        resolve_timezone("Mars/Olympus_Mons")


def test_parse_date_variants():
    assert parse_date("2031-06-04") == date(2031, 6, 4)
    assert parse_date("2031-06-04T10:00:00Z") == date(2031, 6, 4)
    assert parse_date(at(10)) == date(2031, 6, 4)

    with pytest.raises(InvalidTimeRangeError):
        parse_date("not-a-date")


def test_as_utc_treats_naive_as_utc():
    assert as_utc(datetime(2031, 6, 4, 9)) == at(9)
    assert as_utc(pytz.timezone("Europe/Oslo").localize(datetime(2031, 6, 4, 9))) == at(7)
