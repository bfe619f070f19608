from datetime import datetime, timezone

import pytest

from slotwise.services.availability.exceptions import InvalidConfigurationError
from slotwise.services.availability.interval import Interval
from slotwise.services.availability.slot_generator import SlotGenerator

UTC = timezone.utc


def at(hour, minute=0):
    return datetime(2031, 6, 4, hour, minute, tzinfo=UTC)


NINE_TO_FIVE = [Interval(at(9), at(17))]


def starts(generator):
    return [(c.offered.start.hour, c.offered.start.minute) for c in generator]


def test_back_to_back_slots_cover_the_day():
    slots = list(SlotGenerator(NINE_TO_FIVE, duration=60))

    assert len(slots) == 8
    assert slots[0].offered == Interval(at(9), at(10))
    assert slots[-1].offered == Interval(at(16), at(17))
    for previous, current in zip(slots, slots[1:]):
        assert previous.offered.end == current.offered.start


def test_final_partial_slot_is_dropped():
    slots = list(SlotGenerator([Interval(at(9), at(11, 30))], duration=60))

    assert [s.offered for s in slots] == [Interval(at(9), at(10)), Interval(at(10), at(11))]


def test_granularity_controls_stride():
    slots = list(SlotGenerator([Interval(at(9), at(11))], duration=60, granularity=30))

    assert starts(slots) == [(9, 0), (9, 30), (10, 0)]


def test_buffer_before_is_clamped_inside_opening_hours():
    slots = list(SlotGenerator(NINE_TO_FIVE, duration=60, buffer_before=15))

    first = slots[0]
    assert first.offered == Interval(at(9, 15), at(10, 15))
    assert first.effective == Interval(at(9), at(10, 15))
    assert all(s.effective.start >= at(9) for s in slots)


def test_buffer_after_never_passes_closing():
    slots = list(SlotGenerator(NINE_TO_FIVE, duration=60, buffer_after=30))

    assert all(s.effective.end <= at(17) for s in slots)
    assert slots[-1].offered.end <= at(16, 30)


def test_closed_day_and_too_short_day_are_empty():
    assert list(SlotGenerator([], duration=60)) == []
    assert list(SlotGenerator([Interval(at(9), at(10))], duration=45, buffer_before=10, buffer_after=10)) == []


def test_generator_is_restartable():
    generator = SlotGenerator(NINE_TO_FIVE, duration=90)

    assert list(generator) == list(generator)


def test_split_day_intervals():
    slots = list(SlotGenerator([Interval(at(9), at(11)), Interval(at(13), at(15))], duration=60))

    assert starts(slots) == [(9, 0), (10, 0), (13, 0), (14, 0)]


@pytest.mark.parametrize("kwargs", [
    {"duration": 0},
    {"duration": 30, "buffer_before": -5},
    {"duration": 30, "granularity": 0},
])
def test_invalid_configuration_is_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        SlotGenerator(NINE_TO_FIVE, **kwargs)
