# slotwise/services/availability/slot_generator.py
"""
Candidate slot enumeration for one day.

Buffers are kept inside business hours: the first candidate of an open interval
starts at open + buffer_before, and a candidate is only produced while
start + duration + buffer_after <= close.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterator, Optional, Sequence

from slotwise.services.availability.exceptions import InvalidConfigurationError
from slotwise.services.availability.interval import Interval


@dataclass(frozen=True)
class SlotCandidate:
    offered: Interval    # shown to the customer
    effective: Interval  # offered window plus buffers, used for conflict checks


class SlotGenerator:
    """Lazy, finite and restartable: every iteration starts from the first slot."""

    def __init__(
            self,
            open_intervals: Sequence[Interval],
            duration: int,
            buffer_before: int = 0,
            buffer_after: int = 0,
            granularity: Optional[int] = None
    ):
        if duration is None or duration < 1:
            raise InvalidConfigurationError(f"Slot duration must be at least 1 minute, got {duration}")
        if buffer_before < 0 or buffer_after < 0:
            raise InvalidConfigurationError("Buffer times cannot be negative")
        if granularity is not None and granularity < 1:
            raise InvalidConfigurationError(f"Slot granularity must be at least 1 minute, got {granularity}")

        self.open_intervals = list(open_intervals)
        self.duration = duration
        self.buffer_before = buffer_before
        self.buffer_after = buffer_after
        self.granularity = granularity or duration

    def __iter__(self) -> Iterator[SlotCandidate]:
        duration = timedelta(minutes=self.duration)
        before = timedelta(minutes=self.buffer_before)
        after = timedelta(minutes=self.buffer_after)
        step = timedelta(minutes=self.granularity)

        for interval in self.open_intervals:
            current = interval.start + before
            while current + duration + after <= interval.end:
                offered = Interval(current, current + duration)
                yield SlotCandidate(
                    offered=offered,
                    effective=Interval(current - before, current + duration + after),
                )
                current += step
