# slotwise/services/availability/business_hours.py
"""
Resolve a provider's weekly business hours into absolute open intervals.

When a provider has not configured any rule at all, the default policy applies:
Monday to Friday 09:00-17:00, closed on weekends. Once at least one rule exists,
a weekday without a rule is closed.
"""
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from slotwise.services.availability.exceptions import InvalidConfigurationError
from slotwise.services.availability.interval import Interval, merge_intervals
from slotwise.services.availability.timezones import local_time_to_utc, parse_hhmm
from slotwise.services.availability.types import BusinessHoursRule

DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "17:00"
DEFAULT_OPEN_DAYS = frozenset({1, 2, 3, 4, 5})  # Monday-Friday


def day_of_week(day: date) -> int:
    """0=Sunday ... 6=Saturday"""
    return day.isoweekday() % 7


def default_business_hours() -> List[BusinessHoursRule]:
    return [
        BusinessHoursRule(
            day_of_week=dow,
            is_open=dow in DEFAULT_OPEN_DAYS,
            open_time=DEFAULT_OPEN_TIME,
            close_time=DEFAULT_CLOSE_TIME,
        )
        for dow in range(7)
    ]


class BusinessHoursResolver:
    """Turns weekday rules into open intervals for concrete dates"""

    def __init__(self, rules: Sequence[BusinessHoursRule]):
        self.is_default = not rules
        effective_rules = rules if rules else default_business_hours()
        self._rules: Dict[int, BusinessHoursRule] = {}
        for rule in effective_rules:
            if rule.day_of_week in self._rules:
                raise InvalidConfigurationError(
                    f"Duplicate business hours rule for day {rule.day_of_week}"
                )
            self._rules[rule.day_of_week] = rule

    def rule_for(self, dow: int) -> Optional[BusinessHoursRule]:
        return self._rules.get(dow)

    def open_intervals(self, day: date, tz) -> List[Interval]:
        """Open interval(s) for `day` interpreted in `tz`; empty when closed."""
        rule = self.rule_for(day_of_week(day))
        if rule is None or not rule.is_open:
            return []

        if parse_hhmm(rule.open_time) >= parse_hhmm(rule.close_time):
            raise InvalidConfigurationError(
                f"Business hours for day {rule.day_of_week} open at {rule.open_time} "
                f"but close at {rule.close_time}"
            )

        return [
            Interval(
                local_time_to_utc(day, rule.open_time, tz),
                local_time_to_utc(day, rule.close_time, tz),
            )
        ]

    def intervals_around(self, window: Interval, tz) -> List[Interval]:
        """Merged open intervals for every local date the window touches."""
        first_day = window.start.astimezone(tz).date() - timedelta(days=1)
        last_day = window.end.astimezone(tz).date()

        intervals: List[Interval] = []
        day = first_day
        while day <= last_day:
            intervals.extend(self.open_intervals(day, tz))
            day += timedelta(days=1)

        return merge_intervals(intervals)

    def covers(self, window: Interval, tz) -> bool:
        """True when the window lies inside a single open period."""
        return any(
            interval.covers(window) for interval in self.intervals_around(window, tz)
        )
