"""Timezone-stable calendar arithmetic for installment schedules.

All due dates are plain :class:`datetime.date` values in a single reference
civil calendar (Buenos Aires by default). Timestamps such as ``paid_at`` are
converted into that calendar before they are compared with due dates, so
"today" and every due date live in the same zone.

End-of-month policy: when a month does not contain the requested day, the
date clamps to the last day of that month (2024-01-31 + 1 month is
2024-02-29). Monthly plans always count months from the original anchor and
re-apply the anchor day, so a plan anchored on the 31st returns to the 31st
in long months even when its first due date was clamped.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from credit_ledger.config import DEFAULT_TIMEZONE
from credit_ledger.exceptions import ValidationError
from credit_ledger.models.enums import Frequency


def add_days(d: date, n: int) -> date:
    """Return ``d`` shifted by ``n`` days."""
    return d + timedelta(days=n)


def add_months(d: date, n: int) -> date:
    """Return ``d`` shifted by ``n`` months, clamped to the month's last day."""
    return d + relativedelta(months=n)


def add_months_on_day(d: date, n: int, day: int) -> date:
    """Day ``day`` of the month ``n`` months after ``d``'s, clamped to its last day."""
    _check_month_day(day)
    month = add_months(d.replace(day=1), n)
    return _clamped(month.year, month.month, day)


def weekday_index(d: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def _check_weekday(target: int) -> None:
    if not 0 <= target <= 6:
        raise ValidationError(f"Weekday must be in [0, 6] (0=Sunday), got {target}")


def _check_month_day(target: int) -> None:
    if not 1 <= target <= 31:
        raise ValidationError(f"Day of month must be in [1, 31], got {target}")


def _clamped(year: int, month: int, day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def next_weekday(start: date, target: int) -> date:
    """First date on or after ``start`` falling on weekday ``target``."""
    _check_weekday(target)
    return start + timedelta(days=(target - weekday_index(start)) % 7)


def next_month_day(start: date, target: int) -> date:
    """Date with day ``target`` in ``start``'s month, or the next month if already past."""
    _check_month_day(target)
    if start.day <= target:
        return _clamped(start.year, start.month, target)
    following = add_months(start.replace(day=1), 1)
    return _clamped(following.year, following.month, target)


def week_of_year(d: date) -> int:
    """Sunday-based week number: ``ceil((days_since_jan1 + weekday(jan1) + 1) / 7)``."""
    jan1 = date(d.year, 1, 1)
    elapsed = (d - jan1).days
    return (elapsed + weekday_index(jan1) + 1 + 6) // 7


def week_start(d: date) -> date:
    """Sunday starting ``d``'s week, never earlier than January 1st."""
    sunday = d - timedelta(days=weekday_index(d))
    return max(sunday, date(d.year, 1, 1))


def shift_by_period(d: date, frequency: Frequency, anchor_day: int | None = None) -> date:
    """Move ``d`` forward by one period of ``frequency``.

    Monthly shifts with an ``anchor_day`` land back on that day (clamped) so
    repeated shifts do not drift after passing through a short month.
    """
    if frequency == Frequency.DAILY:
        return add_days(d, 1)
    if frequency == Frequency.WEEKLY:
        return add_days(d, 7)
    if anchor_day is not None:
        return add_months_on_day(d, 1, anchor_day)
    return add_months(d, 1)


class DateCalendar:
    """Clock bound to the reference timezone.

    Parameters
    ----------
    timezone : str
        IANA zone name used as the civil calendar.
    clock : Callable[[], datetime] | None
        Source of the current instant, for tests. Naive values are read as
        wall time in ``timezone``.
    """

    def __init__(
        self,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.tz = ZoneInfo(timezone)
        self._clock = clock

    def now(self) -> datetime:
        """Current aware timestamp in the reference zone."""
        if self._clock is None:
            return datetime.now(self.tz)
        return self._localize(self._clock())

    def today(self) -> date:
        """Current civil date in the reference zone."""
        return self.now().date()

    def local_date(self, ts: datetime) -> date:
        """Civil date of ``ts`` in the reference zone."""
        return self._localize(ts).date()

    def _localize(self, ts: datetime) -> datetime:
        if ts.tzinfo is None:
            return ts.replace(tzinfo=self.tz)
        return ts.astimezone(self.tz)
