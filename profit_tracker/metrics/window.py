"""
Date windows for dashboard metrics.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional, TypeVar, Union

from ..db import AdSpend, Order

T = TypeVar("T")


@dataclass(frozen=True)
class DateWindow:
    """
    Calendar-day window, inclusive at both ends.

    No start means unbounded: nothing is filtered out. A missing end
    means "through the end of today".
    """
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None

    @property
    def is_complete(self) -> bool:
        """Both ends set; required for period-over-period comparison."""
        return self.start is not None and self.end is not None

    def bounds(self, today: Optional[date] = None) -> Optional[tuple]:
        """(start-of-day, end-of-day) datetimes, or None when unbounded."""
        if self.start is None:
            return None
        end = self.end or today or date.today()
        return datetime.combine(self.start, time.min), datetime.combine(end, time.max)

    def contains(self, moment: Union[date, datetime], today: Optional[date] = None) -> bool:
        bounds = self.bounds(today)
        if bounds is None:
            return True
        if not isinstance(moment, datetime):
            moment = datetime.combine(moment, time.min)
        elif moment.tzinfo is not None:
            moment = moment.replace(tzinfo=None)
        return bounds[0] <= moment <= bounds[1]

    @property
    def days(self) -> int:
        if not self.is_complete:
            return 0
        return (self.end - self.start).days + 1

    def previous(self) -> Optional["DateWindow"]:
        """The window of equal length ending the day before this one starts."""
        if not self.is_complete:
            return None
        length = timedelta(days=self.days)
        return DateWindow(start=self.start - length, end=self.start - timedelta(days=1))


UNBOUNDED = DateWindow()


def filter_by_window(
    records: Iterable[T],
    window: DateWindow,
    key: Callable[[T], Union[date, datetime]],
    today: Optional[date] = None
) -> List[T]:
    return [record for record in records if window.contains(key(record), today)]


def filter_orders(orders: Iterable[Order], window: DateWindow, today: Optional[date] = None) -> List[Order]:
    return filter_by_window(orders, window, lambda o: o.order_date, today)


def filter_ad_spends(spends: Iterable[AdSpend], window: DateWindow, today: Optional[date] = None) -> List[AdSpend]:
    return filter_by_window(spends, window, lambda s: s.spend_date, today)
