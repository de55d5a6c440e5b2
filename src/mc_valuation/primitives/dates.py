"""
Dates, tenors and day count conventions.

Dates are stored as integer serial day numbers so that subtraction gives a
day count directly and simulated event times (e.g. default times) can be
compared against them as plain numbers.
"""

import calendar
import datetime
import re
from functools import total_ordering
from typing import Protocol

# Serial numbers follow the spreadsheet convention: 1899-12-30 is day zero.
_EPOCH_ORDINAL = datetime.date(1899, 12, 30).toordinal()

_TENOR_PATTERN = re.compile(r"(\d+)([DWMY])")


@total_ordering
class Date:
    """
    Immutable calendar date backed by an integer serial day number.

    Parameters
    ----------
    year, month, day : int
        Calendar date components
    """

    __slots__ = ("_value",)

    def __init__(self, year: int, month: int, day: int):
        ordinal = datetime.date(year, month, day).toordinal()
        object.__setattr__(self, "_value", ordinal - _EPOCH_ORDINAL)

    @classmethod
    def from_serial(cls, value: int) -> "Date":
        """Create a date from its serial day number."""
        date = cls.__new__(cls)
        object.__setattr__(date, "_value", int(value))
        return date

    @classmethod
    def from_datetime(cls, value: datetime.date) -> "Date":
        return cls(value.year, value.month, value.day)

    def __setattr__(self, name, value):
        raise AttributeError("Date is immutable")

    @property
    def value(self) -> int:
        """Serial day number."""
        return self._value

    def to_datetime(self) -> datetime.date:
        return datetime.date.fromordinal(self._value + _EPOCH_ORDINAL)

    @property
    def year(self) -> int:
        return self.to_datetime().year

    @property
    def month(self) -> int:
        return self.to_datetime().month

    @property
    def day(self) -> int:
        return self.to_datetime().day

    def add_days(self, days: int) -> "Date":
        return Date.from_serial(self._value + days)

    def add_months(self, months: int) -> "Date":
        """Add calendar months, clipping the day to the end of the target month."""
        d = self.to_datetime()
        month_index = d.year * 12 + (d.month - 1) + months
        year, month = divmod(month_index, 12)
        month += 1
        day = min(d.day, calendar.monthrange(year, month)[1])
        return Date(year, month, day)

    def add_tenor(self, tenor: "Tenor") -> "Date":
        result = self.add_months(12 * tenor.years + tenor.months)
        return result.add_days(7 * tenor.weeks + tenor.days)

    def __add__(self, days: int) -> "Date":
        if isinstance(days, bool) or not isinstance(days, int):
            return NotImplemented
        return self.add_days(days)

    def __sub__(self, other):
        if isinstance(other, Date):
            return self._value - other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self.add_days(-other)
        return NotImplemented

    def __eq__(self, other) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __reduce__(self):
        return (Date.from_serial, (self._value,))

    def __str__(self) -> str:
        return self.to_datetime().isoformat()

    def __repr__(self) -> str:
        d = self.to_datetime()
        return f"Date({d.year}, {d.month}, {d.day})"


class Tenor:
    """
    A period made of days, weeks, months and years.

    Examples
    --------
    >>> Tenor.from_months(3)
    Tenor('3M')
    >>> Tenor.parse("1Y6M")
    Tenor('1Y6M')
    """

    __slots__ = ("days", "weeks", "months", "years")

    def __init__(self, days: int = 0, weeks: int = 0, months: int = 0, years: int = 0):
        object.__setattr__(self, "days", days)
        object.__setattr__(self, "weeks", weeks)
        object.__setattr__(self, "months", months)
        object.__setattr__(self, "years", years)

    def __setattr__(self, name, value):
        raise AttributeError("Tenor is immutable")

    @classmethod
    def from_days(cls, n: int) -> "Tenor":
        return cls(days=n)

    @classmethod
    def from_weeks(cls, n: int) -> "Tenor":
        return cls(weeks=n)

    @classmethod
    def from_months(cls, n: int) -> "Tenor":
        return cls(months=n)

    @classmethod
    def from_years(cls, n: int) -> "Tenor":
        return cls(years=n)

    @classmethod
    def parse(cls, text: str) -> "Tenor":
        """Parse strings such as ``"3M"``, ``"1Y"`` or ``"1Y6M"``."""
        text = text.strip().upper()
        parts = _TENOR_PATTERN.findall(text)
        if not parts or "".join(n + unit for n, unit in parts) != text:
            raise ValueError(f"Cannot parse tenor: {text!r}")
        counts = {"D": 0, "W": 0, "M": 0, "Y": 0}
        for n, unit in parts:
            counts[unit] += int(n)
        return cls(days=counts["D"], weeks=counts["W"], months=counts["M"], years=counts["Y"])

    def _key(self) -> tuple[int, int, int, int]:
        return (self.years, self.months, self.weeks, self.days)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tenor):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __reduce__(self):
        return (Tenor, (self.days, self.weeks, self.months, self.years))

    def __str__(self) -> str:
        text = "".join(
            f"{n}{unit}" for n, unit in zip(self._key(), "YMWD") if n
        )
        return text or "0D"

    def __repr__(self) -> str:
        return f"Tenor('{self}')"


class DayCountConvention(Protocol):
    """Converts a pair of dates into a year fraction."""

    def year_fraction(self, date1: Date, date2: Date) -> float:
        ...


class Actual365Fixed:
    """Actual/365 Fixed: day count divided by 365."""

    def year_fraction(self, date1: Date, date2: Date) -> float:
        return (date2 - date1) / 365.0

    def __repr__(self) -> str:
        return "Actual365Fixed()"


class Actual360:
    """Actual/360: day count divided by 360."""

    def year_fraction(self, date1: Date, date2: Date) -> float:
        return (date2 - date1) / 360.0

    def __repr__(self) -> str:
        return "Actual360()"


ACT_365_FIXED = Actual365Fixed()
ACT_360 = Actual360()
