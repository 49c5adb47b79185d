"""Immutable in-memory index over the daily reference rates."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

EUR = "EUR"

Rate = Optional[float]


class RangeError(ValueError):
    """Raised when a timeframe selection is inverted or selects no days."""


@dataclass(frozen=True)
class Day:
    """One trading day with rates positionally aligned to a dataset catalog.

    ``rates[i]`` is the number of units of ``catalog[i]`` per euro, or ``None``
    when that currency was not quoted on ``date``.
    """

    date: date
    rates: tuple[Rate, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", tuple(self.rates))


@dataclass(frozen=True)
class Dataset:
    """A sorted currency catalog plus date-ascending days aligned to it."""

    catalog: tuple[str, ...]
    days: tuple[Day, ...] = ()
    _dates: tuple[date, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        catalog = tuple(self.catalog)
        days = tuple(self.days)

        if any(left >= right for left, right in zip(catalog, catalog[1:])):
            raise ValueError("catalog must be sorted and free of duplicates")
        if EUR not in catalog:
            raise ValueError("catalog must contain EUR")
        for day in days:
            if len(day.rates) != len(catalog):
                raise ValueError(
                    f"day {day.date.isoformat()} has {len(day.rates)} rates, "
                    f"expected {len(catalog)}"
                )
        dates = tuple(day.date for day in days)
        if any(left >= right for left, right in zip(dates, dates[1:])):
            raise ValueError("days must be strictly ascending by date")

        object.__setattr__(self, "catalog", catalog)
        object.__setattr__(self, "days", days)
        object.__setattr__(self, "_dates", dates)

    def __len__(self) -> int:
        return len(self.days)

    @property
    def first_date(self) -> date | None:
        return self._dates[0] if self._dates else None

    @property
    def last_date(self) -> date | None:
        return self._dates[-1] if self._dates else None

    def timeframe(self) -> tuple[date, date] | None:
        """Return the first and last available dates, or ``None`` when empty."""

        if not self._dates:
            return None
        return self._dates[0], self._dates[-1]

    def lookup_currency(self, code: str) -> int | None:
        """Return the catalog slot for ``code`` (exact, case-sensitive match)."""

        index = bisect_left(self.catalog, code)
        if index < len(self.catalog) and self.catalog[index] == code:
            return index
        return None

    def has_currency(self, code: str) -> bool:
        return self.lookup_currency(code) is not None

    def lookup_date_on_or_before(self, on: date | None = None) -> int | None:
        """Index of the day at ``on``, else the latest day before it.

        Without a date the latest day is selected. Returns ``None`` when ``on``
        precedes every day or the dataset is empty.
        """

        if not self._dates:
            return None
        if on is None:
            return len(self._dates) - 1
        index = bisect_right(self._dates, on) - 1
        return index if index >= 0 else None

    def lookup_date_on_or_after(self, on: date) -> int | None:
        """Index of the day at ``on``, else the earliest day after it."""

        index = bisect_left(self._dates, on)
        return index if index < len(self._dates) else None

    def day_on_or_before(self, on: date | None = None) -> Day | None:
        index = self.lookup_date_on_or_before(on)
        return self.days[index] if index is not None else None

    def select_timeframe(self, start: date | None = None, end: date | None = None) -> tuple[Day, ...]:
        """Return the half-open slice of days from ``start`` up to ``end``.

        ``start`` resolves to its trading day or the previous one (the first day
        when it precedes the dataset). ``end`` resolves to its trading day or the
        next one and is excluded. Open ends extend to the first and last day.

        Raises:
            RangeError: If the dataset is empty, the range is inverted, ``end``
                lies after every day, or no day falls inside the range.
        """

        if not self._dates:
            raise RangeError("No rates available")
        if start is not None and end is not None and start > end:
            raise RangeError(
                f"Timeframe start {start.isoformat()} is after end {end.isoformat()}"
            )

        first = 0
        if start is not None:
            first = self._or_default(self.lookup_date_on_or_before(start), 0)

        stop = len(self._dates)
        if end is not None:
            upper = self.lookup_date_on_or_after(end)
            if upper is None:
                raise RangeError(
                    f"Timeframe end {end.isoformat()} is after the latest available day"
                )
            stop = upper

        selected = self.days[first:stop]
        if not selected:
            raise RangeError("Timeframe does not contain any available day")
        return selected

    @staticmethod
    def _or_default(value: int | None, default: int) -> int:
        return default if value is None else value


def build_catalog(codes: Sequence[str]) -> tuple[str, ...]:
    """Sorted, deduplicated catalog of ``codes`` that always includes EUR."""

    return tuple(sorted(set(codes) | {EUR}))
