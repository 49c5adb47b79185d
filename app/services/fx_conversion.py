"""Rebasing of euro-denominated reference rates onto another currency."""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Collection, Sequence

from app.models.dataset import EUR, Day


def convert(day: Day, base: str, catalog: Sequence[str]) -> Day | None:
    """Express every rate of ``day`` in units per one ``base``.

    Returns ``None`` when ``base`` is not in ``catalog`` or has no rate on
    ``day.date``. Absent rates stay absent; the input is never modified.
    """

    if base == EUR:
        return day

    slot = _catalog_slot(catalog, base)
    if slot is None:
        return None

    base_rate = day.rates[slot]
    if base_rate is None or base_rate == 0:
        return None

    rebased = tuple(None if rate is None else rate / base_rate for rate in day.rates)
    return Day(date=day.date, rates=rebased)


def rates_mapping(
    day: Day,
    catalog: Sequence[str],
    symbols: Collection[str] | None = None,
) -> dict[str, float | None]:
    """Render ``day`` as ``{code: rate}``, optionally limited to ``symbols``."""

    return {
        code: rate
        for code, rate in zip(catalog, day.rates)
        if not symbols or code in symbols
    }


def _catalog_slot(catalog: Sequence[str], code: str) -> int | None:
    index = bisect_left(catalog, code)
    if index < len(catalog) and catalog[index] == code:
        return index
    return None
