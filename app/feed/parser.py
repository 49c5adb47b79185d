"""Parser for the ECB euro foreign exchange reference rates XML feed.

The feed looks like::

    <gesmes:Envelope xmlns:gesmes="..." xmlns="http://www.ecb.int/vocabulary/2002-08-01/eurofxref">
        <gesmes:subject>Reference rates</gesmes:subject>
        <Cube>
            <Cube time="2024-01-02">
                <Cube currency="USD" rate="1.0956"/>
                ...
            </Cube>
            ...
        </Cube>
    </gesmes:Envelope>

Days are published newest first; rates are quoted as units of currency per euro.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from bisect import bisect_left
from collections.abc import Iterable
from datetime import date
from math import isfinite

from app.feed.base import ParseError
from app.models.dataset import EUR, Dataset, Day, build_catalog

CUBE_TAG = "Cube"
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

RawDay = tuple[date, list[tuple[str, float]]]


def parse_feed(data: bytes | str) -> Dataset:
    """Parse raw feed bytes into a :class:`Dataset`.

    Raises:
        ParseError: If the document is not well-formed XML or deviates from the
            envelope / day / currency structure.
    """

    entries = _read_entries(data)

    catalog = build_catalog([code for _, pairs in entries for code, _ in pairs])
    eur_slot = bisect_left(catalog, EUR)

    days: list[Day] = []
    for day_date, pairs in sorted(entries, key=lambda entry: entry[0]):
        rates: list[float | None] = [None] * len(catalog)
        rates[eur_slot] = 1.0
        for code, rate in pairs:
            rates[bisect_left(catalog, code)] = rate
        days.append(Day(date=day_date, rates=tuple(rates)))

    return Dataset(catalog=catalog, days=tuple(days))


def _read_entries(data: bytes | str) -> list[RawDay]:
    if not data:
        raise ParseError("Feed document is empty")
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ParseError(f"Feed is not well-formed XML: {exc}") from exc

    envelope = _children(root, CUBE_TAG)
    if len(envelope) != 1:
        raise ParseError(f"Expected exactly one top-level Cube element, found {len(envelope)}")

    entries: list[RawDay] = []
    seen: set[date] = set()
    for element in envelope[0]:
        if _local_name(element.tag) != CUBE_TAG:
            raise ParseError(f"Unexpected element <{_local_name(element.tag)}> in day list")
        day_date = _parse_date(element.get("time"))
        if day_date in seen:
            raise ParseError(f"Duplicate day {day_date.isoformat()} in feed")
        seen.add(day_date)
        entries.append((day_date, list(_parse_rates(element, day_date))))
    return entries


def _parse_rates(day: ET.Element, day_date: date) -> Iterable[tuple[str, float]]:
    codes: set[str] = set()
    for element in day:
        if _local_name(element.tag) != CUBE_TAG:
            raise ParseError(
                f"Unexpected element <{_local_name(element.tag)}> on {day_date.isoformat()}"
            )
        code = element.get("currency")
        if code is None or not CURRENCY_PATTERN.match(code):
            raise ParseError(f"Invalid currency code {code!r} on {day_date.isoformat()}")
        if code in codes:
            raise ParseError(f"Duplicate currency {code} on {day_date.isoformat()}")
        codes.add(code)

        raw_rate = element.get("rate")
        try:
            rate = float(raw_rate) if raw_rate is not None else None
        except ValueError:
            rate = None
        if rate is None or not isfinite(rate):
            raise ParseError(f"Invalid rate {raw_rate!r} for {code} on {day_date.isoformat()}")

        # The feed's own base is implied; a quoted EUR row is ignored.
        if code == EUR:
            continue
        yield code, rate


def _parse_date(value: str | None) -> date:
    if not value:
        raise ParseError("Day element is missing its 'time' attribute")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ParseError(f"Invalid day date {value!r}") from exc


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""
