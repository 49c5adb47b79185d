from __future__ import annotations

from datetime import date

from app.models.dataset import Day
from app.services.fx_conversion import convert, rates_mapping

CATALOG = ("EUR", "GBP", "USD")


def test_convert_to_eur_is_identity(dataset):
    for day in dataset.days:
        converted = convert(day, "EUR", dataset.catalog)
        assert converted is not None
        assert converted.rates == day.rates


def test_convert_rebases_every_present_rate(dataset):
    day = dataset.days[-1]
    usd = dataset.lookup_currency("USD")
    gbp = dataset.lookup_currency("GBP")
    eur = dataset.lookup_currency("EUR")

    converted = convert(day, "USD", dataset.catalog)

    assert converted is not None
    assert converted.date == day.date
    assert converted.rates[usd] == 1.0
    assert converted.rates[gbp] == day.rates[gbp] / day.rates[usd]
    assert converted.rates[eur] == 1.0 / day.rates[usd]


def test_convert_keeps_absent_rates_absent():
    day = Day(date=date(2024, 1, 1), rates=(1.0, None, 1.1))

    converted = convert(day, "USD", CATALOG)

    assert converted is not None
    assert converted.rates == (1.0 / 1.1, None, 1.0)


def test_convert_returns_none_when_base_absent_on_date(dataset):
    first_day = dataset.days[0]

    assert "ISK" in dataset.catalog
    assert convert(first_day, "ISK", dataset.catalog) is None


def test_convert_returns_none_for_unknown_currency(dataset):
    assert convert(dataset.days[0], "CHF", dataset.catalog) is None


def test_convert_returns_none_for_zero_rate():
    day = Day(date=date(2024, 1, 1), rates=(1.0, 0.0, 1.1))

    assert convert(day, "GBP", CATALOG) is None


def test_convert_does_not_mutate_input():
    day = Day(date=date(2024, 1, 2), rates=(1.0, 0.86, 1.09))

    convert(day, "GBP", CATALOG)

    assert day.rates == (1.0, 0.86, 1.09)


def test_rates_mapping_filters_symbols():
    day = Day(date=date(2024, 1, 1), rates=(1.0, None, 1.1))

    assert rates_mapping(day, CATALOG) == {"EUR": 1.0, "GBP": None, "USD": 1.1}
    assert rates_mapping(day, CATALOG, ("USD",)) == {"USD": 1.1}
