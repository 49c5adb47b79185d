"""Route handlers for reference rate lookups."""

from __future__ import annotations

from typing import Any

from flask import current_app
from flask.views import MethodView

from app.errors import (
    CurrenciesNotFoundError,
    DateNotFoundError,
    NoRatesAvailableError,
    ValidationError,
)
from app.models.dataset import Dataset, RangeError
from app.schemas import (
    CurrenciesNotFoundSchema,
    IndexSchema,
    RatesQuerySchema,
    RatesRequestSchema,
    RatesSchema,
    TimeframeRequestSchema,
    TimeframeSchema,
)
from app.services.fx_conversion import convert, rates_mapping
from app.services.shared_dataset import DATASET_EXT_KEY, SharedDataset
from app.validation import validate_conversion

from . import blp


def _dataset_handle() -> SharedDataset:
    handle: SharedDataset | None = current_app.extensions.get(DATASET_EXT_KEY)
    if handle is None:
        raise NoRatesAvailableError()
    return handle


@blp.route("/")
class Index(MethodView):
    @blp.response(200, IndexSchema())
    def get(self):
        """List the available currencies and the dataset timeframe."""

        with _dataset_handle().snapshot() as dataset:
            timeframe = dataset.timeframe()
            if timeframe is None:
                raise NoRatesAvailableError()
            return {"currencies": list(dataset.catalog), "timeframe": list(timeframe)}


@blp.route("/rates")
class Rates(MethodView):
    @blp.arguments(RatesQuerySchema, location="query")
    @blp.response(200, RatesSchema())
    @blp.alt_response(404, schema=CurrenciesNotFoundSchema)
    def get(self, args):
        """Rates for a date (latest by default), optionally rebased."""

        with _dataset_handle().snapshot() as dataset:
            return _rates_on(dataset, args)

    @blp.arguments(RatesRequestSchema)
    @blp.response(200, RatesSchema())
    @blp.alt_response(404, schema=CurrenciesNotFoundSchema)
    def post(self, data):
        """Rates for a date (latest by default), optionally rebased."""

        with _dataset_handle().snapshot() as dataset:
            return _rates_on(dataset, data)


@blp.route("/rates/timeframe")
class Timeframe(MethodView):
    @blp.arguments(TimeframeRequestSchema)
    @blp.response(200, TimeframeSchema())
    @blp.alt_response(404, schema=CurrenciesNotFoundSchema)
    def post(self, data):
        """Rates for every available day within a timeframe."""

        start, end = data["timeframe"]
        with _dataset_handle().snapshot() as dataset:
            conversion = validate_conversion(dataset, data.get("base"), data.get("symbols"))
            try:
                days = dataset.select_timeframe(start, end)
            except RangeError as exc:
                raise ValidationError(str(exc), payload={"field": "timeframe"}) from exc

            rates: list[dict[str, Any]] = []
            for day in days:
                converted = convert(day, conversion.base, dataset.catalog)
                # Days before the base currency existed are left out.
                if converted is None:
                    continue
                rates.append(
                    {
                        "date": converted.date,
                        "rates": rates_mapping(converted, dataset.catalog, conversion.symbols),
                    }
                )

        if not rates:
            raise CurrenciesNotFoundError([conversion.base])

        return {
            "timeframe": [rates[0]["date"], rates[-1]["date"]],
            "base": conversion.base,
            "rates": rates,
        }


def _rates_on(dataset: Dataset, params: dict[str, Any]) -> dict[str, Any]:
    if not len(dataset):
        raise NoRatesAvailableError()

    conversion = validate_conversion(dataset, params.get("base"), params.get("symbols"))

    requested = params.get("date")
    day = dataset.day_on_or_before(requested)
    if day is None:
        raise DateNotFoundError(requested)

    converted = convert(day, conversion.base, dataset.catalog)
    if converted is None:
        raise CurrenciesNotFoundError([conversion.base])

    return {
        "date": converted.date,
        "base": conversion.base,
        "rates": rates_mapping(converted, dataset.catalog, conversion.symbols),
    }
