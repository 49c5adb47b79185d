"""Schemas for API requests and responses."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

CURRENCY_CODE = validate.Regexp(r"^[A-Z]{3}$", error="Currency codes are three uppercase letters.")


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()


class HealthDatasetSchema(Schema):
    status = fields.String(required=True)
    first_date = fields.Date(allow_none=True)
    last_date = fields.Date(allow_none=True)
    currencies = fields.Integer(allow_none=True)
    days = fields.Integer(allow_none=True)
    stale = fields.Boolean(allow_none=True)
    generation = fields.Integer(allow_none=True)
    installed_at = fields.String(allow_none=True)
    last_refresh_success = fields.String(allow_none=True)
    last_refresh_failure = fields.String(allow_none=True)
    next_refresh = fields.String(allow_none=True)


class ConversionSchema(Schema):
    base = fields.String(data_key="from", load_default=None, validate=CURRENCY_CODE)
    symbols = fields.List(
        fields.String(validate=CURRENCY_CODE), data_key="to", load_default=None
    )


class RatesQuerySchema(ConversionSchema):
    date = fields.Date(load_default=None)


class RatesRequestSchema(ConversionSchema):
    date = fields.Date(load_default=None, allow_none=True)


class TimeframeRequestSchema(ConversionSchema):
    timeframe = fields.List(
        fields.Date(allow_none=True),
        required=True,
        validate=validate.Length(equal=2, error="Timeframe must contain a start and an end."),
    )


class IndexSchema(Schema):
    currencies = fields.List(fields.String(), required=True)
    timeframe = fields.List(fields.Date(), required=True)


class RatesSchema(Schema):
    date = fields.Date(required=True)
    base = fields.String(required=True)
    rates = fields.Dict(keys=fields.String(), values=fields.Float(allow_none=True), required=True)


class TimeframeDaySchema(Schema):
    date = fields.Date(required=True)
    rates = fields.Dict(keys=fields.String(), values=fields.Float(allow_none=True), required=True)


class TimeframeSchema(Schema):
    timeframe = fields.List(fields.Date(), required=True)
    base = fields.String(required=True)
    rates = fields.List(fields.Nested(TimeframeDaySchema), required=True)


class CurrenciesNotFoundSchema(Schema):
    message = fields.String(required=True)
    currencies_not_found = fields.List(fields.String())

