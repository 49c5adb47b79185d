from __future__ import annotations

import pytest

from app.feed.parser import parse_feed
from app.services.shared_dataset import DATASET_EXT_KEY, SharedDataset
from tests.fixtures import build_feed


def test_index_lists_currencies_and_timeframe(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.get_json() == {
        "currencies": ["EUR", "GBP", "ISK", "JPY", "USD"],
        "timeframe": ["2024-01-02", "2024-01-05"],
    }


def test_index_reports_empty_dataset(client):
    client.application.extensions[DATASET_EXT_KEY] = SharedDataset(parse_feed(build_feed({})))

    response = client.get("/")

    assert response.status_code == 503
    assert response.get_json()["message"] == "No rates available."


def test_latest_rates_default_to_eur(client):
    response = client.get("/rates")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["date"] == "2024-01-05"
    assert payload["base"] == "EUR"
    assert payload["rates"]["EUR"] == 1.0
    assert payload["rates"]["USD"] == 1.0921


def test_rates_for_weekend_resolve_to_previous_trading_day(client):
    response = client.get("/rates", query_string={"date": "2024-01-03"})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["date"] == "2024-01-02"
    assert payload["rates"]["ISK"] is None


def test_rates_converted_and_filtered(client):
    response = client.get("/rates", query_string=[("from", "USD"), ("to", "EUR"), ("to", "USD")])

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["base"] == "USD"
    assert payload["rates"] == {"EUR": pytest.approx(1 / 1.0921), "USD": 1.0}


def test_post_rates_accepts_json_body(client):
    response = client.post("/rates", json={"date": "2024-01-04", "from": "GBP", "to": ["JPY"]})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["date"] == "2024-01-04"
    assert payload["rates"] == {"JPY": pytest.approx(158.53 / 0.86215)}


def test_unknown_currencies_are_reported(client):
    response = client.post("/rates", json={"from": "CHF", "to": ["USD"]})

    assert response.status_code == 404
    assert response.get_json()["currencies_not_found"] == ["CHF"]

    response = client.post("/rates", json={"to": ["USD", "NOK", "SEK"]})

    assert response.status_code == 404
    assert response.get_json()["currencies_not_found"] == ["NOK", "SEK"]


def test_base_absent_on_date_is_reported_as_not_found(client):
    response = client.post("/rates", json={"date": "2024-01-02", "from": "ISK"})

    assert response.status_code == 404
    assert response.get_json()["currencies_not_found"] == ["ISK"]


def test_date_before_dataset_is_not_found(client):
    response = client.get("/rates", query_string={"date": "2023-12-29"})

    assert response.status_code == 404
    assert response.get_json()["date"] == "2023-12-29"


def test_invalid_currency_format_is_rejected(client):
    response = client.post("/rates", json={"from": "usd"})

    assert response.status_code == 422


def test_timeframe_returns_every_day(client):
    response = client.post("/rates/timeframe", json={"timeframe": [None, None], "to": ["USD"]})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["timeframe"] == ["2024-01-02", "2024-01-05"]
    assert [entry["date"] for entry in payload["rates"]] == [
        "2024-01-02",
        "2024-01-04",
        "2024-01-05",
    ]
    assert payload["rates"][0]["rates"] == {"USD": 1.0956}


def test_timeframe_skips_days_without_base(client):
    response = client.post(
        "/rates/timeframe",
        json={"timeframe": ["2024-01-01", "2024-01-05"], "from": "ISK", "to": ["ISK"]},
    )

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["timeframe"] == ["2024-01-04", "2024-01-04"]
    assert payload["rates"] == [{"date": "2024-01-04", "rates": {"ISK": 1.0}}]


def test_timeframe_without_any_base_rate_is_not_found(client):
    response = client.post(
        "/rates/timeframe", json={"timeframe": ["2024-01-02", "2024-01-04"], "from": "ISK"}
    )

    assert response.status_code == 404
    assert response.get_json()["currencies_not_found"] == ["ISK"]


def test_inverted_timeframe_is_rejected(client):
    response = client.post("/rates/timeframe", json={"timeframe": ["2024-01-05", "2024-01-02"]})

    assert response.status_code == 422
    payload = response.get_json()
    assert "after end" in payload["message"]
    assert "timeframe" in payload["field_errors"]


def test_timeframe_after_latest_day_is_rejected(client):
    response = client.post("/rates/timeframe", json={"timeframe": ["2030-01-01", "2030-02-01"]})

    assert response.status_code == 422
    payload = response.get_json()
    assert "after the latest available day" in payload["message"]
    assert "timeframe" in payload["field_errors"]


def test_timeframe_end_day_is_exclusive(client):
    response = client.post(
        "/rates/timeframe", json={"timeframe": ["2024-01-02", "2024-01-05"], "to": ["USD"]}
    )

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["timeframe"] == ["2024-01-02", "2024-01-04"]
    assert [entry["date"] for entry in payload["rates"]] == ["2024-01-02", "2024-01-04"]


def test_timeframe_requires_two_entries(client):
    response = client.post("/rates/timeframe", json={"timeframe": ["2024-01-05"]})

    assert response.status_code == 422


def test_rates_unavailable_without_dataset(client):
    client.application.extensions.pop(DATASET_EXT_KEY)

    response = client.get("/rates")

    assert response.status_code == 503
