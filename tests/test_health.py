"""Smoke tests for health endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from freezegun import freeze_time

from app.services.scheduler import ensure_refresh_state, init_refresher
from app.services.shared_dataset import DATASET_EXT_KEY


def test_health_endpoint_returns_ok(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["app"] == "ecb-exchange-rates"


def test_health_dataset_uninitialized_without_handle(client):
    client.application.extensions.pop(DATASET_EXT_KEY)

    response = client.get("/health/dataset")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "uninitialized"
    assert payload["last_date"] is None
    assert payload["stale"] is None


@freeze_time("2024-01-05T12:00:00Z")
def test_health_dataset_reports_metadata(client):
    app = client.application
    init_refresher(app)
    ensure_refresh_state(app)["last_success"] = datetime(2024, 1, 4, 15, 31, tzinfo=UTC)

    response = client.get("/health/dataset")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["first_date"] == "2024-01-02"
    assert payload["last_date"] == "2024-01-05"
    assert payload["currencies"] == 5
    assert payload["days"] == 3
    assert payload["stale"] is False
    assert payload["generation"] == 1
    assert payload["last_refresh_success"] == "2024-01-04T15:31:00+00:00"
    assert payload["last_refresh_failure"] is None
    assert payload["next_refresh"] == "2024-01-05T16:30:00+01:00"


@freeze_time("2024-01-09T12:00:00Z")
def test_health_dataset_flags_stale_data(client):
    response = client.get("/health/dataset")

    assert response.get_json()["stale"] is True
