"""Route handlers for health checks."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from flask import current_app
from flask.views import MethodView

from app.schemas import HealthDatasetSchema, HealthStatusSchema
from app.services.acquisition import ACQUISITION_EXT_KEY, AcquisitionController
from app.services.scheduler import REFRESHER_EXT_KEY, DatasetRefresher, ensure_refresh_state
from app.services.shared_dataset import DATASET_EXT_KEY, SharedDataset

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    def get(self):
        return {
            "status": "ok",
            "app": current_app.config.get("APP_NAME", "ecb-exchange-rates"),
        }


@blp.route("/dataset")
class HealthDataset(MethodView):
    @blp.response(200, HealthDatasetSchema())
    def get(self):
        app = current_app
        handle: SharedDataset | None = app.extensions.get(DATASET_EXT_KEY)
        if handle is None:
            return {
                "status": "uninitialized",
                "first_date": None,
                "last_date": None,
                "currencies": None,
                "days": None,
                "stale": None,
                "generation": None,
                "installed_at": None,
                "last_refresh_success": None,
                "last_refresh_failure": None,
                "next_refresh": None,
            }

        generation = handle.current()
        dataset = generation.dataset
        controller: AcquisitionController | None = app.extensions.get(ACQUISITION_EXT_KEY)
        refresher: DatasetRefresher | None = app.extensions.get(REFRESHER_EXT_KEY)
        state = ensure_refresh_state(app)

        stale = controller.is_stale(dataset) if controller is not None else None
        return {
            "status": "ok" if len(dataset) else "empty",
            "first_date": dataset.first_date,
            "last_date": dataset.last_date,
            "currencies": len(dataset.catalog),
            "days": len(dataset),
            "stale": stale,
            "generation": generation.generation,
            "installed_at": generation.installed_at.isoformat(),
            "last_refresh_success": _isoformat(state.get("last_success")),
            "last_refresh_failure": _isoformat(state.get("last_failure")),
            "next_refresh": refresher.next_run_at().isoformat() if refresher else None,
        }


def _isoformat(value: Any) -> str | None:
    return value.isoformat() if isinstance(value, datetime) else None
