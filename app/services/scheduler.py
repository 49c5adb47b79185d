"""Scheduler setup for the daily dataset refresh."""

from __future__ import annotations

import atexit
import logging
import threading
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from flask import Flask

from app.feed.base import FetchError, ParseError
from app.logging import feed_log_extra
from app.services.acquisition import ACQUISITION_EXT_KEY, AcquisitionController
from app.services.shared_dataset import DATASET_EXT_KEY, SharedDataset
from app.utils.datetime import FEED_TIMEZONE, ensure_utc, utc_now

logger = logging.getLogger(__name__)

SCHEDULER_EXT_KEY = "apscheduler"
REFRESHER_EXT_KEY = "fx_refresher"
REFRESH_STATE_KEY = "fx_refresh_state"
REFRESH_JOB_ID = "refresh_dataset"


def ensure_refresh_state(app: Flask) -> dict[str, Any]:
    """Ensure refresh state dict exists on app extensions."""
    state = app.extensions.setdefault(REFRESH_STATE_KEY, {})
    if not isinstance(state, dict):
        new_state: dict[str, Any] = {}
        app.extensions[REFRESH_STATE_KEY] = new_state
        return new_state
    return state


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def next_refresh_at(now: datetime, refresh_minute: int, timezone: str = FEED_TIMEZONE) -> datetime:
    """Next occurrence of ``refresh_minute`` in ``timezone`` strictly after ``now``.

    The result is today's slot when it has not passed yet, tomorrow's otherwise.
    """

    zone = ZoneInfo(timezone)
    local_now = ensure_utc(now).astimezone(zone)
    hour, minute = divmod(refresh_minute, 60)
    candidate = datetime.combine(local_now.date(), time(hour, minute), tzinfo=zone)
    if candidate <= local_now:
        candidate = datetime.combine(
            local_now.date() + timedelta(days=1), time(hour, minute), tzinfo=zone
        )
    return candidate


def seconds_until_refresh(now: datetime, refresh_minute: int, timezone: str = FEED_TIMEZONE) -> float:
    return (next_refresh_at(now, refresh_minute, timezone) - ensure_utc(now)).total_seconds()


class DatasetRefresher:
    """Runs the fetch path once per feed day and swaps the shared dataset."""

    def __init__(
        self,
        controller: AcquisitionController,
        handle: SharedDataset,
        refresh_minute: int,
        timezone: str = FEED_TIMEZONE,
        state: dict[str, Any] | None = None,
    ) -> None:
        self._controller = controller
        self._handle = handle
        self._refresh_minute = refresh_minute
        self._zone = ZoneInfo(timezone)
        self._timezone = timezone
        self._run_lock = threading.Lock()
        self._last_success_day: date | None = None
        self.state: dict[str, Any] = state if state is not None else {}

    @property
    def refresh_minute(self) -> int:
        return self._refresh_minute

    def next_run_at(self, now: datetime | None = None) -> datetime:
        return next_refresh_at(now or utc_now(), self._refresh_minute, self._timezone)

    def is_due(self, now: datetime | None = None) -> bool:
        """True once the refresh minute has passed and today has not been refreshed yet.

        Late wake-ups still count, so a missed exact minute never skips a day.
        """

        local_now = ensure_utc(now or utc_now()).astimezone(self._zone)
        if minute_of_day(local_now) < self._refresh_minute:
            return False
        return self._last_success_day != local_now.date()

    def run(self, now: datetime | None = None, *, force: bool = False) -> bool:
        """Refresh the shared dataset; returns whether a new dataset was installed."""

        moment = ensure_utc(now or utc_now())
        if not force and not self.is_due(moment):
            logger.debug("Refresh not due at %s; skipping.", moment.isoformat())
            return False

        # Overlapping runs would download the feed twice.
        if not self._run_lock.acquire(blocking=False):
            logger.info("Refresh already in progress; skipping.")
            return False
        try:
            return self._refresh(moment)
        finally:
            self._run_lock.release()

    def _refresh(self, moment: datetime) -> bool:
        try:
            dataset = self._controller.fetch()
        except (FetchError, ParseError) as exc:
            self.state["last_failure"] = utc_now()
            self.state["last_error"] = str(exc)
            logger.error(
                "Scheduled refresh failed; keeping current dataset: %s",
                exc,
                extra=feed_log_extra(
                    source="scheduler",
                    event="dataset.refresh",
                    status="error",
                    stale=True,
                    error=str(exc),
                ),
            )
            return False

        generation = self._handle.swap(dataset)
        self._last_success_day = moment.astimezone(self._zone).date()
        self.state["last_success"] = utc_now()
        self.state["last_failure"] = None
        self.state["last_error"] = None
        logger.info(
            "Scheduled refresh completed",
            extra=feed_log_extra(
                source="scheduler",
                event="dataset.refresh",
                status="success",
                last_date=dataset.last_date.isoformat() if dataset.last_date else None,
                generation=generation.generation,
            ),
        )
        self.state["generation"] = generation.generation
        return True


def _run_refresh(app) -> None:
    refresher: DatasetRefresher | None = app.extensions.get(REFRESHER_EXT_KEY)
    if refresher is None:
        logger.warning("No dataset refresher configured; skipping scheduled refresh.")
        return
    refresher.run()


def init_refresher(app) -> DatasetRefresher | None:
    """Create the refresher bound to the app's dataset handle."""

    existing = app.extensions.get(REFRESHER_EXT_KEY)
    if existing is not None:
        return existing

    controller = app.extensions.get(ACQUISITION_EXT_KEY)
    handle = app.extensions.get(DATASET_EXT_KEY)
    if controller is None or handle is None:
        logger.info("Dataset not loaded; refresher not created.")
        return None

    refresher = DatasetRefresher(
        controller=controller,
        handle=handle,
        refresh_minute=int(app.config.get("REFRESH_MINUTE_OF_DAY", 990)),
        timezone=app.config.get("FEED_TIMEZONE", FEED_TIMEZONE),
        state=ensure_refresh_state(app),
    )
    app.extensions[REFRESHER_EXT_KEY] = refresher
    return refresher


def init_scheduler(app) -> BackgroundScheduler | None:
    """Initialise APScheduler with the daily refresh job if enabled."""

    ensure_refresh_state(app)

    if not app.config.get("SCHEDULER_ENABLED", True):
        logger.info("Scheduler disabled via configuration.")
        return None

    if app.extensions.get(SCHEDULER_EXT_KEY):
        return app.extensions[SCHEDULER_EXT_KEY]

    refresher = init_refresher(app)
    if refresher is None:
        return None

    timezone_name = app.config.get("FEED_TIMEZONE", FEED_TIMEZONE)
    timezone = ZoneInfo(timezone_name)
    hour, minute = divmod(refresher.refresh_minute, 60)
    scheduler = BackgroundScheduler(timezone=timezone)
    trigger = CronTrigger(hour=hour, minute=minute, timezone=timezone)
    scheduler.add_job(
        _run_refresh,
        trigger=trigger,
        args=[app],
        id=REFRESH_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=int(app.config.get("REFRESH_MISFIRE_GRACE_SECONDS", 3600)),
    )
    scheduler.start()

    app.extensions[SCHEDULER_EXT_KEY] = scheduler
    atexit.register(shutdown_scheduler, app)

    now = utc_now()
    logger.info(
        "APScheduler started; next dataset refresh at %s (in %.0f seconds)",
        refresher.next_run_at(now).isoformat(),
        seconds_until_refresh(now, refresher.refresh_minute, timezone_name),
    )
    return scheduler


def shutdown_scheduler(app) -> None:
    sched = app.extensions.get(SCHEDULER_EXT_KEY)
    if sched and getattr(sched, "running", False):
        sched.shutdown(wait=False)
