"""Acquisition of the reference rates dataset from cache or network."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from time import perf_counter

from app.feed.base import FeedError, FetchError, ParseError
from app.feed.cache import CacheStore
from app.feed.ecb_client import EcbFeedClient
from app.feed.parser import parse_feed
from app.logging import feed_log_extra
from app.models.dataset import Dataset
from app.services.shared_dataset import DATASET_EXT_KEY, SharedDataset
from app.utils.datetime import FEED_TIMEZONE, today_in

logger = logging.getLogger(__name__)

ACQUISITION_EXT_KEY = "fx_acquisition"


class DatasetUnavailableError(RuntimeError):
    """Raised when neither the cache nor the network yields a usable dataset."""


class AcquisitionOutcome(str, Enum):
    CACHE = "cache"
    NETWORK = "network"
    STALE_CACHE = "stale_cache"


@dataclass(frozen=True)
class AcquisitionResult:
    dataset: Dataset
    outcome: AcquisitionOutcome

    @property
    def stale(self) -> bool:
        return self.outcome is AcquisitionOutcome.STALE_CACHE


class AcquisitionController:
    """Decide whether the cached feed is usable and download it otherwise."""

    def __init__(
        self,
        client: EcbFeedClient,
        cache: CacheStore,
        timezone: str = FEED_TIMEZONE,
    ) -> None:
        self._client = client
        self._cache = cache
        self._timezone = timezone

    @property
    def timezone(self) -> str:
        return self._timezone

    def feed_today(self) -> date:
        """Today's date where the feed is published."""

        return today_in(self._timezone)

    def is_stale(self, dataset: Dataset, today: date | None = None) -> bool:
        """A dataset is stale when its latest day is before today in the feed zone."""

        reference = today if today is not None else self.feed_today()
        last_date = dataset.last_date
        return last_date is None or last_date < reference

    def acquire(self) -> AcquisitionResult:
        """Return the cached dataset when fresh, otherwise fetch a new one.

        Raises:
            DatasetUnavailableError: If the feed cannot be downloaded or parsed
                and no previously cached dataset parses.
        """

        cached = self._load_cache()
        if cached is not None and not self.is_stale(cached):
            self._log_outcome(cached, AcquisitionOutcome.CACHE)
            return AcquisitionResult(dataset=cached, outcome=AcquisitionOutcome.CACHE)

        try:
            dataset = self.fetch()
        except FetchError as exc:
            if cached is None:
                raise DatasetUnavailableError(
                    f"Unable to download the rates feed and no usable cache exists: {exc}"
                ) from exc
            logger.warning(
                "Falling back to stale cached dataset ending %s: %s",
                cached.last_date,
                exc,
                extra=feed_log_extra(
                    source="cache",
                    event="dataset.acquire",
                    status="stale",
                    stale=True,
                    outcome=AcquisitionOutcome.STALE_CACHE.value,
                    last_date=_iso(cached.last_date),
                    error=str(exc),
                ),
            )
            return AcquisitionResult(dataset=cached, outcome=AcquisitionOutcome.STALE_CACHE)
        except ParseError as exc:
            raise DatasetUnavailableError(f"Downloaded rates feed is malformed: {exc}") from exc

        self._log_outcome(dataset, AcquisitionOutcome.NETWORK)
        return AcquisitionResult(dataset=dataset, outcome=AcquisitionOutcome.NETWORK)

    def fetch(self) -> Dataset:
        """Download and parse the feed, then refresh the cached copy.

        Raises:
            FetchError: If the download fails or times out.
            ParseError: If the downloaded document is malformed.
        """

        start = perf_counter()
        try:
            payload = self._client.fetch()
        except FetchError as exc:
            logger.error(
                "Feed download failed: %s",
                exc,
                extra=feed_log_extra(
                    source=self._client.name,
                    event="feed.fetch",
                    status="error",
                    duration_ms=(perf_counter() - start) * 1000,
                    error=str(exc),
                ),
            )
            raise

        dataset = parse_feed(payload)
        # Only well-formed documents replace the cached copy.
        self._cache.write(payload)
        logger.info(
            "Feed download succeeded",
            extra=feed_log_extra(
                source=self._client.name,
                event="feed.fetch",
                status="success",
                duration_ms=(perf_counter() - start) * 1000,
                last_date=_iso(dataset.last_date),
            ),
        )
        return dataset

    def _load_cache(self) -> Dataset | None:
        payload = self._cache.read()
        if payload is None:
            return None
        try:
            return parse_feed(payload)
        except ParseError as exc:
            logger.warning(
                "Ignoring malformed cached feed at %s: %s",
                self._cache.path,
                exc,
                extra=feed_log_extra(
                    source="cache",
                    event="cache.parse",
                    status="error",
                    error=str(exc),
                ),
            )
            return None

    @staticmethod
    def _log_outcome(dataset: Dataset, outcome: AcquisitionOutcome) -> None:
        logger.info(
            "Dataset acquired from %s",
            outcome.value,
            extra=feed_log_extra(
                source="cache" if outcome is AcquisitionOutcome.CACHE else "ecb",
                event="dataset.acquire",
                status="success",
                outcome=outcome.value,
                last_date=_iso(dataset.last_date),
            ),
        )


def acquire_initial_dataset(controller: AcquisitionController) -> SharedDataset:
    """Build the shared dataset handle used for the lifetime of the process."""

    try:
        result = controller.acquire()
    except FeedError as exc:
        raise DatasetUnavailableError(str(exc)) from exc
    return SharedDataset(result.dataset)


def create_acquisition_controller(config) -> AcquisitionController:
    return AcquisitionController(
        client=EcbFeedClient.from_config(config),
        cache=CacheStore(config.get("CACHE_PATH")),
        timezone=str(config.get("FEED_TIMEZONE", FEED_TIMEZONE)),
    )


def init_dataset(app) -> SharedDataset | None:
    """Attach the acquisition controller and, when enabled, the initial dataset."""

    controller = app.extensions.get(ACQUISITION_EXT_KEY)
    if controller is None:
        controller = create_acquisition_controller(app.config)
        app.extensions[ACQUISITION_EXT_KEY] = controller

    handle = app.extensions.get(DATASET_EXT_KEY)
    if handle is not None:
        return handle

    if not app.config.get("DATASET_PRELOAD", True):
        logger.info("Dataset preload disabled via configuration.")
        return None

    handle = acquire_initial_dataset(controller)
    app.extensions[DATASET_EXT_KEY] = handle
    return handle


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None
