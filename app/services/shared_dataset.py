"""Process-wide holder for the live dataset generation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from app.logging import feed_log_extra
from app.models.dataset import Dataset
from app.utils.datetime import utc_now

logger = logging.getLogger(__name__)

DATASET_EXT_KEY = "fx_dataset"


@dataclass(frozen=True)
class DatasetGeneration:
    dataset: Dataset
    generation: int
    installed_at: datetime


class SharedDataset:
    """Concurrency-safe container for the current :class:`Dataset`.

    Readers grab the whole generation record in one reference read and keep
    using it even if a refresh swaps in a newer dataset meanwhile. Writers build
    the replacement outside of this object and only hold the lock for the swap.
    """

    def __init__(self, dataset: Dataset) -> None:
        self._lock = threading.Lock()
        self._state = DatasetGeneration(dataset=dataset, generation=1, installed_at=utc_now())

    def current(self) -> DatasetGeneration:
        return self._state

    @property
    def dataset(self) -> Dataset:
        return self._state.dataset

    @contextmanager
    def snapshot(self) -> Iterator[Dataset]:
        """Yield the dataset that is current for one logical read operation."""

        yield self._state.dataset

    def swap(self, dataset: Dataset) -> DatasetGeneration:
        """Install ``dataset`` as the new current generation."""

        with self._lock:
            previous = self._state
            state = DatasetGeneration(
                dataset=dataset,
                generation=previous.generation + 1,
                installed_at=utc_now(),
            )
            self._state = state

        logger.info(
            "Installed dataset generation %s (%s days, last %s)",
            state.generation,
            len(dataset),
            dataset.last_date.isoformat() if dataset.last_date else "n/a",
            extra=feed_log_extra(
                source="dataset",
                event="dataset.swap",
                status="success",
                last_date=dataset.last_date.isoformat() if dataset.last_date else None,
                generation=state.generation,
            ),
        )
        return state
