"""Service layer modules."""

from .acquisition import (
    AcquisitionController,
    AcquisitionOutcome,
    AcquisitionResult,
    DatasetUnavailableError,
    acquire_initial_dataset,
    create_acquisition_controller,
    init_dataset,
)
from .fx_conversion import convert, rates_mapping
from .scheduler import (
    DatasetRefresher,
    ensure_refresh_state,
    init_refresher,
    init_scheduler,
    next_refresh_at,
)
from .shared_dataset import DatasetGeneration, SharedDataset
