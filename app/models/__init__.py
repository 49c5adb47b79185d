"""In-memory models for the reference rates dataset."""

from .dataset import EUR, Dataset, Day, RangeError, build_catalog

__all__ = ["EUR", "Dataset", "Day", "RangeError", "build_catalog"]
