"""Shared pytest fixtures."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from app.feed.parser import parse_feed  # noqa: E402
from app.models.dataset import Dataset  # noqa: E402
from app.services.shared_dataset import DATASET_EXT_KEY, SharedDataset  # noqa: E402
from tests.fixtures import load_feed  # noqa: E402


@pytest.fixture()
def feed_bytes() -> bytes:
    """Raw bytes of the bundled three-day ECB sample feed."""

    return load_feed()


@pytest.fixture()
def dataset(feed_bytes: bytes) -> Dataset:
    return parse_feed(feed_bytes)


@pytest.fixture()
def app(tmp_path: Path, dataset: Dataset) -> Iterator:
    """Flask application serving the sample dataset without network or scheduler."""

    flask_app = create_app(
        "development",
        overrides={
            "TESTING": True,
            "DATASET_PRELOAD": False,
            "SCHEDULER_ENABLED": False,
            "CACHE_PATH": str(tmp_path / "cache" / "eurofxref-hist.xml"),
            "FEED_URL": "https://feed.test/eurofxref-hist.xml",
        },
    )
    flask_app.extensions[DATASET_EXT_KEY] = SharedDataset(dataset)

    yield flask_app


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client
