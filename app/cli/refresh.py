"""CLI for refreshing the reference rates dataset on demand."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from app.feed.base import FeedError
from app.services.acquisition import (
    ACQUISITION_EXT_KEY,
    AcquisitionController,
    create_acquisition_controller,
)
from app.services.shared_dataset import DATASET_EXT_KEY, SharedDataset


@click.command("refresh-dataset")
@with_appcontext
def refresh_dataset() -> None:
    """Download the feed, update the local cache, and swap the loaded dataset."""

    app = current_app
    controller: AcquisitionController | None = app.extensions.get(ACQUISITION_EXT_KEY)
    if controller is None:
        controller = create_acquisition_controller(app.config)
        app.extensions[ACQUISITION_EXT_KEY] = controller

    click.echo("Downloading reference rates feed...")
    try:
        dataset = controller.fetch()
    except FeedError as exc:
        raise click.ClickException(f"Refresh failed: {exc}") from exc

    handle: SharedDataset | None = app.extensions.get(DATASET_EXT_KEY)
    if handle is None:
        app.extensions[DATASET_EXT_KEY] = SharedDataset(dataset)
    else:
        handle.swap(dataset)

    timeframe = dataset.timeframe()
    if timeframe is None:
        click.echo("Refresh completed; the feed contains no days.")
        return
    first, last = timeframe
    click.echo(
        f"Refresh completed: {len(dataset)} days from {first.isoformat()} to "
        f"{last.isoformat()}, {len(dataset.catalog)} currencies."
    )
