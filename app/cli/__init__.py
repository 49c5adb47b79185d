"""CLI entry points."""

from __future__ import annotations

import click
from flask import Flask

from .refresh import refresh_dataset


def register_cli(app: Flask) -> None:
    """Register CLI commands on the given Flask app."""

    app.cli.add_command(refresh_dataset)


def loading_for_cli_command() -> bool:
    """True while the ``flask`` command builds the app for anything but ``flask run``.

    One-shot commands must not preload the dataset or start the background
    scheduler; ``flask refresh-dataset`` downloads the feed itself.
    """

    ctx = click.get_current_context(silent=True)
    return ctx is not None and ctx.info_name != "run"
