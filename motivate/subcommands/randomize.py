"""
motivate random

This module defines the 'random' subcommand, which acquires a random image: from the backend with
the offline cache as fallback (default), or from the offline cache only (--local).
"""

import click

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.utils import describe_image
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import stream
from motivate.cli_utils.decorators import catch_errors

from motivate.cli_utils.console import confirm_success
from motivate.cli_utils.console import warn

from motivate.models import Provenance


@click.command(name="random")
@click.option(
    "--local/--online",
    is_flag=True,
    show_default=True,
    default=False,
    help="Grab an image from the backend (falling back to the offline cache) or only from the offline cache.",
)
@click.option(
    "--category",
    "-c",
    "categories",
    type=int,
    multiple=True,
    help="Override the saved category filter for this run. Can use multiple times e.g. random -c 3 -c 5",
)
@click.option(
    "--count",
    type=click.IntRange(min=1),
    help="Number of random images to get",
    default=1,
    show_default=True,
)
@callback
@stream
@catch_errors
def cli(local, categories, count):
    """
    Get a random image, filtered by your selected categories.
    """

    """
    'random' is a generator that yields the requested number of images. With the 'stream'
    decorator applied it is appended to the end of the existing input stream, so anything that
    comes earlier in the chain is passed along untouched.

    Without --category the saved selection is used (see 'categories' and 'toggle'). An empty
    selection means fully random.
    """

    app = current_app()

    for _ in range(count):

        if local:
            image = app.offline_coordinator.acquire_offline()

        else:
            image = app.coordinator.acquire(set(categories) if categories else None)

        if image.provenance is Provenance.CACHE and not local:
            warn("network unavailable, using an image from the offline cache")

        confirm_success(f":game_die-emoji: 'random' got {describe_image(image)}")

        yield image
