from pathlib import Path

import click

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import stream
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import confirm_success

from motivate.models import AcquiredImage
from motivate.models import Provenance


@click.command(name="add")
@click.option(
    "--file",
    "-f",
    "files",
    type=click.Path(
        path_type=Path, exists=True, dir_okay=False
    ),  # make sure that file paths are always Path objects.
    help="Add an image file to the offline cache. Can use multiple times.",
    multiple=True,
)
@callback
@stream
@catch_errors
def cli(files: tuple = ()):
    """
    Add local images to the offline cache so there is always something to show without a network.
    The added images are passed along the pipeline.
    """

    if not files:
        raise click.UsageError("'add' needs at least one --file.")

    app = current_app()
    added = app.cache.seed(files)

    confirm_success(
        f":floppy_disk-emoji: 'add' stored {added} image(s) in the offline cache ({app.cache.count()} total)"
    )

    for file in files:
        yield AcquiredImage(data=Path(file).read_bytes(), provenance=Provenance.CACHE)
