import tempfile
from pathlib import Path

import click

from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import generator
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import describe

from motivate.image_handler import save_image
from motivate.models import AcquiredImage


@click.command(name="show")
@callback
@generator
@catch_errors
def cli(image: AcquiredImage):
    """Show the current image in the default image viewer."""

    # the viewer runs detached, so the file has to outlive this process
    directory = Path(tempfile.mkdtemp(prefix="motivate-"))
    file = save_image(image.data, directory / "image")

    describe(f":framed_picture-emoji: 'show' opening {file}")
    click.launch(str(file))

    return image
