"""
motivate save

Write each image in the stream to disk. Images are named after their backend id when they have one
and after the current time otherwise; the extension comes from the image format.
"""

from datetime import datetime
from pathlib import Path

import click

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import generator
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import confirm_success
from motivate.cli_utils.console import warn

from motivate.image_handler import save_image
from motivate.models import AcquiredImage


def image_name(image: AcquiredImage) -> str:
    if image.image_id is not None:
        return f"motivate-{image.image_id}"

    return f"motivate-{datetime.now():%Y%m%d-%H%M%S-%f}"


@click.command(name="save")
@click.option(
    "--dest",
    "-d",
    type=click.Path(path_type=Path, file_okay=False),
    help="Directory to save images in. Defaults to 'saved' in the motivate data directory.",
)
@click.option("--overwrite", is_flag=True, help="Replace an existing file with the same name.")
@callback
@generator
@catch_errors
def cli(image: AcquiredImage, dest: Path = None, overwrite: bool = False):
    """
    Save images to a directory.
    """

    if dest is None:
        dest = current_app().config.MOTIVATE_DATA_DIR / "saved"

    try:
        file = save_image(image.data, Path(dest) / image_name(image), overwrite=overwrite)

    except FileExistsError as error:
        warn(f"'save' skipped: {error}")

    else:
        confirm_success(f":floppy_disk-emoji: 'save' saved '{file.name}' to {file.parent}")

    return image
