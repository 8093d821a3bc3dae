"""
motivate widget

Runs the background surface: a loop that refreshes an image on a fixed interval within a fixed
time budget, and writes each resolved image to MOTIVATE_DATA_DIR/widget/ for whatever displays it
(a desktop widget, a status bar script, a screensaver). A failed refresh leaves the last good image
in place and records the message in widget/status.json.

The loop refreshes early when the category filter changes ('motivate toggle' from another
terminal signals it through the shared store).
"""

import json
from pathlib import Path

import click

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.utils import describe_image
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import describe
from motivate.cli_utils.console import confirm_success
from motivate.cli_utils.console import warn

from motivate.image_handler import extension_for
from motivate.image_handler import save_image
from motivate.models import EntryKind
from motivate.models import TimelineEntry
from motivate.MotivateStream import MotivateStream


class WidgetWriter:
    """Hands timeline entries to the display side through files in the widget directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def __call__(self, entry: TimelineEntry):
        status = {
            "kind": entry.kind.value,
            "date": entry.date.isoformat(),
            "next_refresh": entry.next_refresh.isoformat(),
            "message": entry.message,
        }

        if entry.kind is EntryKind.RESOLVED:
            image = entry.image
            try:
                file = save_image(
                    image.data,
                    self.directory / f"current{extension_for(image.data)}",
                    overwrite=True,
                )
            except OSError as error:
                # the loop keeps running; the next refresh tries again
                warn(f"'widget' could not write image: {error}")
            else:
                status.update(
                    file=str(file), image_id=image.image_id, provenance=image.provenance.value
                )
                confirm_success(
                    f":framed_picture-emoji: 'widget' showing {describe_image(image)}"
                )

        elif entry.kind is EntryKind.FAILED:
            warn(f"'widget' refresh failed: {entry.message}")

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            (self.directory / "status.json").write_text(json.dumps(status, indent=4))
        except OSError as error:
            warn(f"'widget' could not write status: {error}")

        describe(f"next refresh at {entry.next_refresh:%H:%M:%S}")


@click.command(name="widget")
@click.option("--once", is_flag=True, help="Refresh a single time and exit.")
@click.option(
    "--interval",
    type=click.FloatRange(min=1),
    help="Seconds between refreshes. Defaults to REFRESH_INTERVAL from the config.",
)
@click.option(
    "--dir",
    "directory",
    type=click.Path(path_type=Path, file_okay=False),
    help="Where to write the current image. Defaults to 'widget' in the motivate data directory.",
)
@callback
@catch_errors
def cli(stream: MotivateStream, once: bool, interval: float = None, directory: Path = None):
    """
    Run the self-refreshing background surface.
    """

    app = current_app()
    directory = directory or app.config.MOTIVATE_DATA_DIR / "widget"
    writer = WidgetWriter(directory)

    scheduler = app.scheduler(interval=interval)

    # first paint: the static placeholder, before any network activity
    writer(scheduler.snapshot(is_preview=False))

    try:
        scheduler.run(writer, iterations=1 if once else None)
    except KeyboardInterrupt:
        describe("'widget' stopped")
    finally:
        scheduler.shutdown()

    return stream
