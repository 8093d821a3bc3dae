import click

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import describe

from motivate.config import MotivateConfigError
from motivate.MotivateStream import MotivateStream


@click.command(name="status")
@callback
@catch_errors
def cli(stream: MotivateStream):
    """Show the category filter, offline cache size and whether the backend is reachable."""

    app = current_app()

    selection = app.preferences.selection
    if selection:
        describe(f"categories: {', '.join(str(category_id) for category_id in sorted(selection))}")
    else:
        describe("categories: none selected (fully random)")

    describe(f"offline cache: {app.cache.count()} of {app.cache.capacity} images")

    try:
        reachable = app.monitor.check_reachable()
    except MotivateConfigError as error:
        describe(f"backend: not configured ({error})")
    else:
        describe(f"backend: {'reachable' if reachable else 'unreachable'} ({app.client.url})")

    return stream
