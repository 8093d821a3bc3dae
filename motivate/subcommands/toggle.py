"""
motivate toggle

Add or remove categories from the filter. The filter is saved after a short quiet period (and
always before motivate exits), after which the background surface is told to refresh.
"""

import click

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import confirm_success

from motivate.MotivateStream import MotivateStream


@click.command(name="toggle")
@click.option(
    "--category",
    "-c",
    "category_ids",
    type=int,
    multiple=True,
    required=True,
    help="Category id to add to or remove from the filter. Can use multiple times e.g. toggle -c 3 -c 5",
)
@callback
@catch_errors
def cli(stream: MotivateStream, category_ids):
    """
    Toggle one or more category ids in the filter, e.g. toggle -c 3 -c 5
    """

    preferences = current_app().preferences

    for category_id in category_ids:
        selection = preferences.toggle(category_id)

    if selection:
        ids = ", ".join(str(category_id) for category_id in sorted(selection))
        confirm_success(f":white_check_mark-emoji: 'toggle' selected categories: {ids}")
    else:
        confirm_success(":white_check_mark-emoji: 'toggle' cleared the filter: images are fully random")

    return stream
