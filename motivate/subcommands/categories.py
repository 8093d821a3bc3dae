"""
motivate categories

Lists the backend's category catalog and marks the ones in your filter. Use 'toggle' to change
the filter.
"""

import click
from rich.table import Table

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import console

from motivate.MotivateStream import MotivateStream


@click.command(name="categories")
@callback
@catch_errors
def cli(stream: MotivateStream):
    """
    List the available categories. Selected ones are marked with a check.
    """

    app = current_app()
    categories = app.picker.fetch_categories()
    selected = app.preferences.selection

    table = Table(title="categories", show_lines=False)
    table.add_column("", width=2)
    table.add_column("id", justify="right")
    table.add_column("name")
    table.add_column("description")

    for category in categories:
        table.add_row(
            "✔" if category.id in selected else "",
            str(category.id),
            category.name,
            category.description or "",
        )

    console.print(table)

    if not selected:
        console.print("No categories selected: images are fully random.")

    return stream
