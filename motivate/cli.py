"""
motivate

A motivational image on your terminal and on a self-refreshing background surface, filtered by the
categories you pick, with an offline cache for when the network isn't there.

This module defines the entry point to the motivate CLI. It defines a 'cli' command group which
initializes configuration and logging and hands a MotivateStream to the chained subcommands.

A callback processor is passed a list of callbacks for each of the subcommands that are invoked.
Each callback receives the MotivateStream and either wraps its image stream in a new generator or
extends it with new images. After all of the callbacks have run, the final stream is iterated to
trigger the work in order.
"""

from io import StringIO

import click

from motivate.app import MotivateApp
from motivate.config import init

from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.utils import import_commands
from motivate.cli_utils.utils import attach_commands
from motivate.cli_utils.console import console
from motivate.cli_utils.console import setup_logging

from motivate.MotivateStream import MotivateStream


@click.group(chain=True)
@catch_errors
@click.pass_context
@click.option(
    "--verbose",
    "verbosity",
    flag_value="verbose",
    default=True,
    help="Print all output to stdout or the terminal",
)
@click.option(
    "--quiet",
    "verbosity",
    flag_value="quiet",
    help="Silence all output printed to stdout or the terminal.",
)
@click.option("--debug", is_flag=True, help="Log debug information to stderr.")
@click.version_option(package_name="motivate")
def cli(ctx: click.Context, verbosity, debug):
    """
    motivate

    a motivational image, whenever you want one, online or off.


    ====================
    Quickstart
    ====================

    Show a random image from your chosen categories:

        $ motivate random show

    Keep a background surface refreshed every minute:

        $ motivate widget


    ====================
    Usage:
    ====================

    Commands chain together, left to right:

        pick categories, then fetch an image and save it:

            $ motivate toggle -c 3 -c 5 categories random save

        like whatever you got:

            $ motivate random show feedback --like

        use only the offline cache:

            $ motivate random --local show

        add your own images to the offline cache:

            $ motivate add --file ~/Pictures/summit.jpg

        fetch a new image every 10 minutes:

            $ motivate random save every 600


    To see what's available and for detailed help text add --help to the specified command, e.g.

        $ motivate random --help
    """

    config = init()

    # if verbosity is set to quiet, capture all console output in a junk stream.
    if verbosity == "quiet":
        console.file = StringIO()

    setup_logging("DEBUG" if debug else config.LOG_LEVEL)

    ctx.obj = MotivateStream(app=MotivateApp(config))
    ctx.call_on_close(ctx.obj.app.close)


@cli.result_callback()
@click.pass_obj
@catch_errors
def process_pipeline(obj: MotivateStream, callbacks, *args, **kwargs):
    """
    The result_callback decorator supplies this function with the return values of all invoked
    subcommands, i.e. their callbacks. Running them in order builds the stream; iterating the
    stream does the work, e.g. acquire -> save -> send feedback.

    When 'every' is part of the chain the whole sequence is repeated until interrupted.
    """

    def process_stream(stream: MotivateStream):

        for callback in callbacks:
            stream = callback(stream)

        for _ in stream.stream:
            pass

    # do at least once, then bail out if no cycle
    stream: MotivateStream = obj
    process_stream(stream)

    while stream.repeat:
        stream.stream = ()
        process_stream(stream)


def main():

    commands = import_commands()
    attach_commands(cli, commands)
    cli()


if __name__ == "__main__":
    main()
