from time import sleep

import click

from motivate.MotivateStream import MotivateStream
from motivate.cli_utils.console import describe


@click.command(name="every")
@click.argument("interval", type=click.IntRange(min=1))
def cli(interval):
    """Repeat the pipeline every INTERVAL seconds until interrupted."""

    # custom callback that lets the stream finish, then waits before the next cycle.
    # waiting once per cycle (not per image) keeps an empty stream from spinning.
    def wrapper(stream: MotivateStream):
        def _repeat(images):
            yield from images
            describe(f"sleeping {interval}s...")
            sleep(interval)

        stream.repeat = True
        stream.stream = _repeat(stream.stream)
        return stream

    return wrapper
