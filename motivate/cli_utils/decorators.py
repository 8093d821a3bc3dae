"""
motivate Decorators

Use these decorators for converting simple functions into properly formed motivate subcommands.
A candidate function either produces images (acquiring them, or loading them from disk) or acts
on one image at a time (saving it, showing it, sending feedback for it). Images are
motivate.models.AcquiredImage objects in both cases.

The decorators provided here convert these basic functions into pipeline processors on your
behalf. Functions that act on each image in the stream use @generator; functions that source new
images use @stream to append their output to the existing stream. All commands use @callback so
that invoking the click command returns the function for later execution by the pipeline.

Here's a sample of how this would look for a command that prints the size of every image:

    @click.command(name="size")
    @callback
    @generator
    def cli(image):
        '''Print the size of each image'''

        describe(f"{len(image.data)} bytes")
        return image

    $ motivate random --count 3 size
"""

import sys
import inspect
from itertools import chain
from functools import wraps
from functools import partial

from motivate.MotivateStream import MotivateStream
from motivate.cli_utils.console import fail


def stream(func):
    """
    Take a function that generates output(s) and extend an existing stream to include these new
    outputs. This allows functions that don't operate on received input to instead provide new
    inputs to a pipeline.
    """

    @wraps(func)
    def wrapper(stream: MotivateStream, *args, **kwargs):
        @wraps(func)
        def inner():
            return (image for image in func(*args, **kwargs))

        stream.stream = (image for image in chain(stream.stream, inner()))
        return stream

    return wrapper


def generator(func):
    """
    Take a function that accepts and returns a single image and convert it into a function that
    accepts an input stream and yields the return value of the original function.
    """

    @wraps(func)
    def wrapper(stream: MotivateStream, *args, **kwargs):

        stream.stream = (func(image, *args, **kwargs) for image in stream.stream)
        return stream

    return wrapper


def callback(func):
    """
    Receive a function and convert it into a new function that returns the original function as
    a callback.

    Subcommands are invoked on the command line, each of which returns a callback immediately
    upon invocation. Once all subcommands have been invoked, the pipeline processor iterates over
    the callbacks and executes them in order. The arguments click supplied at invocation are
    bound with functools.partial; the stream is supplied when the callback runs.
    """

    @wraps(func)
    def _callback(*args, **kwargs):
        @wraps(func)
        def wrapper(*fargs, **fkwargs):
            new_func = partial(func, *args, **kwargs)
            return new_func(*fargs, **fkwargs)

        return wrapper

    return _callback


def catch_errors(func):
    """
    Catch and format errors with the "fail" console template and gracefully exit the application
    with an error code. Generator functions are wrapped so errors raised while the stream is
    being consumed are caught too.
    """

    if inspect.isgeneratorfunction(func):

        @wraps(func)
        def gen_wrapper(*args, **kwargs):
            try:
                yield from func(*args, **kwargs)
            except Exception as error:
                fail(str(error))
                sys.exit(1)

        return gen_wrapper

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as error:
            fail(str(error))
            sys.exit(1)

    return wrapper
