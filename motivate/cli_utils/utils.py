"""
motivate CLI Utilities

This module contains utilities for working across click subcommands: reaching the configured
application from inside a running pipeline, describing acquired images consistently, and importing
subcommands from the subcommands package.
"""

import importlib
import pkgutil
from types import ModuleType

import click

import motivate.subcommands

from motivate.app import MotivateApp
from motivate.models import AcquiredImage
from motivate.models import Provenance
from motivate.MotivateStream import MotivateStream
from motivate.cli_utils.console import warn


def current_app() -> MotivateApp:
    """
    Return the MotivateApp for the running invocation. Only valid while a click context is active,
    which is always the case for pipeline callbacks.
    """

    obj = click.get_current_context().find_object(MotivateStream)
    if obj is None or obj.app is None:
        raise click.UsageError("motivate was not initialized; run commands through the 'motivate' group.")

    return obj.app


def describe_image(image: AcquiredImage) -> str:
    """One-line rich markup summary used by the commands that produce images."""

    if image.provenance is Provenance.REMOTE:
        source = "[remote]online[/]"
    else:
        source = "[cache]offline cache[/]"

    label = f"image {image.image_id}" if image.image_id is not None else "untracked image"
    return f"{label} from {source} ({len(image.data)} bytes)"


def import_commands(package: ModuleType = motivate.subcommands) -> list:
    """
    Retrieve the click Commands defined in the modules of package. Default package is the built in
    subcommands package.

    A valid motivate command module defines a "cli" function wrapped as a click Command object.
    Set the 'name' keyword argument in the @click.command decorator to set the name of the
    command exposed to the end user.
    """

    commands = []

    for module_info in pkgutil.iter_modules(package.__path__):
        module = importlib.import_module(f"{package.__name__}.{module_info.name}")

        try:
            commands.append(getattr(module, "cli"))

        except AttributeError:
            warn(f"Cannot add command {module_info.name}: no 'cli' function found.")

    return commands


def attach_commands(group: click.Group, commands: list):
    """
    Attach each command in a list of click Command objects to a provided group. Useful when
    retrieving a dynamic list of subcommands with import_commands().
    """

    for command in commands:
        group.add_command(command)
