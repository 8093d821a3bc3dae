"""
conftest.py

Test configuration for CLI and entrypoint tests.

Defines pytest fixtures specifically related to CLI and click operations. Every test gets its own
config and data directories through the environment, so the real ~/.config/motivate and
~/.local/share/motivate are never touched.
"""

import pytest
import click

from motivate.cli import cli
from motivate.cli_utils.console import console
from motivate.cli_utils.utils import import_commands
from motivate.cli_utils.utils import attach_commands
from motivate.cli_utils.decorators import generator
from motivate.cli_utils.decorators import callback


@pytest.fixture(scope="session")
def subcommands():
    """
    Import and attach all of the commands found in the /subcommands folder *without*
    invoking the entrypoint (cli).
    """

    cmds = import_commands()

    @click.command(name="_test")
    @callback
    @generator
    def test_command(image, *args, **kwargs):

        print("TEST COMMAND - I am a functioning command.")
        return image

    cmds.append(test_command)

    return cmds


@pytest.fixture(autouse=True)
def setup(subcommands, reset_commands):
    attach_commands(cli, subcommands)
    yield
    reset_commands(cli)


@pytest.fixture
def reset_commands():
    def inner(entry_point: click.Group = cli):
        # teardown the commands that may have been added to clean the test environment.
        entry_point.commands = {}

        # --quiet swaps the console output for a junk stream; restore stdout for the next test.
        console.file = None

    return inner


@pytest.fixture(autouse=True)
def motivate_env(tmp_path, monkeypatch):
    """
    Point motivate at temporary directories and a fake backend. Returns the data directory.
    """

    data_dir = tmp_path / "data"

    monkeypatch.setenv("MOTIVATE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("MOTIVATE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "test-key")
    monkeypatch.chdir(tmp_path)

    return data_dir
