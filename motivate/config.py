"""
motivate Configuration Management

This file handles utilities related to generating and loading variables from a configuration file.
MotivateConfig should be loaded at startup (the CLI does this in its group callback) before any
component is constructed. Raise a MotivateConfigError for any issues that arise in processing or
retrieving these configuration variables.

The configuration file is "config.json", saved at ~/.config/motivate/config.json unless the
MOTIVATE_CONFIG_DIR environment variable points somewhere else.

Backend credentials are not written to config.json by default. They are read from the environment
(SUPABASE_URL, SUPABASE_KEY) and a .env file in the working directory is loaded first with
python-dotenv, so a developer checkout can keep its key out of the shell profile. Tunables can be
overridden the same way with MOTIVATE_<NAME> variables.
"""

import json
import os
from dataclasses import dataclass
from dataclasses import asdict
from dataclasses import fields
from pathlib import Path, PurePath

from dotenv import find_dotenv
from dotenv import load_dotenv


class MotivateConfigError(Exception):
    """Raise when an issue occurs with handling motivate configuration."""

    pass


class PathEncoder(json.JSONEncoder):
    """
    custom encoder adds support for serializing pathlib objects as strings
    """

    def default(self, o):
        if isinstance(o, PurePath):
            return str(o)

        else:
            return json.JSONEncoder.default(self, o)


@dataclass
class MotivateConfig:
    """
    Dataclass to represent configuration variables for motivate. Provides a namespace for the
    directories, backend endpoint and timing policy used across the application.

    Instantiate from the variadic keyword arguments of a deserialized, flat json object so that
    application code never touches brittle dictionary keys.
    """

    MOTIVATE_CONFIG_DIR: Path = Path("~/.config/motivate").expanduser().resolve()
    MOTIVATE_DATA_DIR: Path = Path("~/.local/share/motivate").expanduser().resolve()

    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    IMAGE_BUCKET: str = "motivational-images"

    REQUEST_TIMEOUT: float = 10.0  # seconds, applied to every backend call
    REFRESH_INTERVAL: float = 60.0  # seconds between widget refreshes
    TIMELINE_BUDGET: float = 25.0  # seconds a widget refresh may spend acquiring
    DEBOUNCE_SECONDS: float = 0.5
    CACHE_CAPACITY: int = 20
    LOG_LEVEL: str = "WARNING"

    def __post_init__(self):
        """
        Handle the case where a new MotivateConfig is created from JSON or environment strings,
        neither of which can carry a Path or a number.
        """

        self.MOTIVATE_CONFIG_DIR = Path(self.MOTIVATE_CONFIG_DIR).expanduser()
        self.MOTIVATE_DATA_DIR = Path(self.MOTIVATE_DATA_DIR).expanduser()

        try:
            self.REQUEST_TIMEOUT = float(self.REQUEST_TIMEOUT)
            self.REFRESH_INTERVAL = float(self.REFRESH_INTERVAL)
            self.TIMELINE_BUDGET = float(self.TIMELINE_BUDGET)
            self.DEBOUNCE_SECONDS = float(self.DEBOUNCE_SECONDS)
            self.CACHE_CAPACITY = int(self.CACHE_CAPACITY)
        except (TypeError, ValueError) as error:
            raise MotivateConfigError(f"Invalid numeric value in configuration: {error}")

        if self.REFRESH_INTERVAL <= 0 or self.TIMELINE_BUDGET <= 0:
            raise MotivateConfigError(
                "REFRESH_INTERVAL and TIMELINE_BUDGET must both be positive."
            )

        if self.CACHE_CAPACITY < 1:
            raise MotivateConfigError("CACHE_CAPACITY must be at least 1.")

    @property
    def database_path(self) -> Path:
        """Location of the store shared between the CLI and the widget loop."""

        return self.MOTIVATE_DATA_DIR / "motivate.db"

    def require_backend(self):
        """Raise unless enough is configured to talk to the backend."""

        if not self.SUPABASE_URL or not self.SUPABASE_KEY:
            raise MotivateConfigError(
                "No backend configured. Set SUPABASE_URL and SUPABASE_KEY in the environment or a .env file."
            )

    def generate_config_json(self) -> Path:
        """
        Write the MotivateConfig to file, serializing to JSON. Returns filepath of written
        config.json file located at MOTIVATE_CONFIG_DIR. The key is never written out.

        Warning: will overwrite any existing config file for motivate.
        """

        settings = asdict(self)
        settings.pop("SUPABASE_KEY")

        try:
            to_json = json.dumps(settings, sort_keys=True, indent=4, cls=PathEncoder)

        except TypeError as error:
            raise MotivateConfigError(
                f"There was an error trying to serialize config data to JSON: {error}"
            )

        try:
            self.MOTIVATE_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

            dest_file = self.MOTIVATE_CONFIG_DIR / "config.json"
            with open(dest_file, "w") as file:

                file.write(to_json)

        except OSError as error:
            raise MotivateConfigError(
                f"There was an error saving the configuration file: {error}."
            )

        return dest_file


def config_dir() -> Path:
    """Directory holding config.json, from MOTIVATE_CONFIG_DIR or the default location."""

    try:
        return Path(os.environ["MOTIVATE_CONFIG_DIR"]).expanduser()

    except KeyError:
        return MotivateConfig.MOTIVATE_CONFIG_DIR


def environment_overrides() -> dict:
    """
    Collect overrides from the environment. Credentials use their bare names, everything else
    is read from MOTIVATE_<NAME> (e.g. MOTIVATE_REFRESH_INTERVAL=300).
    """

    overrides = {}

    for name in ("SUPABASE_URL", "SUPABASE_KEY"):
        if os.getenv(name):
            overrides[name] = os.environ[name]

    for config_field in fields(MotivateConfig):
        name = config_field.name
        env_name = name if name.startswith("MOTIVATE_") else f"MOTIVATE_{name}"
        if name not in overrides and os.getenv(env_name):
            overrides[name] = os.environ[env_name]

    return overrides


def load_config() -> MotivateConfig:
    """
    Load config.json from $MOTIVATE_CONFIG_DIR or alternatively ~/.config/motivate and
    instantiate variables as a MotivateConfig dataclass, applying environment overrides.
    Raise MotivateConfigError if a config file can't be found or read at that location.
    """

    load_dotenv(find_dotenv(usecwd=True))

    config_src = config_dir() / "config.json"

    try:
        with config_src.open("r") as file:

            from_json = json.loads(file.read())

    except json.JSONDecodeError as error:
        raise MotivateConfigError(f"There was an issue reading the config: {error}")

    except FileNotFoundError as error:
        raise MotivateConfigError(f"There was an issue opening the config: {error}")

    if not isinstance(from_json, dict):
        raise MotivateConfigError(f"Config at {config_src} is not a JSON object.")

    known = {config_field.name for config_field in fields(MotivateConfig)}
    settings = {key: value for key, value in from_json.items() if key in known}
    settings.update(environment_overrides())

    try:
        return MotivateConfig(**settings)

    except TypeError as error:
        raise MotivateConfigError(f"There was an issue reading the config: {error}")


def init() -> MotivateConfig:
    """initialize motivate: load the config, generating a default one on first run"""

    try:
        config: MotivateConfig = load_config()

    except MotivateConfigError:

        try:
            config = MotivateConfig(
                MOTIVATE_CONFIG_DIR=config_dir(), **_without_config_dir(environment_overrides())
            )
            config.generate_config_json()

        except MotivateConfigError as error:

            raise MotivateConfigError(
                f"There was an issue trying to load config file for motivate: {error}"
            )

    return config


def _without_config_dir(overrides: dict) -> dict:
    overrides.pop("MOTIVATE_CONFIG_DIR", None)
    return overrides
