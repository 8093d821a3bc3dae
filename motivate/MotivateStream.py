"""
MotivateStream

This module defines the MotivateStream dataclass, which is a wrapper around a 'stream' iterator
of AcquiredImage objects that flows through the chained motivate subcommands. The MotivateStream
also carries the MotivateApp (configured components) and other metadata that subcommands can
use to customize their actions. For example, the 'every' command uses 'repeat' to signal
to the callback processor that the callback sequence should be repeated.
"""

from dataclasses import dataclass
from collections.abc import Iterable
from typing import Optional

from motivate.app import MotivateApp


@dataclass
class MotivateStream:
    """
    Used to pass application state between subcommands: the configured app and the image stream.
    """

    app: Optional[MotivateApp] = None
    stream: Iterable = ()  # empty iterator
    repeat: bool = False
