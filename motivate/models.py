"""
motivate data model

Plain dataclasses shared by the acquisition pipeline, the background widget loop and the CLI.
Nothing in here performs I/O. Records coming from the backend are built with the from_row
constructors so that decoding problems surface as ordinary ValueError/KeyError/TypeError
which the remote picker turns into a RemoteError.
"""

from enum import Enum
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timedelta
from typing import Optional


class Provenance(Enum):
    """Where an acquired image actually came from."""

    REMOTE = "remote"
    CACHE = "cache"


class EntryKind(Enum):
    PLACEHOLDER = "placeholder"
    LOADING = "loading"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class Category:
    """
    A category from the backend catalog. Categories are never edited locally, the whole
    list is replaced each time the catalog is reloaded.
    """

    id: int
    name: str
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Category":
        return cls(
            id=int(row["id"]),
            name=str(row["name"]),
            description=row.get("description"),
        )


@dataclass(frozen=True)
class ImageRecord:
    """
    Remote metadata for an image, before its bytes are downloaded. The backend calls the
    storage filename 'image_url' even though it is only the object name inside the bucket.
    """

    id: int
    filename: str

    @classmethod
    def from_row(cls, row: dict) -> "ImageRecord":
        if not isinstance(row, dict):
            raise TypeError(f"expected an object for image row, got {type(row).__name__}")

        filename = row["image_url"]
        if not isinstance(filename, str) or not filename:
            raise ValueError(f"image row {row!r} has no usable filename")

        image_id = row["id"]
        # bool is an int subclass; reject it so a malformed row can't become image 1
        if not isinstance(image_id, int) or isinstance(image_id, bool):
            raise ValueError(f"image row {row!r} has a non-integer id")

        return cls(id=image_id, filename=filename)


@dataclass(frozen=True)
class AcquiredImage:
    """
    Raw image bytes plus metadata. image_id is always set for remote images and is set for
    cached images only if the cache recorded one.
    """

    data: bytes
    provenance: Provenance
    image_id: Optional[int] = None

    def __repr__(self):
        return (
            f"AcquiredImage(provenance={self.provenance.value}, image_id={self.image_id}, "
            f"size={len(self.data)} bytes)"
        )


@dataclass(frozen=True)
class CachedEntry:
    data: bytes
    image_id: Optional[int] = None
    stored_at: float = 0.0  # unix seconds, used as the recency marker for eviction


@dataclass(frozen=True)
class TimelineEntry:
    """
    One state of the background surface. Use the constructors below rather than building
    entries by hand so that next_refresh is always later than date.
    """

    kind: EntryKind
    date: datetime
    next_refresh: datetime
    image: Optional[AcquiredImage] = None
    message: Optional[str] = None

    @classmethod
    def _make(cls, kind, interval: timedelta, **kwargs) -> "TimelineEntry":
        if interval <= timedelta(0):
            raise ValueError(f"refresh interval must be positive, got {interval}")

        now = datetime.now()
        return cls(kind=kind, date=now, next_refresh=now + interval, **kwargs)

    @classmethod
    def placeholder(cls, interval: timedelta = timedelta(minutes=1)) -> "TimelineEntry":
        return cls._make(EntryKind.PLACEHOLDER, interval)

    @classmethod
    def loading(cls, interval: timedelta = timedelta(minutes=1)) -> "TimelineEntry":
        return cls._make(EntryKind.LOADING, interval, message="Fetching image...")

    @classmethod
    def resolved(
        cls, image: AcquiredImage, interval: timedelta = timedelta(minutes=1)
    ) -> "TimelineEntry":
        return cls._make(EntryKind.RESOLVED, interval, image=image)

    @classmethod
    def failed(
        cls, message: str, interval: timedelta = timedelta(minutes=1)
    ) -> "TimelineEntry":
        return cls._make(EntryKind.FAILED, interval, message=message)

    @property
    def is_terminal(self) -> bool:
        return self.kind in (EntryKind.RESOLVED, EntryKind.FAILED)


@dataclass
class Timeline:
    """What a timeline() call hands to the host: the entries plus when to ask again."""

    entries: list = field(default_factory=list)
    next_refresh: Optional[datetime] = None
