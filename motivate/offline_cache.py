"""
Offline Image Cache

Previously acquired image bytes, kept in the shared store so both the CLI and the widget loop can
fall back on them when the backend is unreachable.

Policy:
    - Every successful remote acquisition is written through to the cache.
    - Local files can be added by hand ('motivate add --file ...'); they carry no image id.
    - Re-storing an image id that is already cached replaces the old entry.
    - Capacity is fixed (20 by default). When it is exceeded the entries stored longest ago are
      evicted first, so the cache always holds the most recently fetched images.
    - Fallback picks uniformly at random among cached entries.
"""

import logging
import random
import time
from pathlib import Path
from typing import Iterable, Optional

from motivate.image_handler import InvalidImageError
from motivate.image_handler import validate_image
from motivate.models import CachedEntry
from motivate.shared_store import SharedStore

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20


class CacheError(Exception):
    """Raised when the cache has nothing to offer or refuses an entry."""

    pass


class OfflineImageCache:
    def __init__(
        self,
        store: SharedStore,
        capacity: int = DEFAULT_CAPACITY,
        rng: Optional[random.Random] = None,
        clock=time.time,
    ):
        if capacity < 1:
            raise ValueError(f"cache capacity must be at least 1, got {capacity}")

        self.store = store
        self.capacity = capacity
        self._rng = rng or random.Random()
        self._clock = clock

    def get_random(self) -> Optional[CachedEntry]:
        """
        Return one cached entry, or None if the cache is empty. Raises StoreError if the store
        itself can't be read.
        """

        with self.store.connect() as conn:
            rows = conn.execute("SELECT id FROM cached_images").fetchall()
            if not rows:
                return None

            (rowid,) = self._rng.choice(rows)
            image_id, data, stored_at = conn.execute(
                "SELECT image_id, data, stored_at FROM cached_images WHERE id = ?", (rowid,)
            ).fetchone()
            conn.execute(
                "UPDATE cached_images SET last_used = ? WHERE id = ?", (self._clock(), rowid)
            )

        logger.debug("serving cached image %s (%d bytes)", image_id, len(data))
        return CachedEntry(data=bytes(data), image_id=image_id, stored_at=stored_at)

    def require_random(self) -> CachedEntry:
        entry = self.get_random()
        if entry is None:
            raise CacheError("no offline images available")
        return entry

    def put(self, data: bytes, image_id: Optional[int] = None) -> None:
        """
        Store image bytes and evict the oldest entries beyond capacity.
        """

        if not data:
            raise CacheError("refusing to cache an empty image")

        with self.store.connect() as conn:
            if image_id is not None:
                conn.execute("DELETE FROM cached_images WHERE image_id = ?", (image_id,))

            conn.execute(
                "INSERT INTO cached_images (image_id, data, stored_at) VALUES (?, ?, ?)",
                (image_id, data, self._clock()),
            )

            # ties on stored_at fall back to insertion order
            evicted = conn.execute(
                "DELETE FROM cached_images WHERE id NOT IN ("
                " SELECT id FROM cached_images ORDER BY stored_at DESC, id DESC LIMIT ?"
                ")",
                (self.capacity,),
            ).rowcount

        logger.debug("cached image %s (%d bytes), evicted %d", image_id, len(data), evicted)

    def seed(self, paths: Iterable) -> int:
        """
        Add local image files to the cache. Every file is validated before anything is stored;
        a file that isn't an image raises CacheError and nothing from the batch is added.
        """

        images = []
        for path in paths:
            path = Path(path).expanduser()
            try:
                validate_image(path)
            except InvalidImageError as error:
                raise CacheError(str(error))

            images.append(path.read_bytes())

        for data in images:
            self.put(data)

        return len(images)

    def count(self) -> int:
        with self.store.connect() as conn:
            (total,) = conn.execute("SELECT COUNT(*) FROM cached_images").fetchone()
        return total

    def clear(self) -> int:
        with self.store.connect() as conn:
            removed = conn.execute("DELETE FROM cached_images").rowcount
        return removed
