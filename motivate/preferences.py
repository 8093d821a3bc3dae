"""
Category Preferences

Keeps the user's category filter. The selection is held in memory so a toggle is visible to the
caller straight away, and written to the shared store after a quiet period: every toggle restarts
a single pending timer, and when the timer finally fires the latest selection is written once.
Rapid toggling therefore costs one write, and the value written is always the converged state.

After a write commits, the registered invalidation callbacks run. The CLI registers the widget
timeline reload so the background surface picks up the new filter on its next wake-up.

Nothing in here raises on storage problems. A preference that can't be read is treated as "no
filter", and a preference that can't be written is logged and dropped.
"""

import logging
import threading
from typing import Callable, Iterable, Optional

from motivate.shared_store import SharedStore
from motivate.shared_store import StoreError

logger = logging.getLogger(__name__)

SELECTED_CATEGORIES_KEY = "selectedCategoryIDs"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class PersistenceError(Exception):
    """Reading or writing the category selection failed. Logged, never raised to callers."""

    pass


def decode_selection(value) -> frozenset:
    """
    Turn the persisted list of decimal strings back into a set of ids. Anything that isn't a
    valid int64 is skipped, and a value that isn't a list at all decodes to the empty selection.
    """

    if not isinstance(value, list):
        if value is not None:
            logger.warning("ignoring malformed %s value %r", SELECTED_CATEGORIES_KEY, value)
        return frozenset()

    ids = set()
    for item in value:
        try:
            category_id = int(str(item).strip())
        except ValueError:
            logger.warning("skipping non-numeric category id %r", item)
            continue

        if INT64_MIN <= category_id <= INT64_MAX:
            ids.add(category_id)
        else:
            logger.warning("skipping out of range category id %r", item)

    return frozenset(ids)


def encode_selection(selection: Iterable[int]) -> list:
    return [str(category_id) for category_id in sorted(selection)]


class CategoryPreferenceStore:
    """
    Debounced, cross-process category selection. Each instance owns one timer; the single
    timer is what gives persistence its single-writer behavior inside a process.
    """

    def __init__(
        self,
        store: SharedStore,
        debounce: float = 0.5,
        on_commit: Optional[Iterable[Callable[[frozenset], None]]] = None,
        timer_factory=threading.Timer,
    ):
        self.store = store
        self.debounce = debounce
        self._callbacks = list(on_commit or [])
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._timer = None
        self._dirty = False
        self._selection = self.load()

    def load(self) -> frozenset:
        """
        Read the persisted selection. Returns the empty set (no filter) when nothing has been
        stored yet or the store can't be read.
        """

        try:
            value = self.store.get(SELECTED_CATEGORIES_KEY)

        except StoreError as error:
            logger.warning("%s", PersistenceError(f"could not load category selection: {error}"))
            return frozenset()

        selection = decode_selection(value)
        logger.debug("loaded %d selected category ids", len(selection))
        return selection

    @property
    def selection(self) -> frozenset:
        with self._lock:
            return self._selection

    @property
    def pending(self) -> bool:
        """True while a write is waiting for the quiet period to end."""

        with self._lock:
            return self._dirty

    def current(self) -> frozenset:
        """
        The selection to filter by right now. While a write is pending that is our own in-memory
        selection; otherwise it is re-read from the store, since another process may have
        changed it.
        """

        with self._lock:
            if self._dirty:
                return self._selection

        selection = self.load()

        with self._lock:
            if not self._dirty:
                self._selection = selection
            return self._selection

    def is_selected(self, category_id: int) -> bool:
        return int(category_id) in self.selection

    def add_commit_callback(self, callback: Callable[[frozenset], None]):
        self._callbacks.append(callback)

    def toggle(self, category_id: int) -> frozenset:
        """
        Flip membership of category_id and schedule a write. Returns the new in-memory selection.
        """

        category_id = int(category_id)

        with self._lock:
            if category_id in self._selection:
                self._selection = self._selection - {category_id}
            else:
                self._selection = self._selection | {category_id}

            self._dirty = True
            self._restart_timer()

            return self._selection

    def flush(self):
        """Write immediately if a write is pending. Used before the process exits."""

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        self._commit()

    close = flush

    def _restart_timer(self):
        # caller holds self._lock
        if self._timer is not None:
            self._timer.cancel()

        self._timer = self._timer_factory(self.debounce, self._commit)
        self._timer.daemon = True
        self._timer.start()

    def _commit(self):
        # writes are serialized; each takes the latest selection once its turn comes
        with self._write_lock:
            with self._lock:
                if not self._dirty:
                    return

                selection = self._selection
                self._dirty = False
                self._timer = None

            try:
                self.store.set(SELECTED_CATEGORIES_KEY, encode_selection(selection))

            except StoreError as error:
                logger.error("%s", PersistenceError(f"could not save category selection: {error}"))
                return

            logger.info("saved %d selected category ids", len(selection))

            for callback in self._callbacks:
                try:
                    callback(selection)
                except Exception:
                    logger.exception("invalidation callback %r failed", callback)
