"""
Timeline Scheduler

Drives the background surface (the 'motivate widget' loop). The host asks for one of three things:

    placeholder()       a static entry for first paint and previews, no I/O at all
    snapshot(preview)   same thing; the real fetch is left to the next timeline() tick
    timeline()          acquire an image now, wrap the outcome in exactly one entry, and say
                        when to ask again (now + interval)

Each acquisition runs on a worker thread and is bounded by the host's budget. If it overruns,
timeline() returns a FAILED entry on time and the straggler is left to finish in the background;
its result is discarded, and since acquisitions only ever write idempotent snapshots (the cache
write-through) the late finish is harmless. An acquisition still queued when its budget runs out
is cancelled, and while every worker is held by a straggler new refreshes fail fast instead of
queueing behind it.

request(callback) is the push-style form for callers that want progress: the callback gets exactly
one LOADING entry, then exactly one RESOLVED or FAILED entry.

Invalidation crosses processes through the shared store. TimelineCenter.reload_timelines(kind)
bumps a counter, and a running loop for that kind notices the new value and refreshes early.
"""

import logging
import threading
import time
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime
from datetime import timedelta
from typing import Callable, Optional

from motivate.coordinator import AcquisitionError
from motivate.coordinator import ImageAcquisitionCoordinator
from motivate.models import Timeline
from motivate.models import TimelineEntry
from motivate.shared_store import SharedStore
from motivate.shared_store import StoreError

logger = logging.getLogger(__name__)

WIDGET_KIND = "MotivationWidgetExtension"

DEFAULT_INTERVAL = 60.0
DEFAULT_BUDGET = 25.0


class TimelineCenter:
    """
    Cross-process reload signal for background surfaces, keyed by surface kind.
    """

    def __init__(self, store: SharedStore):
        self.store = store

    @staticmethod
    def key(kind: str) -> str:
        return f"timelineReload:{kind}"

    def reload_timelines(self, kind: str = WIDGET_KIND) -> int:
        generation = self.store.increment(self.key(kind))
        logger.info("requested timeline reload for %s (generation %d)", kind, generation)
        return generation

    def generation(self, kind: str = WIDGET_KIND) -> int:
        try:
            return int(self.store.get(self.key(kind), 0))
        except (StoreError, TypeError, ValueError) as error:
            logger.warning("could not read reload generation for %s: %s", kind, error)
            return 0


class TimelineScheduler:
    def __init__(
        self,
        coordinator: ImageAcquisitionCoordinator,
        interval: float = DEFAULT_INTERVAL,
        budget: float = DEFAULT_BUDGET,
        center: Optional[TimelineCenter] = None,
        kind: str = WIDGET_KIND,
        workers: int = 2,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if budget <= 0:
            raise ValueError(f"budget must be positive, got {budget}")
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        self.coordinator = coordinator
        self.interval = timedelta(seconds=interval)
        self.budget = budget
        self.center = center
        self.kind = kind
        self.workers = workers
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="motivate-acquire"
        )
        # acquisitions that overran their budget and are still occupying a worker
        self._stragglers = set()
        self._stragglers_lock = threading.Lock()
        # request() waits on an acquisition; keep that wait off the acquisition pool
        self._delivery = ThreadPoolExecutor(max_workers=1, thread_name_prefix="motivate-deliver")

    def placeholder(self) -> TimelineEntry:
        return TimelineEntry.placeholder(self.interval)

    def snapshot(self, is_preview: bool = False) -> TimelineEntry:
        """
        Never blocks on I/O. Previews always get the placeholder, and so does a live snapshot:
        the first real image arrives with the next timeline() call.
        """

        if is_preview:
            logger.debug("snapshot for preview context, returning placeholder")
        return self.placeholder()

    def timeline(self) -> Timeline:
        entry = self._acquire_entry()
        timeline = Timeline(entries=[entry], next_refresh=entry.next_refresh)

        logger.info(
            "timeline entry %s at %s, next refresh %s",
            entry.kind.value,
            entry.date.isoformat(timespec="seconds"),
            entry.next_refresh.isoformat(timespec="seconds"),
        )
        return timeline

    def request(self, callback: Callable[[TimelineEntry], None]) -> Future:
        """
        Deliver LOADING to callback right away, then the terminal entry from a worker thread.
        The returned future resolves to the terminal entry.
        """

        callback(TimelineEntry.loading(self.interval))

        def deliver():
            entry = self._acquire_entry()
            callback(entry)
            return entry

        return self._delivery.submit(deliver)

    def run(
        self,
        on_entry: Callable[[TimelineEntry], None],
        iterations: Optional[int] = None,
        sleep=time.sleep,
        poll: float = 1.0,
    ) -> int:
        """
        Host loop for the background surface: refresh, hand the entry over, then wait for the next
        refresh instant or an invalidation, whichever comes first. Returns the number of entries
        delivered. Runs forever when iterations is None.
        """

        delivered = 0
        generation = self.center.generation(self.kind) if self.center else 0

        while iterations is None or delivered < iterations:
            timeline = self.timeline()
            for entry in timeline.entries:
                on_entry(entry)
            delivered += 1

            if iterations is not None and delivered >= iterations:
                break

            generation = self._wait_until(timeline.next_refresh, generation, sleep, poll)

        return delivered

    def shutdown(self, wait: bool = False):
        self._delivery.shutdown(wait=wait)
        self._executor.shutdown(wait=wait)

    def _acquire_entry(self) -> TimelineEntry:
        with self._stragglers_lock:
            self._stragglers = {future for future in self._stragglers if not future.done()}

            # every worker is busy with an overrun acquisition
            if len(self._stragglers) >= self.workers:
                logger.warning("%d earlier acquisitions still running, skipping", len(self._stragglers))
                return TimelineEntry.failed("previous fetch still running", self.interval)

            future = self._executor.submit(self.coordinator.acquire)

        try:
            image = future.result(timeout=self.budget)

        except FutureTimeoutError:
            logger.warning("acquisition exceeded the %.1fs budget", self.budget)
            if not future.cancel():
                with self._stragglers_lock:
                    self._stragglers.add(future)

            return TimelineEntry.failed(
                f"timed out after {self.budget:g}s fetching image", self.interval
            )

        except AcquisitionError as error:
            logger.warning("acquisition failed: %s", error)
            return TimelineEntry.failed(str(error), self.interval)

        except Exception as error:
            logger.exception("unexpected error while acquiring image")
            return TimelineEntry.failed(f"fetch error: {error}", self.interval)

        return TimelineEntry.resolved(image, self.interval)

    def _wait_until(self, deadline: datetime, generation: int, sleep, poll: float) -> int:
        while True:
            remaining = (deadline - datetime.now()).total_seconds()
            if remaining <= 0:
                return generation

            sleep(min(poll, remaining))

            if self.center is not None:
                current = self.center.generation(self.kind)
                if current != generation:
                    logger.info("timeline reload requested for %s", self.kind)
                    return current
