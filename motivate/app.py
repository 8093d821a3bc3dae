"""
motivate application wiring

Builds the components from a MotivateConfig on first use. Both surfaces use this: the CLI keeps one
MotivateApp on its stream object and the widget command builds its scheduler from the same app.
Components that need the backend are only built when something asks for them, so offline-only
commands ('random --local', 'add') work without credentials.
"""

from functools import cached_property

from motivate.backend import BackendClient
from motivate.config import MotivateConfig
from motivate.coordinator import ImageAcquisitionCoordinator
from motivate.feedback import FeedbackSubmitter
from motivate.network_monitor import NetworkAvailabilityMonitor
from motivate.offline_cache import OfflineImageCache
from motivate.preferences import CategoryPreferenceStore
from motivate.remote_picker import RemoteImagePicker
from motivate.shared_store import SharedStore
from motivate.timeline import TimelineCenter
from motivate.timeline import TimelineScheduler
from motivate.timeline import WIDGET_KIND


class MotivateApp:
    def __init__(self, config: MotivateConfig):
        self.config = config

    @cached_property
    def store(self) -> SharedStore:
        return SharedStore(self.config.database_path)

    @cached_property
    def center(self) -> TimelineCenter:
        return TimelineCenter(self.store)

    @cached_property
    def preferences(self) -> CategoryPreferenceStore:
        preferences = CategoryPreferenceStore(self.store, debounce=self.config.DEBOUNCE_SECONDS)
        preferences.add_commit_callback(lambda _: self.center.reload_timelines(WIDGET_KIND))
        return preferences

    @cached_property
    def cache(self) -> OfflineImageCache:
        return OfflineImageCache(self.store, capacity=self.config.CACHE_CAPACITY)

    @cached_property
    def client(self) -> BackendClient:
        return BackendClient.from_config(self.config)

    @cached_property
    def monitor(self) -> NetworkAvailabilityMonitor:
        return NetworkAvailabilityMonitor(self.client)

    @cached_property
    def picker(self) -> RemoteImagePicker:
        return RemoteImagePicker(self.client, bucket=self.config.IMAGE_BUCKET)

    @cached_property
    def coordinator(self) -> ImageAcquisitionCoordinator:
        return ImageAcquisitionCoordinator(
            self.picker, self.cache, preferences=self.preferences, monitor=self.monitor
        )

    @cached_property
    def offline_coordinator(self) -> ImageAcquisitionCoordinator:
        """Coordinator for cache-only use; never builds the backend client."""

        return ImageAcquisitionCoordinator(None, self.cache)

    @cached_property
    def feedback(self) -> FeedbackSubmitter:
        return FeedbackSubmitter(self.client)

    def scheduler(self, interval=None, budget=None) -> TimelineScheduler:
        return TimelineScheduler(
            self.coordinator,
            interval=interval or self.config.REFRESH_INTERVAL,
            budget=budget or self.config.TIMELINE_BUDGET,
            center=self.center,
        )

    def close(self):
        """Flush a pending preference write, if preferences were ever touched."""

        if "preferences" in self.__dict__:
            self.preferences.flush()
