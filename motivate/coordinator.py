"""
Image Acquisition Coordinator

The one place that decides where an image comes from:

    1. Always try the backend first, exactly once. The network monitor is never asked beforehand.
    2. If the pick and the download both succeed, write the image through to the offline cache
       and return it tagged REMOTE.
    3. If anything on the remote path fails, take a random image from the offline cache and
       return it tagged CACHE.
    4. If the cache is empty too, raise AcquisitionError and say which side failed.

There is no retry loop. Whoever called acquire() decides whether to try again.
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from motivate.backend import RemoteError
from motivate.models import AcquiredImage
from motivate.models import Provenance
from motivate.network_monitor import NetworkAvailabilityMonitor
from motivate.offline_cache import CacheError
from motivate.offline_cache import OfflineImageCache
from motivate.preferences import CategoryPreferenceStore
from motivate.remote_picker import RemoteImagePicker
from motivate.shared_store import StoreError

logger = logging.getLogger(__name__)


class AcquisitionFailure(Enum):
    NETWORK_NO_FALLBACK = "network error and no offline fallback"
    NO_OFFLINE_IMAGES = "no offline images available"


class AcquisitionError(Exception):
    """
    Raised when no image could be produced at all. reason tells the two exhaustion cases apart:
    the remote path failed and there was nothing cached, or only the cache was asked and it was
    empty.
    """

    def __init__(self, reason: AcquisitionFailure, detail: Optional[str] = None):
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)
        self.reason = reason
        self.detail = detail


class ImageAcquisitionCoordinator:
    def __init__(
        self,
        picker: RemoteImagePicker,
        cache: OfflineImageCache,
        preferences: Optional[CategoryPreferenceStore] = None,
        monitor: Optional[NetworkAvailabilityMonitor] = None,
    ):
        self.picker = picker
        self.cache = cache
        self.preferences = preferences
        self.monitor = monitor

    def acquire(self, category_ids: Optional[Iterable[int]] = None) -> AcquiredImage:
        """
        Fetch with fallback. When category_ids is None the preference store's current selection
        is used, if a preference store was supplied. Raises AcquisitionError.
        """

        if category_ids is None and self.preferences is not None:
            category_ids = self.preferences.current()

        try:
            record, data = self.picker.fetch_image(category_ids)

        except RemoteError as error:
            logger.warning("remote fetch failed (%s), falling back to offline cache", error)
            if self.monitor is not None:
                self.monitor.record_failure(error)

            return self._fallback(error)

        if self.monitor is not None:
            self.monitor.record_success()

        self._remember(data, record.id)
        return AcquiredImage(data=data, provenance=Provenance.REMOTE, image_id=record.id)

    def acquire_offline(self) -> AcquiredImage:
        """
        Serve from the cache only, without touching the network.
        """

        try:
            entry = self.cache.require_random()

        except (CacheError, StoreError) as error:
            raise AcquisitionError(AcquisitionFailure.NO_OFFLINE_IMAGES, _detail(error))

        return AcquiredImage(data=entry.data, provenance=Provenance.CACHE, image_id=entry.image_id)

    def _fallback(self, remote_error: RemoteError) -> AcquiredImage:
        try:
            entry = self.cache.get_random()

        except StoreError as error:
            logger.error("offline cache unreadable: %s", error)
            raise AcquisitionError(
                AcquisitionFailure.NETWORK_NO_FALLBACK, f"{remote_error}; cache: {error}"
            )

        if entry is None:
            raise AcquisitionError(AcquisitionFailure.NETWORK_NO_FALLBACK, str(remote_error))

        logger.info("serving image %s from offline cache", entry.image_id)
        return AcquiredImage(data=entry.data, provenance=Provenance.CACHE, image_id=entry.image_id)

    def _remember(self, data: bytes, image_id: int):
        try:
            self.cache.put(data, image_id=image_id)

        except (CacheError, StoreError) as error:
            # the acquisition itself succeeded
            logger.warning("could not cache image %s: %s", image_id, error)


def _detail(error) -> Optional[str]:
    detail = str(error)
    return None if detail == AcquisitionFailure.NO_OFFLINE_IMAGES.value else detail
