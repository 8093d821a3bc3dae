"""
Tests for coordinator.py

The picker, cache and monitor are autospecced mocks so the tests can assert exactly which calls the
coordinator made: one remote attempt per acquire, no cache reads on success, and the right
AcquisitionFailure for each way of running out of images.
"""

import unittest.mock

import pytest

from motivate.backend import RemoteError
from motivate.backend import RemoteErrorKind
from motivate.models import CachedEntry
from motivate.models import ImageRecord
from motivate.models import Provenance
from motivate.network_monitor import NetworkAvailabilityMonitor
from motivate.offline_cache import CacheError
from motivate.offline_cache import OfflineImageCache
from motivate.preferences import CategoryPreferenceStore
from motivate.remote_picker import RemoteImagePicker
from motivate.shared_store import StoreError

# following entities are tested in this module:
from motivate.coordinator import AcquisitionError
from motivate.coordinator import AcquisitionFailure
from motivate.coordinator import ImageAcquisitionCoordinator


@pytest.fixture
def picker():
    return unittest.mock.create_autospec(RemoteImagePicker, instance=True)


@pytest.fixture
def cache():
    return unittest.mock.create_autospec(OfflineImageCache, instance=True)


@pytest.fixture
def monitor():
    return unittest.mock.create_autospec(NetworkAvailabilityMonitor, instance=True)


@pytest.fixture
def coordinator(picker, cache, monitor) -> ImageAcquisitionCoordinator:
    return ImageAcquisitionCoordinator(picker, cache, monitor=monitor)


@pytest.mark.parametrize("category_ids", [None, [], [3, 5], {1}])
def test_remote_success(coordinator, picker, cache, monitor, category_ids):

    picker.fetch_image.return_value = (ImageRecord(7, "sunrise.jpg"), b"remote bytes")

    image = coordinator.acquire(category_ids)

    assert image.provenance is Provenance.REMOTE
    assert image.data == b"remote bytes"
    assert image.image_id == 7

    picker.fetch_image.assert_called_once_with(category_ids)
    cache.get_random.assert_not_called()
    cache.require_random.assert_not_called()
    cache.put.assert_called_once_with(b"remote bytes", image_id=7)
    monitor.record_success.assert_called_once()


@pytest.mark.parametrize(
    "error",
    [
        RemoteError(RemoteErrorKind.NETWORK, "connection refused"),
        RemoteError(RemoteErrorKind.EMPTY, "no image matched"),
        RemoteError(RemoteErrorKind.DECODE, "bad row"),
        RemoteError(RemoteErrorKind.HTTP_STATUS, "download failed", status_code=404),
    ],
)
def test_remote_failure_falls_back_to_cache(coordinator, picker, cache, monitor, error):

    picker.fetch_image.side_effect = error
    cache.get_random.return_value = CachedEntry(data=b"cached bytes", image_id=3)

    image = coordinator.acquire([1])

    assert image.provenance is Provenance.CACHE
    assert image.data == b"cached bytes"
    assert image.image_id == 3

    picker.fetch_image.assert_called_once()
    cache.put.assert_not_called()
    monitor.record_failure.assert_called_once_with(error)


def test_remote_failure_and_empty_cache(coordinator, picker, cache):

    picker.fetch_image.side_effect = RemoteError(RemoteErrorKind.NETWORK, "offline")
    cache.get_random.return_value = None

    with pytest.raises(AcquisitionError) as excinfo:
        coordinator.acquire()

    assert excinfo.value.reason is AcquisitionFailure.NETWORK_NO_FALLBACK
    assert str(excinfo.value).startswith("network error and no offline fallback")
    assert "offline" in excinfo.value.detail


def test_remote_failure_and_unreadable_cache(coordinator, picker, cache):

    picker.fetch_image.side_effect = RemoteError(RemoteErrorKind.NETWORK, "offline")
    cache.get_random.side_effect = StoreError("database is locked")

    with pytest.raises(AcquisitionError) as excinfo:
        coordinator.acquire()

    assert excinfo.value.reason is AcquisitionFailure.NETWORK_NO_FALLBACK


def test_cache_write_failure_does_not_fail_acquire(coordinator, picker, cache):

    picker.fetch_image.return_value = (ImageRecord(7, "sunrise.jpg"), b"remote bytes")
    cache.put.side_effect = StoreError("disk full")

    image = coordinator.acquire()

    assert image.provenance is Provenance.REMOTE


def test_no_retry_on_failure(coordinator, picker, cache):

    picker.fetch_image.side_effect = RemoteError(RemoteErrorKind.NETWORK, "offline")
    cache.get_random.return_value = None

    for _ in range(3):
        with pytest.raises(AcquisitionError):
            coordinator.acquire()

    assert picker.fetch_image.call_count == 3


def test_acquire_offline(coordinator, picker, cache):

    cache.require_random.return_value = CachedEntry(data=b"cached", image_id=None)

    image = coordinator.acquire_offline()

    assert image.provenance is Provenance.CACHE
    assert image.image_id is None
    picker.fetch_image.assert_not_called()


@pytest.mark.parametrize(
    "error", [CacheError("no offline images available"), StoreError("unreadable")]
)
def test_acquire_offline_empty(coordinator, cache, error):

    cache.require_random.side_effect = error

    with pytest.raises(AcquisitionError) as excinfo:
        coordinator.acquire_offline()

    assert excinfo.value.reason is AcquisitionFailure.NO_OFFLINE_IMAGES
    assert str(excinfo.value).startswith("no offline images available")


def test_offline_coordinator_needs_no_picker(cache):

    cache.require_random.return_value = CachedEntry(data=b"cached")

    image = ImageAcquisitionCoordinator(None, cache).acquire_offline()

    assert image.data == b"cached"


def test_monitor_is_never_consulted_before_fetching(coordinator, picker, monitor):
    """A stale 'offline' reading must not stop a real attempt."""

    monitor.is_available = False
    picker.fetch_image.return_value = (ImageRecord(1, "a.png"), b"bytes")

    image = coordinator.acquire()

    assert image.provenance is Provenance.REMOTE
    picker.fetch_image.assert_called_once()


def test_preferences_supply_default_filter(picker, cache):

    preferences = unittest.mock.create_autospec(CategoryPreferenceStore, instance=True)
    preferences.current.return_value = frozenset({2, 4})
    picker.fetch_image.return_value = (ImageRecord(1, "a.png"), b"bytes")

    ImageAcquisitionCoordinator(picker, cache, preferences=preferences).acquire()

    picker.fetch_image.assert_called_once_with(frozenset({2, 4}))


def test_explicit_filter_overrides_preferences(picker, cache):

    preferences = unittest.mock.create_autospec(CategoryPreferenceStore, instance=True)
    picker.fetch_image.return_value = (ImageRecord(1, "a.png"), b"bytes")

    ImageAcquisitionCoordinator(picker, cache, preferences=preferences).acquire([9])

    picker.fetch_image.assert_called_once_with([9])
    preferences.current.assert_not_called()
