"""
Network Availability Monitor

Tracks whether the backend looked reachable the last time anyone tried. This is advisory only:
it feeds status output and logging, and the acquisition coordinator never consults it before
trying the network. A stale "offline" reading must not stop a real attempt.
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from motivate.backend import BackendClient
from motivate.backend import RemoteError

logger = logging.getLogger(__name__)


class NetworkAvailabilityMonitor:
    def __init__(self, client: Optional[BackendClient] = None, check_timeout: float = 3.0):
        self.client = client
        self.check_timeout = check_timeout
        self._lock = threading.Lock()
        self._available: Optional[bool] = None
        self._last_changed: Optional[datetime] = None
        self._last_error: Optional[str] = None

    @property
    def is_available(self) -> Optional[bool]:
        """Last observed state; None until something has been observed."""

        with self._lock:
            return self._available

    @property
    def last_changed(self) -> Optional[datetime]:
        with self._lock:
            return self._last_changed

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def record_success(self):
        self._update(True, None)

    def record_failure(self, error=None):
        self._update(False, str(error) if error is not None else None)

    def check_reachable(self) -> bool:
        """
        One HEAD request against the backend. Any answer at all, whatever its status, means the
        network path works.
        """

        if self.client is None:
            raise RuntimeError("check_reachable() needs a BackendClient")

        try:
            self.client.head(timeout=self.check_timeout)

        except RemoteError as error:
            self.record_failure(error)
            return False

        self.record_success()
        return True

    def _update(self, available: bool, error: Optional[str]):
        with self._lock:
            changed = available != self._available
            self._available = available
            self._last_error = error
            if changed:
                self._last_changed = datetime.now()

        if changed:
            logger.info("network looks %s", "available" if available else "unavailable")
