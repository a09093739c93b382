"""
Reaper Module

Background thread that periodically sweeps expired entries out of a
store. The stop signal is a threading.Event created in __init__, so it
exists before the thread starts and stop() can never block on it.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Reaper:
    """
    Periodic sweeper running on a daemon thread.

    Usage:
        reaper = Reaper(store.delete_expired, interval=60)
        reaper.start()
        ...
        reaper.stop()   # idempotent

    Attributes:
        interval: Seconds between sweeps
    """

    def __init__(self, sweep: Callable[[], int], interval: float):
        """
        Args:
            sweep: Callable performing one sweep, returning the number removed
            interval: Seconds between sweeps (must be positive to start)
        """
        self.interval = interval
        self._sweep = sweep
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        """True while the sweep thread is alive."""
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """
        Start the sweep thread.

        Raises:
            ValueError: If interval is not positive
            RuntimeError: If the reaper was already started or stopped
        """
        if self.interval <= 0:
            raise ValueError("interval must be positive")
        with self._state_lock:
            if self._thread is not None or self._stop_event.is_set():
                raise RuntimeError("reaper can only be started once")
            self._thread = threading.Thread(
                target=self._run, name="snapcache-reaper", daemon=True
            )
            self._thread.start()
        logger.debug(f"Reaper started (interval={self.interval}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Signal the sweep thread to exit and wait for it.

        Calling stop() again, or before start(), returns immediately.

        Args:
            timeout: Maximum seconds to wait for the thread (None = wait)
        """
        with self._state_lock:
            if self._stop_event.is_set():
                return
            self._stop_event.set()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.debug("Reaper stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self._sweep()
            except Exception as exc:
                logger.exception(f"Expiration sweep failed: {exc}")
