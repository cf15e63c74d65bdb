"""Cancellable periodic task running on a background thread."""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Calls ``callback`` every ``interval`` seconds until stopped.

    The first call happens one interval after ``start()``. ``stop()`` returns
    only once the worker thread has exited, so no tick can fire afterwards.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "periodic-task"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.name = name
        self._callback = callback
        self._lock = threading.Lock()
        # Serializes start/stop so concurrent re-arms leave one worker
        self._rearm_lock = threading.Lock()
        # Set only inside worker threads, to their own stop event
        self._worker = threading.local()
        self._stop: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Arm the timer, cancelling any timer already running."""
        with self._rearm_lock:
            self._stop_and_join()
            with self._lock:
                self._stop = threading.Event()
                self._thread = threading.Thread(
                    target=self._run,
                    args=(self._stop,),
                    name=self.name,
                    daemon=True,
                )
                self._thread.start()
        logger.debug(f"Started {self.name} (every {self.interval}s)")

    def stop(self) -> None:
        """Disarm the timer. Safe to call when not running."""
        own_stop = getattr(self._worker, "stop", None)
        if own_stop is not None:
            # A callback stopping its own task: no join, and no waiting on a
            # start() that may itself be joining this thread
            own_stop.set()
            with self._lock:
                if self._stop is own_stop:
                    self._stop = None
                    self._thread = None
            logger.debug(f"Stopped {self.name}")
            return

        with self._rearm_lock:
            self._stop_and_join()

    def _stop_and_join(self) -> None:
        """Caller holds the re-arm lock."""
        with self._lock:
            stop, thread = self._stop, self._thread
            self._stop = None
            self._thread = None

        if stop is None or thread is None:
            return

        stop.set()
        if thread is not threading.current_thread():
            thread.join()
        logger.debug(f"Stopped {self.name}")

    def _run(self, stop: threading.Event) -> None:
        self._worker.stop = stop
        while not stop.wait(self.interval):
            try:
                self._callback()
            except Exception as e:
                logger.error(f"{self.name} tick failed: {e}")
