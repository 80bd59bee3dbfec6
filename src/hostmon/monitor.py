"""Periodic sampling driver for hostmon."""

import logging
import threading

from hostmon.sampler import Sampler
from hostmon.store import SnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_POLL_RATE = 3.0
MIN_POLL_RATE = 0.1


class SystemMonitor:
    """
    Drives a Sampler on a fixed interval and publishes to a SnapshotStore.

    Runs in a separate daemon thread. The first sample is taken as soon as the
    thread starts; a stop request is honoured between cycles, never mid-cycle.
    """

    def __init__(
        self,
        sampler: Sampler,
        store: SnapshotStore,
        poll_rate: float = DEFAULT_POLL_RATE,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            sampler: Produces one snapshot per cycle.
            store: Receives every completed snapshot.
            poll_rate: How often to sample the system (in seconds). Default 3.0s.
        """
        self._sampler = sampler
        self._store = store
        self._poll_rate = max(MIN_POLL_RATE, poll_rate)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(MIN_POLL_RATE, value)

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        # Each thread owns its event so a stopping thread is never revived
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._poll_loop,
            args=(self._stop_event,),
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()
        logger.info("Sampling every %.1fs", self._poll_rate)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        If the thread is still inside a cycle when the timeout expires it is
        left to finish that cycle and exit; until then the monitor still
        reports itself running and start() does nothing.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if not self._thread.is_alive():
                self._thread = None
            else:
                logger.warning("Sampling thread still busy after %.1fs", timeout or 0.0)

    def run_once(self) -> None:
        """Collect one snapshot and publish it."""
        self._store.publish(self._sampler.collect())

    def _poll_loop(self, stop_event: threading.Event) -> None:
        """Main polling loop running in the background thread."""
        while not stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("Sampling cycle failed")

            # Wait for poll_rate seconds or until stop is requested
            stop_event.wait(timeout=self._poll_rate)
