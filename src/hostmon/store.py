"""Latest-snapshot cell shared between the sampling thread and readers."""

import threading

from hostmon.models import SystemSnapshot


class SnapshotStore:
    """
    Holds the most recently published SystemSnapshot.

    Snapshots are immutable, so publishing swaps a single reference under the
    lock and readers get either the previous or the new snapshot as a whole.
    Only the latest snapshot is kept.
    """

    def __init__(self) -> None:
        self._ready = threading.Condition(threading.Lock())
        self._snapshot: SystemSnapshot | None = None
        self._published_count = 0

    @property
    def published_count(self) -> int:
        """Number of snapshots published so far."""
        with self._ready:
            return self._published_count

    def publish(self, snapshot: SystemSnapshot) -> None:
        """Replace the stored snapshot. Called only by the sampling thread."""
        with self._ready:
            self._snapshot = snapshot
            self._published_count += 1
            self._ready.notify_all()

    def read(self) -> SystemSnapshot | None:
        """Return the latest snapshot, or None if nothing was published yet."""
        with self._ready:
            return self._snapshot

    def wait(self, timeout: float | None = None) -> SystemSnapshot | None:
        """
        Block until a snapshot is available.

        Args:
            timeout: Maximum seconds to wait, or None to wait indefinitely.

        Returns:
            The latest snapshot, or None if the timeout expired first.
        """
        with self._ready:
            self._ready.wait_for(lambda: self._snapshot is not None, timeout=timeout)
            return self._snapshot
