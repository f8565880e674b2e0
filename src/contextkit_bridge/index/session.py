import threading
from collections.abc import Iterator
from contextlib import contextmanager


class IndexingSession:
    """Single-flight guard for the recovery workflow.

    A competing caller is rejected, never queued: ``claim()`` yields False instead
    of waiting. Backed by a real lock so the guarantee survives a threaded host.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._lock.locked()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @contextmanager
    def claim(self) -> Iterator[bool]:
        """Yield True if this caller now holds the session; released on exit."""
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()
