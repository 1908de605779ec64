"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/gate.py
Counting permit pool that bounds how many files are hashed at the same time.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from redup.core.models import PipelineConfig


class ConcurrencyGate:
    """
    Fixed-size pool of permits shared by every hash task.

    The driver acquires a permit before dispatching a task and the task
    releases it when it is done, success or failure. No fairness between
    waiters is guaranteed.
    """

    def __init__(self, permits: int = PipelineConfig.CONCURRENCY_LIMIT):
        if permits < 1:
            raise ValueError(f"Permit count must be positive, got {permits}")
        self.permits = permits
        self._semaphore = threading.BoundedSemaphore(permits)
        self._lock = threading.Lock()
        self._in_use = 0
        self._peak_in_use = 0

    def acquire(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        poll_interval: float = PipelineConfig.PERMIT_POLL_INTERVAL
    ) -> bool:
        """
        Block until a permit is free.
        Returns False (holding nothing) if stopped_flag fires while waiting.
        """
        if stopped_flag is None:
            self._semaphore.acquire()
        else:
            while not self._semaphore.acquire(timeout=poll_interval):
                if stopped_flag():
                    return False

        with self._lock:
            self._in_use += 1
            self._peak_in_use = max(self._peak_in_use, self._in_use)
        return True

    def release(self) -> None:
        """Return one permit. Releasing more than was acquired raises ValueError."""
        with self._lock:
            if self._in_use == 0:
                raise ValueError("ConcurrencyGate released more times than acquired")
            self._in_use -= 1
        self._semaphore.release()

    @contextmanager
    def permit(self) -> Iterator[None]:
        """Scoped acquire/release: the permit is returned exactly once."""
        self.acquire()
        try:
            yield
        finally:
            self.release()

    @property
    def in_use(self) -> int:
        with self._lock:
            return self._in_use

    @property
    def peak_in_use(self) -> int:
        """Highest number of permits held at once since creation."""
        with self._lock:
            return self._peak_in_use

    def __repr__(self):
        return f"<ConcurrencyGate permits={self.permits}, in_use={self.in_use}>"
