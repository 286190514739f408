"""
Per-session timer queue.

Every session owns one scheduler. Pending callbacks live in a min-heap keyed
by (deadline, sequence), so callbacks with equal deadlines fire in the order
they were scheduled. Closing the scheduler drops the whole queue at once.

Two drivers are provided:
    ThreadedScheduler - one worker thread sleeping until the next deadline
    ManualScheduler   - virtual clock, advanced explicitly (tests, embedding)
"""

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TimerHandle:
    """Handle returned by Scheduler.schedule(); cancel() is idempotent."""

    __slots__ = ("deadline", "seq", "callback", "cancelled", "fired")

    def __init__(self, deadline: float, seq: int, callback: Callable[[], None]):
        self.deadline = deadline
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        """True while the callback may still run."""
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self):
        state = "fired" if self.fired else "cancelled" if self.cancelled else "pending"
        return f"TimerHandle(deadline={self.deadline:.3f}, seq={self.seq}, {state})"


class Scheduler:
    """
    Base min-heap scheduler. Subclasses provide the clock and the driver.

    Callbacks never run inline from schedule(), not even with delay 0.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()
        self._closed = False

    def now(self) -> float:
        raise NotImplementedError

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Register a one-shot callback to run after ``delay`` seconds.

        After close() this returns an already-cancelled handle.

        Raises:
            ValueError: If delay is negative
        """
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")

        with self._cond:
            handle = TimerHandle(self.now() + delay, next(self._counter), callback)
            if self._closed:
                handle.cancelled = True
                logger.debug("Scheduler closed, dropping timer")
                return handle
            heapq.heappush(self._queue, (handle.deadline, handle.seq, handle))
            self._cond.notify_all()

        self._on_scheduled()
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        """Cancel a pending callback. No-op if it already fired or was cancelled."""
        with self._cond:
            handle.cancel()
            self._cond.notify_all()

    def pending(self) -> int:
        """Number of callbacks still waiting to fire."""
        with self._cond:
            return sum(1 for _, _, h in self._queue if h.active)

    def next_deadline(self) -> Optional[float]:
        with self._cond:
            self._drop_cancelled()
            return self._queue[0][0] if self._queue else None

    def close(self, wait: bool = True) -> None:
        """
        Cancel every pending callback and refuse new ones.

        Args:
            wait: Join the driver thread, if there is one
        """
        with self._cond:
            self._closed = True
            for _, _, handle in self._queue:
                handle.cancel()
            self._queue.clear()
            self._cond.notify_all()

    def _on_scheduled(self) -> None:
        """Hook for drivers that need to start lazily."""

    def _drop_cancelled(self) -> None:
        """Pop cancelled handles off the head (caller holds the lock)."""
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def _pop_due(self, now: float) -> Optional[TimerHandle]:
        with self._cond:
            self._drop_cancelled()
            if self._queue and self._queue[0][0] <= now:
                return heapq.heappop(self._queue)[2]
            return None

    def _fire(self, handle: TimerHandle) -> None:
        if handle.cancelled:
            return
        handle.fired = True
        try:
            handle.callback()
        except Exception:
            logger.exception("Scheduled callback failed")


class ThreadedScheduler(Scheduler):
    """
    Real-time scheduler driven by a single daemon worker thread.

    The worker is started on the first schedule() call and exits on close().
    """

    def __init__(self, name: str = "scheduler"):
        super().__init__()
        self._name = name
        self._thread: Optional[threading.Thread] = None

    def now(self) -> float:
        return time.monotonic()

    def _on_scheduled(self) -> None:
        with self._cond:
            if self._thread is not None or self._closed:
                return
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                if self._closed:
                    return
                self._drop_cancelled()
                if not self._queue:
                    self._cond.wait()
                    continue
                wait = self._queue[0][0] - self.now()
                if wait > 0:
                    self._cond.wait(wait)
                    continue
                handle = heapq.heappop(self._queue)[2]
            self._fire(handle)

    def close(self, wait: bool = True) -> None:
        super().close()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)


class ManualScheduler(Scheduler):
    """
    Scheduler on a virtual clock.

    Nothing fires until advance() is called. Callbacks run at their exact
    deadlines, so callbacks that schedule more work see the right now().
    """

    def __init__(self, start: float = 0.0):
        super().__init__()
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every callback that becomes due.

        Returns:
            Number of callbacks fired
        """
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        return self.advance_to(self._now + seconds)

    def advance_to(self, target: float) -> int:
        fired = 0
        while True:
            handle = self._pop_due(target)
            if handle is None:
                break
            self._now = max(self._now, handle.deadline)
            self._fire(handle)
            fired += 1
        self._now = max(self._now, target)
        return fired

    def run_pending(self) -> int:
        """Fire callbacks due now (e.g. those scheduled with delay 0)."""
        return self.advance(0)
