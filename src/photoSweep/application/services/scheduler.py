"""Single-threaded cooperative task queue.

Catalog paging runs as a sequence of small tasks.  Each task does one
page of work and returns, so whatever drives the queue (a UI event loop,
a CLI prompt loop, a test) decides when background work may proceed.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Optional, Protocol

Task = Callable[[], None]


class Scheduler(Protocol):
    """Anything that can run a callable later on the caller's thread."""

    def call_soon(self, callback: Task) -> None: ...


class CooperativeScheduler:
    """FIFO of pending tasks pumped explicitly by the owner."""

    def __init__(self) -> None:
        self._queue: Deque[Task] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def call_soon(self, callback: Task) -> None:
        self._queue.append(callback)

    def run_next(self) -> bool:
        """Run the oldest pending task; return ``False`` when idle."""

        if not self._queue:
            return False
        task = self._queue.popleft()
        task()
        return True

    def run_until_idle(self, max_tasks: Optional[int] = None) -> int:
        """Run tasks (including ones scheduled meanwhile) until none remain."""

        executed = 0
        while self._queue and (max_tasks is None or executed < max_tasks):
            self.run_next()
            executed += 1
        return executed
