"""A single worker thread running queued tasks in order, with a bounded queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)


class Background:
    """Runs submitted callables one at a time on a worker thread.

    At most ``size`` tasks (including the one running) are held; submitting
    more blocks until room frees up.
    """

    def __init__(self, size: int = 2) -> None:
        if size < 1:
            raise ValueError("size must be at least 1")
        self._max_size = size
        self._tasks: deque[Callable[[], object]] = deque()
        self._cond = threading.Condition()
        self._stop = False
        self._thread = threading.Thread(target=self._run, name="background", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._tasks:
                    if self._stop:
                        return
                    self._cond.wait()
                task = self._tasks[0]

            try:
                task()
            except Exception:
                logger.exception("Exception in background task")

            with self._cond:
                self._tasks.popleft()
                if len(self._tasks) == self._max_size - 1 or not self._tasks:
                    self._cond.notify_all()

    def submit(self, task: Callable[[], object]) -> None:
        """Queue ``task``, blocking while the queue is full."""
        with self._cond:
            if self._stop:
                raise RuntimeError("background worker is closed")
            while len(self._tasks) >= self._max_size:
                self._cond.wait()
            self._tasks.append(task)
            self._cond.notify_all()

    def __call__(self, task: Callable[[], object]) -> None:
        self.submit(task)

    def wait_empty(self) -> None:
        """Block until every queued task has finished."""
        with self._cond:
            while self._tasks:
                self._cond.wait()

    def close(self) -> None:
        """Finish the queued tasks and stop the worker."""
        with self._cond:
            self._stop = True
            self._cond.notify_all()
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def __enter__(self) -> "Background":
        return self

    def __exit__(self, *args) -> None:
        self.close()