"""Run-after-delay task scheduling on timer threads."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Set

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for one pending callback."""

    def __init__(self, delay: float, fn: Callable[..., Any], args: tuple, on_done: Callable[["ScheduledTask"], None]) -> None:
        self.delay = delay
        self._fn = fn
        self._args = args
        self._on_done = on_done
        self._timer = threading.Timer(delay, self._run)
        self._timer.daemon = True
        self.cancelled = False

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> None:
        self.cancelled = True
        self._timer.cancel()

    def _run(self) -> None:
        try:
            self._fn(*self._args)
        except Exception:
            logger.exception("Scheduled task %r failed", self._fn)
            raise
        finally:
            self._on_done(self)


class DelayedTaskScheduler:
    """Schedules callbacks to run once after a delay; nothing is held while waiting."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Set[ScheduledTask] = set()
        self._closed = False

    def schedule(self, delay: float, fn: Callable[..., Any], *args: Any) -> ScheduledTask:
        task = ScheduledTask(delay, fn, args, self._discard)
        with self._lock:
            if self._closed:
                raise RuntimeError("Scheduler is shut down.")
            self._pending.add(task)
        task.start()
        return task

    def cancel(self, task: ScheduledTask) -> None:
        task.cancel()
        self._discard(task)

    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            tasks = list(self._pending)
            self._pending.clear()
        for task in tasks:
            task.cancel()

    def _discard(self, task: ScheduledTask) -> None:
        with self._lock:
            self._pending.discard(task)
