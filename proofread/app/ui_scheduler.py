"""UI-thread scheduling built on a host scheduler such as Tk ``after``.

The composer window passes its ``after`` and ``after_cancel`` callables into
:class:`UiScheduler` so one-shot timers and cross-thread handoffs are tracked
in one place. Worker threads may only call :meth:`UiScheduler.call_soon`;
everything else runs on the UI thread.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable, Optional


ScheduleFn = Callable[[int, Callable[[], None]], str]
CancelFn = Callable[[str], None]

_log = logging.getLogger(__name__)


class ScheduledTask:
    """Cancellable handle for one deferred callback.

    ``cancel`` is idempotent and safe to call after the callback already ran.
    """

    def __init__(self, cancel: CancelFn, callback: Callable[[], None]) -> None:
        self._cancel = cancel
        self._callback = callback
        self.token: Optional[str] = None
        self.fired = False
        self.cancelled = False

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def run(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self._callback()

    def cancel(self) -> None:
        if not self.pending:
            return
        self.cancelled = True
        if self.token is None:
            return
        try:
            self._cancel(self.token)
        except Exception:
            # The host may already have torn the timer down with its window.
            _log.debug("Timer %s already gone", self.token)


class UiScheduler:
    """Own deferred callbacks and the worker-to-UI handoff queue."""

    def __init__(
        self,
        schedule: ScheduleFn,
        cancel: CancelFn,
        *,
        pump_interval_ms: int = 25,
    ) -> None:
        """Store host schedule/cancel functions.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
            pump_interval_ms: How often queued handoffs are drained.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._pump_interval_ms = max(1, int(pump_interval_ms))
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._pump_task: Optional[ScheduledTask] = None

    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` once on the UI thread after ``delay_ms``."""
        task = ScheduledTask(self._cancel, callback)
        task.token = self._schedule(max(1, int(delay_ms)), task.run)
        return task

    def call_soon(self, callback: Callable[[], None]) -> None:
        """Queue ``callback`` for the UI thread. Safe from any thread."""
        self._queue.put(callback)

    def start(self) -> None:
        """Begin draining the handoff queue."""
        if self._pump_task is not None and self._pump_task.pending:
            return
        self._pump_task = self.schedule_once(self._pump_interval_ms, self._pump)

    def stop(self) -> None:
        if self._pump_task is not None:
            self._pump_task.cancel()
            self._pump_task = None

    def drain(self) -> int:
        """Run every queued callback now; return how many ran."""
        ran = 0
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return ran
            ran += 1
            try:
                callback()
            except Exception:
                _log.exception("UI callback failed")

    def _pump(self) -> None:
        self.drain()
        self._pump_task = self.schedule_once(self._pump_interval_ms, self._pump)


__all__ = ["ScheduledTask", "UiScheduler"]
