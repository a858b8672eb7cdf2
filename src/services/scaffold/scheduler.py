# -*- coding: utf-8 -*-
"""
Deferred Task Scheduling
========================

Minimal ``call_later`` abstraction used for auto-clearing transient feedback.

Two backends:
1. ThreadingScheduler: daemon ``threading.Timer`` per task (default)
2. AsyncioScheduler: ``loop.call_later`` on a running or given event loop

Every ``call_later`` returns a handle whose ``cancel()`` is safe to call more
than once, including after the callback already ran.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import threading
from typing import Callable, Optional


class ScheduledTask(ABC):
    """Handle for a pending deferred callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` once after ``delay`` seconds."""


class _TimerTask(ScheduledTask):
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ThreadingScheduler(Scheduler):
    """Runs callbacks on daemon timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return _TimerTask(timer)


class _HandleTask(ScheduledTask):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Runs callbacks on an asyncio event loop.

    Without an explicit loop, ``call_later`` must be invoked from a coroutine
    or callback running on the loop that should own the task.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        return _HandleTask(loop.call_later(delay, callback))


__all__ = ["ScheduledTask", "Scheduler", "ThreadingScheduler", "AsyncioScheduler"]
