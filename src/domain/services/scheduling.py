"""Asyncio helpers for the orchestrator's background activities."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger()

AsyncCallable = Callable[[], Awaitable[Any]]


def log_task_failure(task: asyncio.Task[Any]) -> None:
    """Done-callback that logs a background task which died with an exception."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "background_task_failed",
            task=task.get_name(),
            error=str(exc),
            exc_info=exc,
        )


class PeriodicTask:
    """Calls ``func`` after ``initial_delay`` and then every ``interval`` seconds.

    ``stop()`` only clears the interval: a tick that is already awaiting the
    store is left to finish on its own.
    """

    def __init__(
        self,
        name: str,
        func: AsyncCallable,
        interval: float,
        initial_delay: float = 0.0,
    ) -> None:
        self.name = name
        self._func = func
        self._interval = interval
        self._initial_delay = initial_delay
        self._stopping: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stopping), name=self.name)
        self._task.add_done_callback(log_task_failure)

    def stop(self) -> None:
        if self._stopping is not None:
            self._stopping.set()

    async def _run(self, stopping: asyncio.Event) -> None:
        if await self._sleep(stopping, self._initial_delay):
            return
        while True:
            try:
                await self._func()
            except Exception:
                logger.exception("periodic_task_failed", task=self.name)
            if await self._sleep(stopping, self._interval):
                return

    @staticmethod
    async def _sleep(stopping: asyncio.Event, seconds: float) -> bool:
        """Sleep up to ``seconds``; True when the task was stopped meanwhile."""
        if stopping.is_set():
            return True
        if seconds <= 0:
            return False
        try:
            await asyncio.wait_for(stopping.wait(), timeout=seconds)
        except TimeoutError:
            return False
        return True


class CoalescingRunner:
    """Collapses concurrent run requests into one in-flight run plus at most one follow-up."""

    def __init__(self, name: str, func: AsyncCallable) -> None:
        self.name = name
        self._func = func
        self._task: asyncio.Task[None] | None = None
        self._pending = False

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self) -> asyncio.Task[None]:
        """Ask for a run; returns the task that will honour the request."""
        task = self._task
        if task is not None and not task.done():
            self._pending = True
            return task
        self._task = asyncio.create_task(self._drain(), name=self.name)
        self._task.add_done_callback(log_task_failure)
        return self._task

    async def _drain(self) -> None:
        while True:
            self._pending = False
            try:
                await self._func()
            except Exception:
                logger.exception("coalesced_run_failed", task=self.name)
            if not self._pending:
                return
