import asyncio
import logging
from typing import Awaitable, Callable

log = logging.getLogger(__name__)


class Scheduler:
    """Named, cancellable asyncio tasks.

    Each slot holds at most one task. Scheduling into an occupied slot cancels
    the task already there, unless that task is the one doing the scheduling
    (a delayed round end scheduling the next round start, for example).
    """

    def __init__(self):
        self._tasks: dict[str, asyncio.Task] = {}

    def pending(self, slot: str) -> bool:
        task = self._tasks.get(slot)
        return task is not None and not task.done()

    def schedule(
        self, slot: str, delay: float, callback: Callable[[], Awaitable[None]]
    ) -> asyncio.Task:
        self.cancel(slot)
        task = asyncio.create_task(self._run(slot, delay, callback), name=f"guessword-{slot}")
        task.add_done_callback(self._report)
        self._tasks[slot] = task
        log.debug(f"[timer-set] slot={slot} delay={delay}s")
        return task

    def cancel(self, slot: str) -> None:
        task = self._tasks.pop(slot, None)
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        log.debug(f"[timer-cancel] slot={slot}")

    def cancel_all(self) -> None:
        for slot in list(self._tasks):
            self.cancel(slot)

    async def aclose(self) -> None:
        tasks = [
            task for task in self._tasks.values()
            if task is not asyncio.current_task()
        ]
        self.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, slot: str, delay: float, callback) -> None:
        try:
            if delay > 0:
                await asyncio.sleep(delay)
            await callback()
        finally:
            if self._tasks.get(slot) is asyncio.current_task():
                del self._tasks[slot]

    @staticmethod
    def _report(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(f"Scheduled task {task.get_name()} failed: {exc!r}")
