"""
Tracks the asyncio tasks that back `interval` timers.
"""
import asyncio
from typing import Dict


class TimerRegistry:
    """Maps the integer handles handed to guest code onto live asyncio tasks.

    Tasks remove themselves from the registry when they finish, whether
    they were cancelled through `clearInterval` or ended on their own.
    """

    def __init__(self):
        self.active_tasks: Dict[int, asyncio.Task] = {}
        self._next_handle = 1

    def register(self, task: asyncio.Task) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self.active_tasks[handle] = task
        task.add_done_callback(lambda _t: self.active_tasks.pop(handle, None))
        return handle

    def cancel(self, handle: int) -> bool:
        """Cancels the timer behind `handle`. Returns False for unknown handles."""
        task = self.active_tasks.pop(handle, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self):
        for handle in list(self.active_tasks):
            self.cancel(handle)

    async def wait_idle(self):
        """Waits until every registered timer has been cancelled or has finished."""
        while self.active_tasks:
            await asyncio.gather(*self.active_tasks.values(), return_exceptions=True)

    def __len__(self) -> int:
        return len(self.active_tasks)
