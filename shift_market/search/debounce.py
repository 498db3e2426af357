"""
Trailing-edge debounce for asyncio.

Each call() restarts the window; the callback runs once with the arguments
of the last call after `delay` seconds of quiet. Coroutine callbacks are
scheduled as tasks on the running loop.
"""
import asyncio
import inspect
from typing import Any, Callable, Optional, Set, Tuple


class Debouncer:
    def __init__(self, callback: Callable[..., Any], delay: float = 0.3):
        self.callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._args: Tuple[Any, ...] = ()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, *args: Any) -> None:
        """Schedule the callback, replacing any call still waiting."""
        loop = asyncio.get_running_loop()
        self.cancel()
        self._args = args
        if self.delay <= 0:
            self._fire()
            return
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> bool:
        """Run a waiting call immediately. Returns False when nothing was waiting."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._fire()
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        result = self.callback(*self._args)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
