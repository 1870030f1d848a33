"""
Dispatcher - Single-threaded callback scheduling with a thread-safe inbox
"""
import queue
from abc import ABC, abstractmethod
from typing import Any, Callable


class Dispatcher(ABC):
    """
    The one execution context that owns all render and poll state.

    Timers are posted and cancelled only from the dispatch thread. Worker
    threads hand results back through post_threadsafe(); the callbacks run
    on the dispatch thread when the inbox is drained.
    """

    def __init__(self):
        self._inbox: "queue.Queue[tuple]" = queue.Queue()

    @abstractmethod
    def post(self, callback: Callable[[], None], delay: float = 0.0) -> Any:
        """
        Run callback on the dispatch thread after delay seconds.

        Returns:
            Token accepted by cancel()
        """

    @abstractmethod
    def cancel(self, token: Any) -> None:
        """Cancel a pending callback. Unknown or spent tokens are ignored."""

    def post_threadsafe(self, callback: Callable[..., None], *args) -> None:
        """Queue a callback from any thread"""
        self._inbox.put((callback, args))

    def drain_inbox(self) -> int:
        """
        Run every queued cross-thread callback.

        Returns:
            Number of callbacks run
        """
        handled = 0
        while True:
            try:
                callback, args = self._inbox.get_nowait()
            except queue.Empty:
                return handled
            callback(*args)
            handled += 1
