"""
Tk Dispatcher - Runs scheduler callbacks on the Tkinter event loop
"""
from typing import Any, Callable

from ..core.dispatcher import Dispatcher


# How often the cross-thread inbox is drained, in milliseconds.
INBOX_POLL_MS = 50


class TkDispatcher(Dispatcher):
    """
    Dispatcher backed by Tk's after()/after_cancel().

    Tk is not thread safe, so worker threads only ever touch the inbox
    queue, which is pumped from the event loop.
    """

    def __init__(self, root):
        super().__init__()
        self._root = root
        self._pump_id = None

    def post(self, callback: Callable[[], None], delay: float = 0.0) -> Any:
        return self._root.after(max(0, int(delay * 1000)), callback)

    def cancel(self, token: Any) -> None:
        if token is None:
            return
        self._root.after_cancel(token)

    def start(self) -> None:
        """Begin pumping the inbox"""
        if self._pump_id is None:
            self._pump()

    def stop(self) -> None:
        if self._pump_id is not None:
            self._root.after_cancel(self._pump_id)
            self._pump_id = None

    def _pump(self) -> None:
        self.drain_inbox()
        self._pump_id = self._root.after(INBOX_POLL_MS, self._pump)
