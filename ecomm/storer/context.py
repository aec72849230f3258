import threading
import time
from typing import Callable, List, Optional

from ecomm.storer.errors import DeadlineExceeded, OperationCancelled


class CallContext:
    """
    Cancellation and deadline handle passed to every storer operation.

    The storer checks it before each statement and before commit. Another
    thread may call ``cancel()`` at any time; callbacks registered with
    ``add_cancel_callback`` run at that moment, which is how a statement
    already running in the driver gets aborted.

    Args:
        timeout: Seconds until the deadline, or None for no deadline
    """

    def __init__(self, timeout: Optional[float] = None):
        self._deadline = None if timeout is None else time.monotonic() + timeout
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @classmethod
    def background(cls) -> "CallContext":
        """A context that is never cancelled and has no deadline."""
        return cls()

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def add_cancel_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancel, or right away if already cancelled."""
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_cancel_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, never negative."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def raise_if_done(self, op: str) -> None:
        if self.cancelled:
            raise OperationCancelled(op, "call was cancelled")
        if self.expired:
            raise DeadlineExceeded(op, "deadline exceeded")
