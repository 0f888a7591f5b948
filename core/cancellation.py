# core/cancellation.py
import threading
import time
from typing import Optional

from core.errors import RequestCancelled


class CancelToken:
    """
    Cancellation flag handed to every Identity Backend call.

    Trips either when cancel() is called or once the optional deadline
    (monotonic clock) has passed.
    """

    def __init__(self, deadline: Optional[float] = None):
        self._event = threading.Event()
        self.deadline = deadline
        self.reason = None

    @classmethod
    def with_timeout(cls, seconds: Optional[float]):
        if not seconds or seconds <= 0:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: str = "cancelled"):
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.reason = self.reason or "deadline exceeded"
            return True
        return False

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_cancelled(self):
        if self.cancelled:
            raise RequestCancelled(f"Identity request cancelled: {self.reason}")
