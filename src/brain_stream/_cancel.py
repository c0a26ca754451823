from __future__ import annotations

import threading


class CancelToken:
    """
    Cooperative cancellation flag shared between a stream reader and its owner.

    The reader checks it before every read and before every dispatch; setting it
    from another thread or task stops the stream at the next boundary.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"
