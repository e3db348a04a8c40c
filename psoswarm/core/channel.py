"""Closable message channel for communication between worker threads."""

from typing import Generic, Optional, Tuple, TypeVar
import queue
import threading
import time

from .errors import ChannelClosed, ChannelTimeout
from ..config.constants import CHANNEL_POLL_INTERVAL

T = TypeVar("T")


class Channel(Generic[T]):
    """
    FIFO channel between threads.

    Built on ``queue.Queue``. A bounded channel blocks senders while full.
    Once closed, senders fail with ChannelClosed and receivers drain the
    remaining items and then get ``(None, False)`` instead of blocking.
    """

    def __init__(self, maxsize: int = 0, name: str = "") -> None:
        self.name = name
        self._queue: "queue.Queue[T]" = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    def send(self, item: T, timeout: float | None = None) -> None:
        """
        Put an item on the channel, waiting for room if it is full.

        Args:
            item: Item to deliver
            timeout: Seconds to wait for room, or None to wait indefinitely

        Raises:
            ChannelClosed: The channel is or becomes closed
            ChannelTimeout: No room became available in time
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            if self._closed.is_set():
                raise ChannelClosed(f"send on closed channel {self.name!r}")
            try:
                self._queue.put(item, timeout=self._wait_for(deadline))
                return
            except queue.Full:
                if deadline is not None and time.monotonic() >= deadline:
                    raise ChannelTimeout(f"send on {self.name!r} timed out")

    def receive(self, timeout: float | None = None) -> Tuple[Optional[T], bool]:
        """
        Take the next item from the channel.

        Args:
            timeout: Seconds to wait for an item, or None to wait indefinitely

        Returns:
            ``(item, True)`` for a delivered item, ``(None, False)`` once the
            channel is closed and empty

        Raises:
            ChannelTimeout: Nothing arrived in time
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            try:
                return self._queue.get(timeout=self._wait_for(deadline)), True
            except queue.Empty:
                if self._closed.is_set() and self._queue.empty():
                    return None, False
                if deadline is not None and time.monotonic() >= deadline:
                    raise ChannelTimeout(f"receive on {self.name!r} timed out")

    def close(self) -> None:
        """Close the channel. Closing twice is a no-op."""
        self._closed.set()

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed.is_set()

    def __len__(self) -> int:
        return self._queue.qsize()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"Channel(name={self.name!r}, pending={len(self)}, {state})"

    @staticmethod
    def _wait_for(deadline: float | None) -> float:
        """Block in short slices so close() is noticed promptly."""
        if deadline is None:
            return CHANNEL_POLL_INTERVAL
        return max(0.0, min(CHANNEL_POLL_INTERVAL, deadline - time.monotonic()))
