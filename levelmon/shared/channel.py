"""Closable FIFO channel used to hand data between threads."""

import threading
from collections import deque
from typing import Deque, Generic, Optional, TypeVar

T = TypeVar("T")


class ChannelDisconnected(Exception):
    """Raised when the other side of a channel has closed it."""

    pass


class Channel(Generic[T]):
    """Unbounded single-producer/single-consumer queue that can be closed.

    Senders never block. Receivers can block until an item arrives or poll
    without blocking. Once closed, sends fail and receives fail as soon as
    the already queued items are drained.
    """

    def __init__(self, name: str = "channel"):
        self.name = name
        self._items: Deque[T] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def send(self, item: T) -> None:
        """Append an item to the channel.

        Raises:
            ChannelDisconnected: If the channel has been closed.
        """
        with self._cond:
            if self._closed:
                raise ChannelDisconnected(f"{self.name} is closed")
            self._items.append(item)
            self._cond.notify()

    def try_recv(self) -> Optional[T]:
        """Return the next item, or None if nothing is queued.

        Raises:
            ChannelDisconnected: If the channel is empty and closed.
        """
        with self._cond:
            if self._items:
                return self._items.popleft()
            if self._closed:
                raise ChannelDisconnected(f"{self.name} is closed")
            return None

    def recv(self) -> T:
        """Block until an item is available and return it.

        Raises:
            ChannelDisconnected: If the channel is empty and closed.
        """
        with self._cond:
            self._cond.wait_for(lambda: self._items or self._closed)
            if self._items:
                return self._items.popleft()
            raise ChannelDisconnected(f"{self.name} is closed")

    def close(self) -> None:
        """Close the channel and wake any blocked receiver."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)
