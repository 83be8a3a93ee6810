"""
nbstatsd - outbound message queue

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
from queue import Empty, Full, Queue
from typing import Optional


class OutboundQueue(Queue):
    """FIFO of formatted messages shared by any number of producer threads
    and the single sender thread.  Enqueueing never blocks or raises: when the
    queue is bounded and full the message is dropped and counted, once closed
    new messages are silently ignored."""

    def __init__(self, maxsize=0):
        super().__init__(maxsize=maxsize)
        self.closed = False
        self._dropped = 0

    def enqueue(self, message: str) -> bool:
        if self.closed:
            return False
        try:
            self.put_nowait(message)
        except Full:
            self._count_drop()
            return False
        return True

    def _count_drop(self):
        with self.mutex:
            self._dropped += 1

    def take_dropped(self) -> int:
        """Return the number of messages dropped since the last call"""
        with self.mutex:
            dropped, self._dropped = self._dropped, 0
        return dropped

    def dequeue(self, timeout: float) -> Optional[str]:
        try:
            return self.get(timeout=timeout)
        except Empty:
            return None

    def dequeue_nowait(self) -> Optional[str]:
        """Non-waiting dequeue for callers other than the sender thread, which
        only uses `dequeue`"""
        try:
            return self.get_nowait()
        except Empty:
            return None

    def peek(self) -> Optional[str]:
        with self.mutex:
            return self.queue[0] if self.queue else None

    def close(self) -> None:
        self.closed = True
