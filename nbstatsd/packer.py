"""
nbstatsd - packing messages into datagrams

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
from nbstatsd.common import FlushPolicy

SEPARATOR = b"\n"


class PacketBuffer:
    """Newline separated complete messages, at most `capacity` bytes unless a
    single message alone is larger than that"""

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Packet capacity must be positive, got {!r}".format(capacity))
        self.capacity = capacity
        self._data = bytearray()

    def __len__(self):
        return len(self._data)

    def __bool__(self):
        return bool(self._data)

    @property
    def remaining(self) -> int:
        return max(self.capacity - len(self._data), 0)

    @property
    def is_full(self) -> bool:
        return len(self._data) >= self.capacity

    def fits(self, data: bytes) -> bool:
        needed = len(data) + (len(SEPARATOR) if self._data else 0)
        return needed <= self.remaining

    def append(self, data: bytes) -> None:
        if self._data:
            if not self.fits(data):
                raise ValueError("Message of {} bytes does not fit in packet".format(len(data)))
            self._data += SEPARATOR
        self._data += data

    def take(self) -> bytes:
        data = bytes(self._data)
        self._data.clear()
        return data


class PacketPacker:
    """Decides when the buffered messages have to go out as a datagram"""

    def __init__(self, capacity: int, flush_policy=FlushPolicy.eager):
        self.buffer = PacketBuffer(capacity)
        self.flush_policy = FlushPolicy(flush_policy)

    def must_flush_before(self, data: bytes) -> bool:
        return bool(self.buffer) and not self.buffer.fits(data)

    def add(self, data: bytes) -> None:
        self.buffer.append(data)

    def should_flush(self, more_pending: bool) -> bool:
        if not self.buffer:
            return False
        if self.buffer.is_full:
            return True
        if more_pending:
            return False
        if self.flush_policy == FlushPolicy.half_full:
            return len(self.buffer) > self.buffer.capacity // 2
        return True

    def take(self) -> bytes:
        return self.buffer.take()
