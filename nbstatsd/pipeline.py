"""
nbstatsd - pipelined metrics

Collects the metrics of one logical batch and hands them to the client as
few newline joined messages as possible.

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
from typing import List

DEFAULT_MTU = 512


def concatenate(messages: List[str], mtu: int, encoding="utf-8") -> List[str]:
    result = []
    chunk = []
    chunk_size = 0
    for message in messages:
        size = len(message.encode(encoding))
        if chunk and chunk_size + 1 + size > mtu:
            result.append("\n".join(chunk))
            chunk = []
            chunk_size = 0
        if chunk:
            chunk_size += 1
        chunk.append(message)
        chunk_size += size
    if chunk:
        result.append("\n".join(chunk))
    return result


class Pipeline:
    """Metrics are buffered until `flush`, after which the pipeline is closed
    and further calls are ignored.  Sample rates are only annotated, no
    sampling is done here.  Joined messages never exceed the client's packet
    size."""

    def __init__(self, client, mtu=DEFAULT_MTU):
        self.client = client
        if client.packet_size:
            mtu = min(mtu, client.packet_size)
        self.mtu = mtu
        self.messages: List[str] = []
        self.closed = False

    def _add(self, build, *args, **kwargs):
        if self.closed:
            return self
        try:
            messages = build(*args, **kwargs)
        except Exception as ex:  # pylint: disable=broad-except
            self.client.report_error(ex)
            return self
        if isinstance(messages, str):
            messages = [messages]
        self.messages.extend(messages)
        return self

    def count(self, aspect, delta, *, sample_rate=None, tags=None):
        return self._add(self.client.formatter.count, aspect, delta, sample_rate, tags)

    def increment(self, aspect, *, sample_rate=None, tags=None):
        return self.count(aspect, 1, sample_rate=sample_rate, tags=tags)

    def decrement(self, aspect, *, sample_rate=None, tags=None):
        return self.count(aspect, -1, sample_rate=sample_rate, tags=tags)

    def gauge(self, aspect, value, *, tags=None):
        return self._add(self.client.formatter.gauge, aspect, value, tags)

    def gauge_delta(self, aspect, delta, *, tags=None):
        return self._add(self.client.formatter.gauge_delta, aspect, delta, tags)

    def mark(self, aspect, *, tags=None):
        return self._add(self.client.formatter.mark, aspect, tags)

    def set(self, aspect, value, *, tags=None):
        return self._add(self.client.formatter.set, aspect, value, tags)

    def timing(self, aspect, value_ms, *, sample_rate=None, tags=None):
        return self._add(self.client.formatter.timing, aspect, value_ms, sample_rate, tags)

    def flush(self) -> None:
        if self.closed:
            return
        self.closed = True
        for message in concatenate(self.messages, self.mtu, self.client.formatter.encoding):
            self.client.send_message(message)
        self.messages = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.flush()
