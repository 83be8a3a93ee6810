"""
nbstatsd - UDP sender thread

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import logging
import socket
from contextlib import suppress
from queue import Full
from threading import Event, Thread

from nbstatsd.common import FlushPolicy, QuitEvent
from nbstatsd.config import (DEFAULT_PACKET_SIZE, DEFAULT_POLL_INTERVAL, DEFAULT_SHUTDOWN_TIMEOUT)
from nbstatsd.errors import (ClientStartupError, PartialSendError, QueueFullError, ShutdownTimeoutError)
from nbstatsd.handlers import get_error_handler
from nbstatsd.outbound import OutboundQueue
from nbstatsd.packer import PacketPacker


class UdpSender(Thread):
    """Owns the datagram socket and drains the outbound queue into packets.

    The socket and the packet buffer are only ever touched by this thread,
    `send` is the only method meant to be called from other threads."""

    def __init__(
        self,
        address_resolver,
        *,
        error_handler=None,
        packet_size=DEFAULT_PACKET_SIZE,
        encoding="utf-8",
        poll_interval=DEFAULT_POLL_INTERVAL,
        flush_policy=FlushPolicy.eager,
        max_queue_size=0,
        sock=None,
    ):
        super().__init__(name="StatsD-sender", daemon=True)
        self.log = logging.getLogger("UdpSender")
        self.address_resolver = address_resolver
        self.error_handler = get_error_handler(error_handler)
        self.encoding = encoding
        self.poll_interval = poll_interval
        self.queue = OutboundQueue(maxsize=max_queue_size)
        self.packer = PacketPacker(packet_size, flush_policy)
        if sock is None:
            try:
                sock = socket.socket(address_resolver.family, socket.SOCK_DGRAM)
            except OSError as ex:
                raise ClientStartupError("Failed to start StatsD client: {}".format(ex)) from ex
        self.socket = sock
        self.running = True
        self._abort = Event()
        self._stopped = False
        self.log.debug("UdpSender initialized")

    def send(self, message: str) -> bool:
        return self.queue.enqueue(message)

    def report(self, error: Exception) -> None:
        try:
            self.error_handler.handle(error)
        except Exception:  # pylint: disable=broad-except
            self.log.exception("Error handler %r failed to handle %r", self.error_handler, error)

    def run(self):
        self.log.debug("Starting StatsD sender")
        while not self._abort.is_set():
            message = self.queue.dequeue(timeout=self.poll_interval)
            self._report_dropped()
            if message is QuitEvent:
                break
            if message is None:
                # quiet period, don't hold on to what we have
                self.flush()
                if not self.running:
                    break
                continue
            self.process(message)
        if not self._abort.is_set():
            self.flush()
        self.log.debug("Quitting StatsD sender")

    def _report_dropped(self):
        dropped = self.queue.take_dropped()
        if dropped:
            self.report(QueueFullError("Outbound queue full, dropped {} messages".format(dropped)))

    def process(self, message: str) -> None:
        try:
            data = message.encode(self.encoding)
        except (AttributeError, LookupError, UnicodeError) as ex:
            self.report(ex)
            return
        if self.packer.must_flush_before(data):
            self.flush()
        self.packer.add(data)
        if self.packer.should_flush(more_pending=self.queue.peek() is not None):
            self.flush()

    def flush(self) -> None:
        if not self.packer.buffer:
            return
        data = self.packer.take()
        try:
            address = self.address_resolver.resolve()
            sent = self.socket.sendto(data, address)
        except Exception as ex:  # pylint: disable=broad-except
            self.report(ex)
            return
        if sent != len(data):
            self.report(PartialSendError(address, len(data), sent))

    def stop(self, timeout=DEFAULT_SHUTDOWN_TIMEOUT) -> None:
        if self._stopped:
            return
        self._stopped = True
        try:
            self.running = False
            self.queue.close()
            # if the queue is full the sender notices `running` once it has drained it
            with suppress(Full):
                self.queue.put_nowait(QuitEvent)
            if self.is_alive():
                self.join(timeout)
            if self.is_alive():
                self.report(
                    ShutdownTimeoutError(
                        "StatsD sender did not finish in {} seconds, dropping {} queued messages".format(
                            timeout, self.queue.qsize()
                        )
                    )
                )
        except Exception as ex:  # pylint: disable=broad-except
            self.report(ex)
        finally:
            self._abort.set()
            try:
                self.socket.close()
            except OSError as ex:
                self.report(ex)
