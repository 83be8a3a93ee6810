"""
nbstatsd: fixtures for tests

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""
import selectors
import socket
import threading
import time
from types import TracebackType
from typing import Callable, Iterator, List, Optional, Type
from unittest import mock

import pytest

from nbstatsd import logutil
from nbstatsd.client import StatsClient
from nbstatsd.resolver import CallableAddressResolver
from nbstatsd.sender import UdpSender

logutil.configure_logging()


class UdpServer:
    def __init__(self, port: int = 0) -> None:
        self.port = port
        self.socket = socket.socket(family=socket.AF_INET, type=socket.SOCK_DGRAM)

    def __enter__(self) -> "UdpServer":
        self.socket.bind(("localhost", self.port))
        self.port = self.socket.getsockname()[1]
        return self

    def __exit__(self, exc_type: Type, exc_val: BaseException, exc_tb: TracebackType) -> None:
        self.socket.close()

    def has_message(self, timeout: float = 0.0) -> bool:
        selector = selectors.DefaultSelector()
        selector.register(self.socket, selectors.EVENT_READ)
        try:
            return len(selector.select(timeout=timeout)) > 0
        finally:
            selector.unregister(self.socket)

    def get_message(self, timeout: float = 5.0) -> str:
        self.socket.settimeout(timeout)
        return self.socket.recv(65535).decode()

    def get_lines(self, count: int, timeout: float = 5.0) -> List[str]:
        """Read datagrams until `count` metric lines have been received"""
        lines: List[str] = []
        while len(lines) < count:
            lines.extend(self.get_message(timeout).split("\n"))
        return lines


class FakeSocket:
    """Records datagrams instead of sending them"""

    def __init__(self, short_sends: int = 0, delay: float = 0.0, error: Optional[Exception] = None) -> None:
        self.datagrams: List[bytes] = []
        self.addresses: List[tuple] = []
        self.short_sends = short_sends
        self.delay = delay
        self.error = error
        self.closed = False
        self.lock = threading.Lock()

    def sendto(self, data: bytes, address: tuple) -> int:
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        with self.lock:
            self.datagrams.append(data)
            self.addresses.append(address)
            if self.short_sends:
                self.short_sends -= 1
                return len(data) - 1
        return len(data)

    def close(self) -> None:
        self.closed = True

    @property
    def lines(self) -> List[str]:
        with self.lock:
            return [line for data in self.datagrams for line in data.decode().split("\n")]

    def wait_for_datagrams(self, count: int, timeout: float = 5.0) -> List[bytes]:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self.lock:
                if len(self.datagrams) >= count:
                    return list(self.datagrams)
            time.sleep(0.01)
        raise AssertionError("Expected {} datagrams, got {}".format(count, len(self.datagrams)))


class RecordingErrorHandler:
    def __init__(self) -> None:
        self.errors: List[Exception] = []

    def handle(self, error: Exception) -> None:
        self.errors.append(error)


@pytest.fixture(scope="session", name="get_unused_port")
def fixture_get_unused_port() -> Callable[[], int]:
    def get_unused_port():
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("127.0.0.1", 0))
            return sock.getsockname()[1]

    return get_unused_port


@pytest.fixture(name="udp_server")
def fixture_udp_server() -> Iterator[UdpServer]:
    with UdpServer() as udp_server:
        yield udp_server


@pytest.fixture(name="fake_socket")
def fixture_fake_socket() -> FakeSocket:
    return FakeSocket()


@pytest.fixture(name="socket_factory")
def fixture_socket_factory() -> Type[FakeSocket]:
    return FakeSocket


@pytest.fixture(name="error_handler")
def fixture_error_handler() -> RecordingErrorHandler:
    return RecordingErrorHandler()


@pytest.fixture(name="make_sender")
def fixture_make_sender(error_handler: RecordingErrorHandler) -> Iterator[Callable[..., UdpSender]]:
    """Senders are created without starting them so that tests can queue
    messages first and get deterministic packing"""
    senders = []

    def make_sender(sock=None, **kwargs) -> UdpSender:
        kwargs.setdefault("error_handler", error_handler)
        kwargs.setdefault("poll_interval", 0.05)
        sender = UdpSender(
            CallableAddressResolver(lambda: ("127.0.0.1", 8125)),
            sock=sock if sock is not None else FakeSocket(),
            **kwargs,
        )
        senders.append(sender)
        return sender

    yield make_sender
    for sender in senders:
        sender.stop(timeout=1.0)


@pytest.fixture(name="queued_client")
def fixture_queued_client(error_handler: RecordingErrorHandler) -> Iterator[Callable[..., StatsClient]]:
    """Clients whose sender thread is never started, messages stay in the
    outbound queue for inspection"""
    clients = []

    def make_client(prefix="my.prefix", **kwargs) -> StatsClient:
        kwargs.setdefault("error_handler", error_handler)
        kwargs.setdefault("sock", FakeSocket())
        with mock.patch.object(UdpSender, "start"):
            client = StatsClient(prefix, address_resolver=lambda: ("127.0.0.1", 8125), **kwargs)
        clients.append(client)
        return client

    yield make_client
    for client in clients:
        client.stop()


def drain_queue(client: StatsClient) -> List[str]:
    messages = []
    while True:
        message = client.sender.queue.dequeue_nowait()
        if message is None:
            return messages
        messages.append(message)


@pytest.fixture(name="drain")
def fixture_drain() -> Callable[[StatsClient], List[str]]:
    return drain_queue
