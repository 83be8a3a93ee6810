"""
nbstatsd - address resolution tests

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import socket
from unittest import mock

import pytest

from nbstatsd.errors import AddressResolutionError
from nbstatsd.resolver import (
    CallableAddressResolver, StaticAddressResolver, VolatileAddressResolver, get_address_resolver, resolve_address
)


def addrinfo(ip, port):
    return [(socket.AF_INET, socket.SOCK_DGRAM, 17, "", (ip, port))]


def test_resolve_localhost():
    assert resolve_address("127.0.0.1", 8125) == ("127.0.0.1", 8125)


def test_resolution_failure():
    with mock.patch.object(socket, "getaddrinfo", side_effect=socket.gaierror("Name or service not known")):
        with pytest.raises(AddressResolutionError):
            resolve_address("statsd.invalid", 8125)


def test_static_resolves_once():
    with mock.patch.object(socket, "getaddrinfo", return_value=addrinfo("10.0.0.1", 8125)) as getaddrinfo:
        resolver = StaticAddressResolver("statsd", 8125)
        assert resolver.resolve() == ("10.0.0.1", 8125)
        assert resolver.resolve() == ("10.0.0.1", 8125)
    assert getaddrinfo.call_count == 1


def test_static_fails_on_construction():
    with mock.patch.object(socket, "getaddrinfo", side_effect=socket.gaierror("Name or service not known")):
        with pytest.raises(AddressResolutionError):
            StaticAddressResolver("statsd.invalid", 8125)


def test_volatile_follows_address_changes():
    results = [addrinfo("10.0.0.1", 8125), socket.gaierror("temporary failure"), addrinfo("10.0.0.2", 8125)]
    with mock.patch.object(socket, "getaddrinfo", side_effect=results):
        resolver = VolatileAddressResolver("statsd", 8125)
        assert resolver.resolve() == ("10.0.0.1", 8125)
        with pytest.raises(AddressResolutionError):
            resolver.resolve()
        assert resolver.resolve() == ("10.0.0.2", 8125)


def test_get_address_resolver():
    assert isinstance(get_address_resolver("127.0.0.1", 8125), StaticAddressResolver)
    assert isinstance(get_address_resolver("statsd", 8125, volatile=True), VolatileAddressResolver)
    resolver = get_address_resolver(address_resolver=lambda: ("10.1.1.1", 9125))
    assert isinstance(resolver, CallableAddressResolver)
    assert resolver.resolve() == ("10.1.1.1", 9125)
    existing = VolatileAddressResolver("statsd", 8125)
    assert get_address_resolver(address_resolver=existing) is existing
    with pytest.raises(AddressResolutionError):
        get_address_resolver(None, 8125)


def test_ipv6_family():
    with mock.patch.object(socket, "getaddrinfo", return_value=[(socket.AF_INET6, socket.SOCK_DGRAM, 17, "",
                                                                 ("::1", 8125, 0, 0))]) as getaddrinfo:
        resolver = StaticAddressResolver("localhost", 8125, family=socket.AF_INET6)
    assert resolver.family == socket.AF_INET6
    assert resolver.resolve() == ("::1", 8125)
    getaddrinfo.assert_called_once_with("localhost", 8125, socket.AF_INET6, socket.SOCK_DGRAM)
