"""
nbstatsd - StatsD server address resolution

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import logging
import socket
from typing import Callable, Tuple

from nbstatsd.errors import AddressResolutionError

Address = Tuple[str, int]

LOG = logging.getLogger(__name__)


def resolve_address(host: str, port: int, family=socket.AF_INET) -> Address:
    try:
        addresses = socket.getaddrinfo(host, port, family, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as ex:
        raise AddressResolutionError("Failed to lookup StatsD host {!r}: {}".format(host, ex)) from ex
    if not addresses:
        raise AddressResolutionError("Failed to lookup StatsD host {!r}: no addresses".format(host))
    sockaddr = addresses[0][4]
    return sockaddr[0], sockaddr[1]


class AddressResolver:
    family = socket.AF_INET

    def resolve(self) -> Address:
        raise NotImplementedError


class VolatileAddressResolver(AddressResolver):
    """Looks the host up on every send so that address changes behind a
    stable host name are picked up"""

    def __init__(self, host: str, port: int, family=socket.AF_INET):
        self.host = host
        self.port = port
        self.family = family

    def resolve(self) -> Address:
        return resolve_address(self.host, self.port, self.family)

    def __repr__(self):
        return "{}({!r}, {!r})".format(self.__class__.__name__, self.host, self.port)


class StaticAddressResolver(VolatileAddressResolver):
    """Looks the host up once, raises AddressResolutionError right away if
    that fails"""

    def __init__(self, host: str, port: int, family=socket.AF_INET):
        super().__init__(host, port, family)
        self.address = super().resolve()
        LOG.debug("Resolved StatsD host %r to %r", host, self.address)

    def resolve(self) -> Address:
        return self.address


class CallableAddressResolver(AddressResolver):
    def __init__(self, lookup: Callable[[], Address], family=socket.AF_INET):
        self.lookup = lookup
        self.family = family

    def resolve(self) -> Address:
        return self.lookup()


def get_address_resolver(host=None, port=None, *, address_resolver=None, volatile=False, family=socket.AF_INET):
    if address_resolver is not None:
        if isinstance(address_resolver, AddressResolver):
            return address_resolver
        return CallableAddressResolver(address_resolver, family)
    if host is None or port is None:
        raise AddressResolutionError("StatsD host and port must be set, got {!r}:{!r}".format(host, port))
    if volatile:
        return VolatileAddressResolver(host, port, family)
    return StaticAddressResolver(host, port, family)
