"""
nbstatsd - exception classes

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""


class Error(Exception):
    """Generic nbstatsd exception"""


class InvalidConfigurationError(Error):
    """Invalid configuration"""


class ClientStartupError(Error):
    """StatsD client could not be started"""


class AddressResolutionError(Error, OSError):
    """StatsD host name could not be resolved"""


class PartialSendError(Error):
    """Datagram was only partially written to the socket"""

    def __init__(self, address, requested, sent):
        super().__init__(
            "Could not send entirely stat to host {}:{}. Only sent {} bytes out of {} bytes".format(
                address[0], address[1], sent, requested
            )
        )
        self.address = address
        self.requested = requested
        self.sent = sent


class QueueFullError(Error):
    """Outbound queue is full, message dropped"""


class ShutdownTimeoutError(Error):
    """Sender thread did not terminate in time"""
