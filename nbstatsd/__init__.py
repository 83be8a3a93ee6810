"""
nbstatsd

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
from .base import MetricsClient
from .client import StatsClient, create_client
from .common import FlushPolicy, MessageFormat
from .errors import ClientStartupError
from .events import AlertType, Event, Priority, ServiceCheck, ServiceCheckStatus
from .handlers import ErrorHandler, LoggingErrorHandler

__all__ = [
    "AlertType",
    "ClientStartupError",
    "ErrorHandler",
    "Event",
    "FlushPolicy",
    "LoggingErrorHandler",
    "MessageFormat",
    "MetricsClient",
    "Priority",
    "ServiceCheck",
    "ServiceCheckStatus",
    "StatsClient",
    "create_client",
]
