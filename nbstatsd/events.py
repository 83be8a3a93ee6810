"""
nbstatsd - DogStatsD events and service checks

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import datetime
import enum
from dataclasses import dataclass
from typing import Optional, Union

from dateutil import parser as date_parser

from nbstatsd.common import StrEnum


@enum.unique
class Priority(StrEnum):
    low = "low"
    normal = "normal"


@enum.unique
class AlertType(StrEnum):
    error = "error"
    warning = "warning"
    info = "info"
    success = "success"


@enum.unique
class ServiceCheckStatus(enum.IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


def to_epoch_seconds(value: Union[None, int, float, str, datetime.datetime]) -> Optional[int]:
    """Accepts epoch seconds, a datetime or an ISO 8601 formatted string;
    naive datetimes are assumed to be in UTC"""
    if value is None:
        return None
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        return int(value.timestamp())
    return int(value)


@dataclass(frozen=True)
class Event:
    title: str
    text: str
    date: Union[None, int, float, str, datetime.datetime] = None
    hostname: Optional[str] = None
    aggregation_key: Optional[str] = None
    priority: Optional[Priority] = None
    source_type_name: Optional[str] = None
    alert_type: Optional[AlertType] = None

    def __post_init__(self):
        if not self.title:
            raise ValueError("event title must be set")
        if not self.text:
            raise ValueError("event text must be set")
        if self.priority is not None:
            object.__setattr__(self, "priority", Priority(self.priority))
        if self.alert_type is not None:
            object.__setattr__(self, "alert_type", AlertType(self.alert_type))
        # fail early on dates we could not render
        to_epoch_seconds(self.date)

    @property
    def timestamp(self) -> Optional[int]:
        return to_epoch_seconds(self.date)


@dataclass(frozen=True)
class ServiceCheck:
    """A service check run.  `check_run_id` identifies the run for the caller
    only, it is not part of the datagram."""

    name: str
    status: ServiceCheckStatus
    timestamp: Optional[int] = None
    hostname: Optional[str] = None
    message: Optional[str] = None
    tags: Union[None, dict, list] = None
    check_run_id: Optional[int] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("service check name must be set")
        object.__setattr__(self, "status", ServiceCheckStatus(self.status))

    @property
    def escaped_message(self) -> Optional[str]:
        if self.message is None:
            return None
        return self.message.replace("\n", "\\n").replace("m:", "m\\:")
