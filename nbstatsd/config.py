"""
nbstatsd - configuration validation

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import json
from typing import Annotated, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from nbstatsd.common import FlushPolicy, MessageFormat
from nbstatsd.errors import InvalidConfigurationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8125
DEFAULT_PACKET_SIZE = 1500
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_SHUTDOWN_TIMEOUT = 30.0

Tags = Union[Dict[str, Optional[Union[int, str]]], List[str]]


class StatsdConfig(BaseModel):
    host: Optional[str] = DEFAULT_HOST
    port: Optional[Annotated[int, Field(ge=0, le=65535)]] = DEFAULT_PORT
    prefix: str = ""
    tags: Tags = {}
    message_format: MessageFormat = MessageFormat.datadog
    encoding: str = "utf-8"
    packet_size: int = Field(DEFAULT_PACKET_SIZE, gt=0, le=65507)
    poll_interval: float = Field(DEFAULT_POLL_INTERVAL, gt=0)
    shutdown_timeout: float = Field(DEFAULT_SHUTDOWN_TIMEOUT, ge=0)
    flush_policy: FlushPolicy = FlushPolicy.eager
    volatile_address: bool = False
    max_queue_size: int = Field(0, ge=0)

    @property
    def enabled(self) -> bool:
        # stats sending is disabled when either part of the address is missing
        return self.host is not None and self.port is not None


def get_config(config: Union[None, dict, StatsdConfig]) -> StatsdConfig:
    if isinstance(config, StatsdConfig):
        return config
    try:
        return StatsdConfig.model_validate(config or {})
    except ValidationError as ex:
        raise InvalidConfigurationError("Invalid StatsD configuration: {}".format(ex))


def read_json_config_file(filename) -> StatsdConfig:
    try:
        with open(filename, "r") as fp:
            config = json.load(fp)
    except FileNotFoundError:
        raise InvalidConfigurationError("Configuration file {!r} does not exist".format(filename))
    except ValueError as ex:
        raise InvalidConfigurationError("Configuration file {!r} does not contain valid JSON: {}".format(filename, str(ex)))
    except OSError as ex:
        raise InvalidConfigurationError(
            "Configuration file {!r} can't be opened: {}".format(filename, ex.__class__.__name__)
        )

    if not isinstance(config, dict):
        raise InvalidConfigurationError("Configuration file {!r} must contain a JSON object".format(filename))

    # application configuration files keep the client settings under "statsd"
    if isinstance(config.get("statsd"), dict):
        config = config["statsd"]

    return get_config(config)
