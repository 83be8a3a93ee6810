"""
nbstatsd - configuration tests

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import json

import pytest

from nbstatsd.common import FlushPolicy, MessageFormat
from nbstatsd.config import StatsdConfig, get_config, read_json_config_file
from nbstatsd.errors import InvalidConfigurationError


def test_defaults():
    config = get_config(None)
    assert config.host == "127.0.0.1"
    assert config.port == 8125
    assert config.prefix == ""
    assert config.packet_size == 1500
    assert config.message_format is MessageFormat.datadog
    assert config.flush_policy is FlushPolicy.eager
    assert not config.volatile_address
    assert config.enabled


def test_values_are_validated():
    config = get_config({"message_format": "telegraf", "flush_policy": "half_full", "tags": ["env:dev"]})
    assert config.message_format is MessageFormat.telegraf
    assert config.flush_policy is FlushPolicy.half_full
    assert config.tags == ["env:dev"]
    existing = StatsdConfig(prefix="x")
    assert get_config(existing) is existing


@pytest.mark.parametrize(
    "settings", [
        {"port": 70000},
        {"port": "not a port"},
        {"packet_size": 0},
        {"poll_interval": 0},
        {"message_format": "graphite"},
        {"flush_policy": "never"},
    ]
)
def test_invalid_values(settings):
    with pytest.raises(InvalidConfigurationError):
        get_config(settings)


@pytest.mark.parametrize("settings", [{"host": None}, {"port": None}])
def test_disabled(settings):
    assert not get_config(settings).enabled


def test_read_json_config_file(tmp_path):
    config_path = tmp_path / "nbstatsd.json"
    config_path.write_text(json.dumps({"host": "statsd", "port": 9125, "prefix": "app"}))
    config = read_json_config_file(str(config_path))
    assert (config.host, config.port, config.prefix) == ("statsd", 9125, "app")


def test_read_nested_config_file(tmp_path):
    config_path = tmp_path / "service.json"
    config_path.write_text(json.dumps({"backup_sites": {}, "statsd": {"port": 9125, "format": "ignored"}}))
    config = read_json_config_file(str(config_path))
    assert config.port == 9125
    assert config.host == "127.0.0.1"


def test_read_bad_config_files(tmp_path):
    with pytest.raises(InvalidConfigurationError, match="does not exist"):
        read_json_config_file(str(tmp_path / "missing.json"))

    config_path = tmp_path / "broken.json"
    config_path.write_text("{not json")
    with pytest.raises(InvalidConfigurationError, match="valid JSON"):
        read_json_config_file(str(config_path))

    config_path.write_text("[1, 2]")
    with pytest.raises(InvalidConfigurationError, match="JSON object"):
        read_json_config_file(str(config_path))
