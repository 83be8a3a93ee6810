"""
Non-blocking StatsD client

Metric calls only format a message and put it in a queue, a background thread
packs queued messages into datagrams and sends them.  From the point of view
of the application the calls never block and never raise; anything going
wrong after construction is passed to the error handler.

Supports the DogStatsD extensions (tags, histograms, sets, events, service
checks) and telegraf's 'key=value' tags:

  http://docs.datadoghq.com/guides/dogstatsd/#datagram-format
  https://github.com/influxdata/telegraf/tree/master/plugins/inputs/statsd

"""
import logging
import random
import socket

from nbstatsd.base import MetricsClient
from nbstatsd.common import FlushPolicy, MessageFormat
from nbstatsd.config import (
    DEFAULT_HOST, DEFAULT_PACKET_SIZE, DEFAULT_POLL_INTERVAL, DEFAULT_PORT, DEFAULT_SHUTDOWN_TIMEOUT, get_config
)
from nbstatsd.errors import AddressResolutionError, ClientStartupError
from nbstatsd.formatter import MessageFormatter
from nbstatsd.handlers import get_error_handler
from nbstatsd.resolver import get_address_resolver
from nbstatsd.sender import UdpSender


class StatsClient(MetricsClient):
    def __init__(
        self,
        prefix="",
        host=DEFAULT_HOST,
        port=DEFAULT_PORT,
        *,
        constant_tags=None,
        error_handler=None,
        address_resolver=None,
        volatile_address=False,
        family=socket.AF_INET,
        encoding="utf-8",
        packet_size=DEFAULT_PACKET_SIZE,
        message_format=MessageFormat.datadog,
        poll_interval=DEFAULT_POLL_INTERVAL,
        shutdown_timeout=DEFAULT_SHUTDOWN_TIMEOUT,
        flush_policy=FlushPolicy.eager,
        max_queue_size=0,
        sock=None,
    ):
        super().__init__()
        self.log = logging.getLogger("StatsClient")
        self.error_handler = get_error_handler(error_handler)
        self.formatter = MessageFormatter(prefix, constant_tags, message_format, encoding)
        self.shutdown_timeout = shutdown_timeout
        self.packet_size = packet_size
        try:
            resolver = get_address_resolver(
                host, port, address_resolver=address_resolver, volatile=volatile_address, family=family
            )
        except AddressResolutionError as ex:
            raise ClientStartupError("Failed to lookup StatsD host {!r}".format(host)) from ex
        self.sender = UdpSender(
            resolver,
            error_handler=self.error_handler,
            packet_size=packet_size,
            encoding=encoding,
            poll_interval=poll_interval,
            flush_policy=flush_policy,
            max_queue_size=max_queue_size,
            sock=sock,
        )
        self.sender.start()
        self.log.debug("StatsClient initialized, sending to %r", resolver)

    @classmethod
    def from_config(cls, config, **kwargs):
        config = get_config(config)
        return cls(
            config.prefix,
            config.host,
            config.port,
            constant_tags=config.tags,
            volatile_address=config.volatile_address,
            encoding=config.encoding,
            packet_size=config.packet_size,
            message_format=config.message_format,
            poll_interval=config.poll_interval,
            shutdown_timeout=config.shutdown_timeout,
            flush_policy=config.flush_policy,
            max_queue_size=config.max_queue_size,
            **kwargs,
        )

    def send_message(self, message):
        self.sender.send(message)

    def report_error(self, error):
        self.sender.report(error)

    def _send(self, build, *args, sample_rate=None):
        try:
            if sample_rate is not None and sample_rate < 1 and random.random() >= sample_rate:
                return
            messages = build(*args)
        except Exception as ex:  # pylint: disable=broad-except
            self.report_error(ex)
            return
        if isinstance(messages, str):
            messages = [messages]
        for message in messages:
            self.sender.send(message)

    def count(self, aspect, delta, *, sample_rate=None, tags=None):
        self._send(self.formatter.count, aspect, delta, sample_rate, tags, sample_rate=sample_rate)

    def gauge(self, aspect, value, *, tags=None):
        self._send(self.formatter.gauge, aspect, value, tags)

    def gauge_delta(self, aspect, delta, *, tags=None):
        self._send(self.formatter.gauge_delta, aspect, delta, tags)

    def timing(self, aspect, value_ms, *, sample_rate=None, tags=None):
        self._send(self.formatter.timing, aspect, value_ms, sample_rate, tags, sample_rate=sample_rate)

    def histogram(self, aspect, value, *, sample_rate=None, tags=None):
        self._send(self.formatter.histogram, aspect, value, sample_rate, tags, sample_rate=sample_rate)

    def set(self, aspect, value, *, tags=None):
        self._send(self.formatter.set, aspect, value, tags)

    def mark(self, aspect, *, tags=None):
        self._send(self.formatter.mark, aspect, tags)

    def event(self, event, *, tags=None):
        self._send(self.formatter.event, event, tags)

    def service_check(self, check):
        self._send(self.formatter.service_check, check)

    def stop(self):
        self.sender.stop(self.shutdown_timeout)


def create_client(config=None, **kwargs) -> MetricsClient:
    """Return a StatsClient for the given configuration or a no-op client
    when host or port is not set"""
    config = get_config(config)
    if not config.enabled:
        return MetricsClient(config.model_dump())
    return StatsClient.from_config(config, **kwargs)
