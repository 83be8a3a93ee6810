"""
nbstatsd: send a single metric, event or service check from the command line

Copyright (c) 2017 Ohmu Ltd
See LICENSE for details
"""
import argparse
import logging
import os
import sys

from nbstatsd import config, logutil, version
from nbstatsd.client import StatsClient
from nbstatsd.errors import ClientStartupError, InvalidConfigurationError
from nbstatsd.events import AlertType, Event, Priority, ServiceCheck, ServiceCheckStatus
from nbstatsd.handlers import LoggingErrorHandler


def parse_number(value):
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        raise argparse.ArgumentTypeError("{!r} is not a number".format(value))


def parse_status(value):
    if value.isdigit():
        try:
            return ServiceCheckStatus(int(value))
        except ValueError:
            pass
    else:
        try:
            return ServiceCheckStatus[value.upper()]
        except KeyError:
            pass
    raise argparse.ArgumentTypeError("{!r} is not a valid service check status".format(value))


class StatsSender:
    def __init__(self):
        self.log = logging.getLogger(self.__class__.__name__)
        self.config = None

    def create_parser(self):
        parser = argparse.ArgumentParser()
        parser.add_argument("--version", action="version", help="show program version", version=version.__version__)
        parser.add_argument("--config", help="nbstatsd config file", default=os.environ.get("NBSTATSD_CONFIG"))
        parser.add_argument("--host", help="StatsD host")
        parser.add_argument("--port", help="StatsD port", type=int)
        parser.add_argument("--prefix", help="metric name prefix")
        parser.add_argument("--tag", help="tag as key:value or a bare tag, can be repeated", action="append", default=[])

        commands = parser.add_subparsers(dest="command")

        for name in ["count", "timing", "histogram"]:
            cmd = commands.add_parser(name, help="send a {} value".format(name))
            cmd.add_argument("aspect", help="metric name")
            cmd.add_argument("value", type=parse_number)
            cmd.add_argument("--sample-rate", type=float)

        cmd = commands.add_parser("gauge", help="send a gauge value")
        cmd.add_argument("aspect", help="metric name")
        cmd.add_argument("value", type=parse_number)
        cmd.add_argument("--delta", help="change the gauge by value", action="store_true", default=False)

        cmd = commands.add_parser("set", help="send a set value")
        cmd.add_argument("aspect", help="metric name")
        cmd.add_argument("value")

        cmd = commands.add_parser("event", help="send an event")
        cmd.add_argument("title")
        cmd.add_argument("text")
        cmd.add_argument("--date", help="event time as ISO 8601 timestamp")
        cmd.add_argument("--hostname")
        cmd.add_argument("--aggregation-key")
        cmd.add_argument("--priority", choices=[p.value for p in Priority])
        cmd.add_argument("--source-type-name")
        cmd.add_argument("--alert-type", choices=[a.value for a in AlertType])

        cmd = commands.add_parser("service-check", help="send a service check run")
        cmd.add_argument("name")
        cmd.add_argument("status", type=parse_status, help="OK, WARNING, CRITICAL, UNKNOWN or 0-3")
        cmd.add_argument("--timestamp", type=int)
        cmd.add_argument("--hostname")
        cmd.add_argument("--message")
        return parser

    def set_config(self, args):
        if args.config:
            settings = config.read_json_config_file(args.config).model_dump()
        else:
            settings = {}
        for key in ["host", "port", "prefix"]:
            if getattr(args, key) is not None:
                settings[key] = getattr(args, key)
        self.config = config.get_config(settings)
        if not self.config.enabled:
            raise InvalidConfigurationError("StatsD host and port must be set")

    def emit(self, client, args):
        tags = args.tag or None
        if args.command == "count":
            client.count(args.aspect, args.value, sample_rate=args.sample_rate, tags=tags)
        elif args.command == "timing":
            client.timing(args.aspect, args.value, sample_rate=args.sample_rate, tags=tags)
        elif args.command == "histogram":
            client.histogram(args.aspect, args.value, sample_rate=args.sample_rate, tags=tags)
        elif args.command == "gauge":
            if args.delta:
                client.gauge_delta(args.aspect, args.value, tags=tags)
            else:
                client.gauge(args.aspect, args.value, tags=tags)
        elif args.command == "set":
            client.set(args.aspect, args.value, tags=tags)
        elif args.command == "event":
            event = Event(
                title=args.title,
                text=args.text,
                date=args.date,
                hostname=args.hostname,
                aggregation_key=args.aggregation_key,
                priority=args.priority,
                source_type_name=args.source_type_name,
                alert_type=args.alert_type,
            )
            client.event(event, tags=tags)
        elif args.command == "service-check":
            check = ServiceCheck(
                name=args.name,
                status=args.status,
                timestamp=args.timestamp,
                hostname=args.hostname,
                message=args.message,
                tags=tags,
            )
            client.service_check(check)

    def run(self, args=None):
        parser = self.create_parser()
        args = parser.parse_args(args)

        if not args.command:
            parser.print_help()
            return 1

        self.set_config(args)
        client = StatsClient.from_config(self.config, error_handler=LoggingErrorHandler(self.log))
        try:
            self.emit(client, args)
        finally:
            client.stop()
        self.log.info("Sent %s to %s:%s", args.command, self.config.host, self.config.port)
        return 0


def main():
    logutil.configure_logging(level=logging.INFO)
    tool = StatsSender()
    try:
        return tool.run()
    except KeyboardInterrupt:
        print("*** interrupted by keyboard ***")
        return 1
    except (ClientStartupError, InvalidConfigurationError, ValueError) as ex:
        tool.log.error("FATAL: %s: %s", ex.__class__.__name__, ex)
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
