"""
StatsD message formatting

Supports the DogStatsD datagram format:

  metric.name:value|type|@sample_rate|#tag1:value,tag2
  http://docs.datadoghq.com/guides/dogstatsd/#datagram-format

and telegraf's statsd protocol extension for 'key=value' tags:

  https://github.com/influxdata/telegraf/tree/master/plugins/inputs/statsd

"""
from collections.abc import Mapping
from typing import Dict, List, Optional

from nbstatsd.common import MessageFormat, format_number


def normalize_tags(tags) -> Dict[str, Optional[str]]:
    """Turn a tag mapping or an iterable of 'key:value' / bare tag strings
    into an ordered dict of tag name to value (None for bare tags)"""
    if not tags:
        return {}
    if isinstance(tags, Mapping):
        return {str(tag): None if value is None else str(value) for tag, value in tags.items()}
    if isinstance(tags, str):
        tags = [tags]
    result = {}
    for tag in tags:
        name, separator, value = tag.partition(":")
        result[name] = value if separator else None
    return result


def escape_newlines(text: str) -> str:
    return text.replace("\n", "\\n")


class MessageFormatter:
    def __init__(self, prefix="", constant_tags=None, message_format=MessageFormat.datadog, encoding="utf-8"):
        self.prefix = "{}.".format(prefix) if prefix else ""
        self.constant_tags = normalize_tags(constant_tags)
        self.message_format = MessageFormat(message_format)
        self.encoding = encoding

    def _merge_tags(self, tags) -> Dict[str, Optional[str]]:
        send_tags = self.constant_tags.copy()
        send_tags.update(normalize_tags(tags))
        return send_tags

    @staticmethod
    def _datadog_tags(send_tags) -> str:
        if not send_tags:
            return ""
        return "|#" + ",".join(tag if value is None else "{}:{}".format(tag, value) for tag, value in send_tags.items())

    @staticmethod
    def _telegraf_tags(send_tags) -> str:
        return "".join(",{}".format(tag) if value is None else ",{}={}".format(tag, value) for tag, value in send_tags.items())

    def metric(self, aspect: str, value, metric_type: str, sample_rate: Optional[float] = None, tags=None) -> str:
        if not isinstance(value, str):
            value = format_number(value)
        send_tags = self._merge_tags(tags)

        # telegraf format: "user.logins,service=payroll,region=us-west:1|c"
        # datadog format: "user.logins:1|c|#service:payroll,region:us-west"
        name = self.prefix + aspect
        if self.message_format == MessageFormat.telegraf:
            name += self._telegraf_tags(send_tags)
        parts = [name, ":", value, "|", metric_type]
        if sample_rate is not None and sample_rate != 1:
            parts.append("|@" + format_number(sample_rate))
        if self.message_format == MessageFormat.datadog:
            parts.append(self._datadog_tags(send_tags))
        return "".join(parts)

    def count(self, aspect: str, delta: int, sample_rate: Optional[float] = None, tags=None) -> str:
        return self.metric(aspect, delta, "c", sample_rate, tags)

    def gauge(self, aspect: str, value, tags=None) -> List[str]:
        """Absolute gauge values are signed deltas on the wire, so a negative
        value needs the gauge to be reset to zero first"""
        messages = []
        if not isinstance(value, str) and value < 0:
            messages.append(self.metric(aspect, 0, "g", tags=tags))
        messages.append(self.metric(aspect, value, "g", tags=tags))
        return messages

    def gauge_delta(self, aspect: str, delta, tags=None) -> str:
        value = format_number(delta)
        if not value.startswith("-") and value != "NaN":
            value = "+" + value
        return self.metric(aspect, value, "g", tags=tags)

    def timing(self, aspect: str, value_ms, sample_rate: Optional[float] = None, tags=None) -> str:
        return self.metric(aspect, value_ms, "ms", sample_rate, tags)

    def histogram(self, aspect: str, value, sample_rate: Optional[float] = None, tags=None) -> str:
        return self.metric(aspect, value, "h", sample_rate, tags)

    def set(self, aspect: str, value, tags=None) -> str:
        # dogstatsd accepts string values for sets, not just numbers
        return self.metric(aspect, str(value), "s", tags=tags)

    def mark(self, aspect: str, tags=None) -> str:
        # metricsd meter, a bare name counts as one occurrence
        send_tags = self._merge_tags(tags)
        name = self.prefix + aspect
        if self.message_format == MessageFormat.telegraf:
            return name + self._telegraf_tags(send_tags)
        return name + self._datadog_tags(send_tags)

    def event(self, event, tags=None) -> str:
        # see http://docs.datadoghq.com/guides/dogstatsd/#events-1
        title = escape_newlines(self.prefix + event.title)
        text = escape_newlines(event.text)
        parts = [
            "_e{{{},{}}}:{}|{}".format(
                len(title.encode(self.encoding)), len(text.encode(self.encoding)), title, text
            )
        ]
        timestamp = event.timestamp
        if timestamp is not None:
            parts.append("|d:{}".format(timestamp))
        if event.hostname is not None:
            parts.append("|h:{}".format(event.hostname))
        if event.aggregation_key is not None:
            parts.append("|k:{}".format(event.aggregation_key))
        if event.priority is not None:
            parts.append("|p:{}".format(event.priority))
        if event.source_type_name is not None:
            parts.append("|s:{}".format(event.source_type_name))
        if event.alert_type is not None:
            parts.append("|t:{}".format(event.alert_type))
        parts.append(self._datadog_tags(self._merge_tags(tags)))
        return "".join(parts)

    def service_check(self, check) -> str:
        # see http://docs.datadoghq.com/guides/dogstatsd/#service-checks
        parts = ["_sc|{}|{}".format(check.name, int(check.status))]
        if check.timestamp:
            parts.append("|d:{}".format(check.timestamp))
        if check.hostname is not None:
            parts.append("|h:{}".format(check.hostname))
        parts.append(self._datadog_tags(self._merge_tags(check.tags)))
        if check.message is not None:
            parts.append("|m:{}".format(check.escaped_message))
        return "".join(parts)
