# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Union

from nbstatsd.events import Event, ServiceCheck
from nbstatsd.formatter import MessageFormatter, normalize_tags
from nbstatsd.pipeline import DEFAULT_MTU, Pipeline

Tags = Union[None, Dict[str, Any], list]


class MetricsClient:
    """Metrics client interface, every call is a no-op.  Used as is when
    sending metrics is disabled."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config
        self.formatter = MessageFormatter()
        # datagram size limit, None when nothing is sent
        self.packet_size = None

    def send_message(self, message: str) -> None:
        pass

    def report_error(self, error: Exception) -> None:
        pass

    def count(self, aspect: str, delta: int, *, sample_rate: Optional[float] = None, tags: Tags = None) -> None:
        pass

    def increment(self, aspect: str, *, sample_rate: Optional[float] = None, tags: Tags = None) -> None:
        self.count(aspect, 1, sample_rate=sample_rate, tags=tags)

    def decrement(self, aspect: str, *, sample_rate: Optional[float] = None, tags: Tags = None) -> None:
        self.count(aspect, -1, sample_rate=sample_rate, tags=tags)

    def increase(self, metric: str, inc_value: int = 1, tags: Tags = None) -> None:
        self.count(metric, inc_value, tags=tags)

    def gauge(self, aspect: str, value: float, *, tags: Tags = None) -> None:
        pass

    def gauge_delta(self, aspect: str, delta: float, *, tags: Tags = None) -> None:
        pass

    def timing(self, aspect: str, value_ms: float, *, sample_rate: Optional[float] = None, tags: Tags = None) -> None:
        pass

    def timing_since(self, aspect: str, start_time: float, *, sample_rate: Optional[float] = None, tags: Tags = None) -> None:
        """Record the time elapsed since `start_time`, a time.monotonic() reading"""
        try:
            elapsed_ms = round((time.monotonic() - start_time) * 1000.0, 3)
        except Exception as ex:  # pylint: disable=broad-except
            self.report_error(ex)
            return
        self.timing(aspect, elapsed_ms, sample_rate=sample_rate, tags=tags)

    def _normalize_tags(self, tags) -> Dict[str, Optional[str]]:
        try:
            return normalize_tags(tags)
        except Exception as ex:  # pylint: disable=broad-except
            self.report_error(ex)
            return {}

    @contextmanager
    def timed(self, aspect: str, *, tags: Tags = None) -> Iterator[None]:
        start_time = time.monotonic()
        tags = self._normalize_tags(tags)
        try:
            yield
        except Exception:
            tags["success"] = "0"
            self.timing_since(aspect, start_time, tags=tags)
            raise
        tags["success"] = "1"
        self.timing_since(aspect, start_time, tags=tags)

    def mark(self, aspect: str, *, tags: Tags = None) -> None:
        pass

    def histogram(self, aspect: str, value: float, *, sample_rate: Optional[float] = None, tags: Tags = None) -> None:
        pass

    def set(self, aspect: str, value: Any, *, tags: Tags = None) -> None:
        pass

    def event(self, event: Event, *, tags: Tags = None) -> None:
        pass

    def service_check(self, check: ServiceCheck) -> None:
        pass

    def unexpected_exception(self, ex: Exception, where: str, tags: Tags = None) -> None:
        all_tags = {
            "exception": ex.__class__.__name__,
            "where": where,
        }
        all_tags.update(self._normalize_tags(tags))
        self.increase("exception", tags=all_tags)

    def pipeline(self, mtu: int = DEFAULT_MTU) -> Pipeline:
        return Pipeline(self, mtu=mtu)

    def stop(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()
