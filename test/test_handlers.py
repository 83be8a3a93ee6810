"""
nbstatsd - error handler tests

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import logging

from nbstatsd.handlers import (CallbackErrorHandler, ErrorHandler, LoggingErrorHandler, get_error_handler)


def test_default_handler_absorbs_errors():
    handler = get_error_handler(None)
    assert type(handler) is ErrorHandler  # pylint: disable=unidiomatic-typecheck
    handler.handle(OSError("ignored"))


def test_callable_is_wrapped():
    errors = []
    handler = get_error_handler(errors.append)
    assert isinstance(handler, CallbackErrorHandler)
    handler.handle(OSError("boom"))
    assert [str(error) for error in errors] == ["boom"]


def test_handler_objects_are_used_as_is():
    handler = LoggingErrorHandler()
    assert get_error_handler(handler) is handler


def test_logging_handler(caplog):
    handler = LoggingErrorHandler(logging.getLogger("metrics"), level=logging.ERROR)
    with caplog.at_level(logging.ERROR, logger="metrics"):
        handler.handle(OSError("network is unreachable"))
    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.name == "metrics"
    assert record.levelno == logging.ERROR
    assert record.getMessage() == "StatsD error: OSError: network is unreachable"
