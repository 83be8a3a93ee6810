"""
nbstatsd - error handlers

Errors from the asynchronous send path never reach the code emitting metrics,
they are passed to an error handler on the sender thread instead.

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import logging


class ErrorHandler:
    """Default handler, metrics failures are silently absorbed"""

    def handle(self, error: Exception) -> None:
        pass


class LoggingErrorHandler(ErrorHandler):
    def __init__(self, log=None, level=logging.WARNING):
        self.log = log or logging.getLogger("nbstatsd")
        self.level = level

    def handle(self, error: Exception) -> None:
        self.log.log(self.level, "StatsD error: %s: %s", error.__class__.__name__, error, exc_info=error)


class CallbackErrorHandler(ErrorHandler):
    def __init__(self, callback):
        self.callback = callback

    def handle(self, error: Exception) -> None:
        self.callback(error)


def get_error_handler(error_handler) -> ErrorHandler:
    if error_handler is None:
        return ErrorHandler()
    if hasattr(error_handler, "handle"):
        return error_handler
    return CallbackErrorHandler(error_handler)
