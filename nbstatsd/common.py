"""
nbstatsd - common utility functions

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import enum
import math


class StrEnum(str, enum.Enum):
    def __str__(self):
        return str(self.value)


@enum.unique
class MessageFormat(StrEnum):
    datadog = "datadog"
    telegraf = "telegraf"


@enum.unique
class FlushPolicy(StrEnum):
    eager = "eager"
    half_full = "half_full"


MAX_FRACTION_DIGITS = 6


def format_number(value, max_fraction_digits=MAX_FRACTION_DIGITS):
    """Render a number the same way regardless of the process locale:
    '.' as the radix point, no digit grouping, at most `max_fraction_digits`
    fraction digits with trailing zeros removed and 'NaN' for not-a-number"""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        raise ValueError("Cannot format infinite value {!r}".format(value))
    text = "{:.{}f}".format(value, max_fraction_digits)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


# Sentinel put in the outbound queue to wake up and stop the sender thread
QuitEvent = object()
