"""Parsing of bounded time intervals taken from a URL path segment.

Two spellings are accepted: a duration expression made of one or more
``<number><unit>`` terms (``1.5s``, ``300ms``, ``2h45m``) and a bare number,
read as seconds (``2.5``).
"""

import math
import re
from typing import Optional

UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_TERM_RE = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]+)")
_EXPRESSION_RE = re.compile(r"([-+]?)((?:[0-9]*(?:\.[0-9]*)?[^0-9.]+)+)")
_SECONDS_RE = re.compile(r"[-+]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")


class DurationError(ValueError):
    pass


def parse_duration_expression(text: str) -> float:
    """Parse a duration expression such as ``1m30s`` into seconds."""
    if text in ("0", "+0", "-0"):
        return 0.0
    match = _EXPRESSION_RE.fullmatch(text)
    if not match:
        raise DurationError(f"invalid duration {text!r}")
    sign, body = match.groups()
    total = 0.0
    for number, unit in _TERM_RE.findall(body):
        if number in ("", "."):
            raise DurationError(f"invalid duration {text!r}")
        if unit not in UNITS:
            raise DurationError(f"unknown unit {unit!r} in duration {text!r}")
        total += float(number) * UNITS[unit]
    return -total if sign == "-" else total


def parse_duration(text: str) -> float:
    try:
        seconds = parse_duration_expression(text)
    except DurationError:
        if not _SECONDS_RE.fullmatch(text):
            raise DurationError(f"invalid duration {text!r}") from None
        seconds = float(text)
    if not math.isfinite(seconds):
        raise DurationError(f"invalid duration {text!r}")
    return seconds


def parse_bounded_duration(text: str, minimum: float = 0.0, maximum: Optional[float] = 60.0) -> float:
    """Parse ``text`` and reject values outside ``[minimum, maximum]`` seconds."""
    seconds = parse_duration(text)
    if maximum is not None and seconds > maximum:
        raise DurationError(f"duration {seconds}s longer than {maximum}s")
    if seconds < minimum:
        raise DurationError(f"duration {seconds}s shorter than {minimum}s")
    return seconds
