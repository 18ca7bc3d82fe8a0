from __future__ import annotations

import re

_DURATION_RE = re.compile(
    r"P(?!$)"
    r"(?:(?P<years>[0-9]+)Y)?"
    r"(?:(?P<months>[0-9]+)M)?"
    r"(?:(?P<weeks>[0-9]+)W)?"
    r"(?:(?P<days>[0-9]+)D)?"
    r"(?:T(?=[0-9])"
    r"(?:(?P<hours>[0-9]+)H)?"
    r"(?:(?P<minutes>[0-9]+)M)?"
    r"(?:(?P<seconds>[0-9]+)(?:[.,](?P<fraction>[0-9]+))?S)?"
    r")?"
)

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE
_MS_PER_DAY = 24 * _MS_PER_HOUR
_MS_PER_WEEK = 7 * _MS_PER_DAY


class DurationError(ValueError):
    pass


def _component(match: re.Match[str], name: str) -> int:
    value = match.group(name)
    return int(value) if value else 0


def parse_duration_ms(text: str) -> int:
    """Parse an ISO-8601 duration such as ``PT1H32M10.5S`` into milliseconds.

    Years and months have no fixed length, so a non-zero value for either is
    rejected. Sub-millisecond digits are truncated.
    """
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise DurationError(f"Not an ISO-8601 duration: {text!r}")
    if _component(match, "years") or _component(match, "months"):
        raise DurationError(f"Duration uses calendar units: {text!r}")

    fraction = (match.group("fraction") or "").ljust(3, "0")[:3]
    return (
        _component(match, "weeks") * _MS_PER_WEEK
        + _component(match, "days") * _MS_PER_DAY
        + _component(match, "hours") * _MS_PER_HOUR
        + _component(match, "minutes") * _MS_PER_MINUTE
        + _component(match, "seconds") * _MS_PER_SECOND
        + int(fraction)
    )
