from __future__ import annotations

"""Parser for the HTTP ``Range`` request header.

Implements the ``byte-ranges-specifier`` grammar of RFC 7233 section 2.1:

    byte-ranges-specifier = "bytes=" byte-range-set
    byte-range-set        = *( "," OWS ) byte-range-spec
                            *( OWS "," OWS byte-range-spec )
    byte-range-spec       = first-byte-pos "-" [ last-byte-pos ]
    suffix-byte-range-spec = "-" suffix-length

The parser is all-or-nothing: any deviation, including a number that does not
fit in an unsigned 64-bit integer or text left over after the last range-spec,
rejects the whole header.
"""

from dataclasses import dataclass
import re
from typing import Union

MAX_U64 = 2**64 - 1

_PREFIX = "bytes="
_LEADING_COMMAS_RE = re.compile(r"(?:,[ \t]*)*")
_SEPARATOR_RE = re.compile(r"[ \t]*,[ \t]*")
_SPEC_RE = re.compile(r"(?P<start>[0-9]+)-(?P<end>[0-9]*)|-(?P<suffix>[0-9]+)")


@dataclass(frozen=True)
class StartingAt:
    start: int


@dataclass(frozen=True)
class Last:
    length: int


@dataclass(frozen=True)
class FromToIncluding:
    start: int
    end: int


ByteRange = Union[StartingAt, Last, FromToIncluding]


class RangeSyntaxError(ValueError):
    def __init__(self, header: str, position: int, reason: str) -> None:
        super().__init__(f"Invalid Range header at offset {position}: {reason} ({header!r})")
        self.header = header
        self.position = position
        self.reason = reason


def _to_u64(header: str, position: int, digits: str) -> int:
    value = int(digits)
    if value > MAX_U64:
        raise RangeSyntaxError(header, position, "number does not fit in 64 bits")
    return value


def _parse_spec(header: str, match: re.Match[str]) -> ByteRange:
    suffix = match.group("suffix")
    if suffix is not None:
        return Last(_to_u64(header, match.start("suffix"), suffix))
    start = _to_u64(header, match.start("start"), match.group("start"))
    end = match.group("end")
    if not end:
        return StartingAt(start)
    return FromToIncluding(start, _to_u64(header, match.start("end"), end))


def parse_range(header: str) -> list[ByteRange]:
    if not header.startswith(_PREFIX):
        raise RangeSyntaxError(header, 0, "expected 'bytes=' prefix")
    position = _LEADING_COMMAS_RE.match(header, len(_PREFIX)).end()

    ranges: list[ByteRange] = []
    while True:
        match = _SPEC_RE.match(header, position)
        if match is None:
            raise RangeSyntaxError(header, position, "expected a byte-range-spec")
        ranges.append(_parse_spec(header, match))
        position = match.end()
        separator = _SEPARATOR_RE.match(header, position)
        if separator is None:
            break
        position = separator.end()

    if position != len(header):
        raise RangeSyntaxError(header, position, "unexpected trailing characters")
    return ranges


def single_range(ranges: list[ByteRange]) -> ByteRange | None:
    """Return the only range of a header, or None for multi-range requests."""
    if len(ranges) == 1:
        return ranges[0]
    return None
