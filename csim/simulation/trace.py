"""Trace reading.

Turns the lines of a valgrind-style trace into TraceRecord values:

     L 10,1
     S 7ff0005c8,8
    I  0400d7d4,8

The operation letter is followed by a hexadecimal address and a decimal
access size. Only L and S are simulated; every other letter is kept as
Operation.OTHER so the simulator can skip it.
"""
import logging
import re
from enum import Enum
from typing import Iterable, Iterator, NamedTuple, Optional

from csim.core.address import ADDRESS_BITS
from csim.core.errors import TraceFormatError

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r'^\s*([A-Za-z])\s+(?:0[xX])?([0-9a-fA-F]+)\s*,\s*(-?\d+)\s*$')


class Operation(Enum):
    LOAD = 'L'
    STORE = 'S'
    OTHER = '?'

    @classmethod
    def from_code(cls, code: str) -> 'Operation':
        if code == 'L':
            return cls.LOAD
        if code == 'S':
            return cls.STORE
        return cls.OTHER


class TraceRecord(NamedTuple):
    op: Operation
    address: int
    size: int
    code: str = ''

    def __str__(self):
        return f"{self.code or self.op.value} {self.address:x},{self.size}"


def parse_trace_line(line: str, line_number: Optional[int] = None) -> Optional[TraceRecord]:
    """Parse one trace line. Blank lines give None; bad lines raise TraceFormatError."""
    if not line.strip():
        return None
    m = _LINE_RE.match(line)
    if m is None:
        raise TraceFormatError(f"cannot parse trace record {line.strip()!r}", line_number, line)
    code, addr_hex, size = m.groups()
    address = int(addr_hex, 16)
    if address >> ADDRESS_BITS:
        raise TraceFormatError(f"address 0x{addr_hex} is wider than {ADDRESS_BITS} bits", line_number, line)
    return TraceRecord(Operation.from_code(code), address, int(size), code)


def parse_trace(lines: Iterable[str], strict: bool = False) -> Iterator[TraceRecord]:
    """Lazily parse trace lines.

    Malformed lines are logged and skipped unless `strict` is set, in which
    case the TraceFormatError propagates.
    """
    for number, line in enumerate(lines, start=1):
        try:
            record = parse_trace_line(line, number)
        except TraceFormatError as exc:
            if strict:
                raise
            logger.warning("skipping malformed trace record: %s", exc)
            continue
        if record is not None:
            yield record


def read_trace(path: str, strict: bool = False) -> Iterator[TraceRecord]:
    with open(path, 'r', encoding='utf-8', errors='replace') as fh:
        yield from parse_trace(fh, strict=strict)


__all__ = ['Operation', 'TraceRecord', 'parse_trace_line', 'parse_trace', 'read_trace']
