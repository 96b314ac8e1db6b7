"""Trace file reader.

Each line of a trace looks like

    0x7f3a2c: W 0x7ffd8a3c

i.e. `<pc>: <op> <address>` with hexadecimal numbers (the `0x` prefix is
optional). `R` is a read and `W` a write; other ops are ignored. Lines that
do not match are skipped and a line starting with `#eof` ends the trace.
"""
import logging
import re
from typing import Iterable, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

EOF_MARKER = "#eof"

_LINE_RE = re.compile(
    r"^\s*(?:0[xX])?[0-9a-fA-F]+:\s*(?P<op>\S)\s*(?:0[xX])?(?P<addr>[0-9a-fA-F]+)"
)


def parse_trace_line(line: str) -> Optional[Tuple[str, int]]:
    """Return (op, address) for a well formed line, otherwise None."""
    m = _LINE_RE.match(line)
    if m is None:
        return None
    return m.group('op'), int(m.group('addr'), 16)


def iter_records(lines: Iterable[str]) -> Iterator[Tuple[bool, int]]:
    """Yield (is_write, address) for every usable line until `#eof`."""
    for lineno, line in enumerate(lines, 1):
        if line.startswith(EOF_MARKER):
            logger.debug("end of trace marker on line %d", lineno)
            break
        parsed = parse_trace_line(line)
        if parsed is None:
            logger.debug("skipping malformed trace line %d: %r", lineno, line.rstrip("\n"))
            continue
        op, address = parsed
        if op == 'R':
            yield False, address
        elif op == 'W':
            yield True, address
        else:
            logger.debug("ignoring unknown op %r on line %d", op, lineno)


def read_trace(path: str) -> Iterator[Tuple[bool, int]]:
    """Open `path` and stream its records.

    The file is opened before the first record is produced, so an unreadable
    trace raises OSError from this call rather than mid-iteration.
    """
    fh = open(path, 'r', encoding='utf-8', errors='replace')
    return _stream(fh)


def _stream(fh) -> Iterator[Tuple[bool, int]]:
    with fh:
        yield from iter_records(fh)
