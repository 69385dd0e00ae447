from __future__ import annotations

"""Live-log line parsing.

A parsed line looks like:

    [taskcluster:warn 2024-05-20T14:40:11.353Z] retrying
     ^component  ^level ^time                   ^message

Parsing is a single left-to-right scan (no regex backtracking). Any line
that does not fit becomes a row with an empty component, no time, and the
whole line as its message, so no line is ever dropped.
"""

import re
from datetime import datetime
from typing import Callable, Iterable

from tasklab.model import parse_timestamp
from tasklab.types import LogRow

_TIME_CHARS = frozenset("0123456789-:.TZ")

# "[2024-05-20 15:04:26] Ep. 1 : ..." printed by the task itself.
_SECONDARY_TIMESTAMP = re.compile(r"^\s*\[\d[\d\-T:.Z ]*\]\s*")


def _is_word(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def _scan(line: str, pos: int, accept: Callable[[str], bool]) -> int:
    end = pos
    n = len(line)
    while end < n and accept(line[end]):
        end += 1
    return end


def parse_line(line: str) -> LogRow:
    """Parse one non-blank line into a LogRow."""

    fallback = LogRow(component="", time=None, message=line)

    pos = _scan(line, 0, str.isspace)
    if pos >= len(line) or line[pos] != "[":
        return fallback
    pos += 1

    end = _scan(line, pos, _is_word)
    if end == pos:
        return fallback
    component = line[pos:end]
    pos = end

    level: str | None = None
    if pos < len(line) and line[pos] == ":":
        end = _scan(line, pos + 1, _is_word)
        if end == pos + 1:
            return fallback
        level = line[pos + 1 : end]
        pos = end

    pos = _scan(line, pos, str.isspace)
    end = _scan(line, pos, _TIME_CHARS.__contains__)
    if end == pos or end >= len(line) or line[end] != "]":
        return fallback
    time_text = line[pos:end]

    try:
        time: datetime = parse_timestamp(time_text)
    except ValueError:
        return fallback

    pos = _scan(line, end + 1, str.isspace)
    return LogRow(component=component, time=time, message=line[pos:], level=level)


def parse_lines(lines: Iterable[str]) -> list[LogRow]:
    """One row per non-blank line, input order. Blank lines are skipped."""

    return [parse_line(line) for line in lines if line.strip()]


def fixup_rows(rows: Iterable[LogRow]) -> list[LogRow]:
    """Strip a secondary timestamp prefix the task printed into its message."""

    out: list[LogRow] = []
    for row in rows:
        message = _SECONDARY_TIMESTAMP.sub("", row.message, count=1)
        if message != row.message:
            row = LogRow(
                component=row.component,
                time=row.time,
                message=message,
                level=row.level,
            )
        out.append(row)
    return out


def read_log_text(text: str) -> list[LogRow]:
    return fixup_rows(parse_lines(text.splitlines()))
