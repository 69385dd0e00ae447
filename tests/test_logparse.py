from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tasklab.logparse import fixup_rows, parse_line, parse_lines, read_log_text
from tasklab.types import LogRow


def test_parses_component_level_time_and_message() -> None:
    row = parse_line("[taskcluster:warn 2024-05-20T14:40:11.353Z] retrying")

    assert row.component == "taskcluster"
    assert row.level == "warn"
    assert row.time == datetime(2024, 5, 20, 14, 40, 11, 353000, tzinfo=timezone.utc)
    assert row.message == "retrying"


def test_level_is_optional() -> None:
    row = parse_line("[vcs 2024-05-20T14:40:11Z]   cloning into checkout")

    assert row.component == "vcs"
    assert row.level is None
    assert row.time == datetime(2024, 5, 20, 14, 40, 11, tzinfo=timezone.utc)
    assert row.message == "cloning into checkout"


def test_unparseable_line_is_kept_verbatim() -> None:
    row = parse_line("plain text no brackets")
    assert row == LogRow(component="", time=None, message="plain text no brackets")


@pytest.mark.parametrize(
    "line",
    [
        "[] 2024-05-20T14:40:11Z nothing",
        "[setup] no timestamp here",
        "[setup 2024-05-20T14:40:11Z no closing bracket",
        "[setup: 2024-05-20T14:40:11Z] empty level",
        "[setup 12:ab] bad charset",
        "[setup 99-99-99] not a date",
        "text before [setup 2024-05-20T14:40:11Z] tag",
        "[setup 9999-12-31T23:59:59-23:59] past the last representable year",
        "[setup 0001-01-01T00:00:00+01:00] before the first representable year",
    ],
)
def test_lines_outside_the_grammar_fall_back(line: str) -> None:
    row = parse_line(line)
    assert row.component == ""
    assert row.time is None
    assert row.message == line


def test_leading_whitespace_before_the_tag_is_allowed() -> None:
    row = parse_line("  [fetches 2024-05-20T14:40:11.353Z] downloading")
    assert row.component == "fetches"
    assert row.message == "downloading"


def test_every_non_blank_line_yields_exactly_one_row() -> None:
    lines = [
        "[setup 2024-05-20T14:40:11Z] a",
        "",
        "   ",
        "free text",
        "\t",
        "[taskcluster 2024-05-20T14:40:12Z] b",
    ]

    rows = parse_lines(lines)

    assert [r.message for r in rows] == ["a", "free text", "b"]


def test_fixup_strips_a_secondary_timestamp_prefix() -> None:
    rows = [
        LogRow(
            component="task",
            time=None,
            message="[2024-05-20 15:04:26] Ep. 1 : Up. 12",
        ),
        LogRow(component="task", time=None, message="[not-a-time] keep me"),
        LogRow(component="task", time=None, message="no prefix"),
    ]

    out = fixup_rows(rows)

    assert [r.message for r in out] == ["Ep. 1 : Up. 12", "[not-a-time] keep me", "no prefix"]
    assert out[2] is rows[2]


def test_read_log_text_parses_and_fixes_up() -> None:
    text = (
        "[task 2024-05-20T15:04:26.000Z] [2024-05-20 15:04:26] Ep. 1\n"
        "\n"
        "trailing\n"
    )

    rows = read_log_text(text)

    assert [(r.component, r.message) for r in rows] == [("task", "Ep. 1"), ("", "trailing")]
