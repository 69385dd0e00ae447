from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tasklab.config import TraceSettings
from tasklab.model import epoch_ms
from tasklab.trace import (
    CATEGORIES,
    StringTable,
    anchor_time,
    build_trace,
    category_index,
    to_profile,
)
from tasklab.types import LogRow, TaskNode

T0 = datetime(2024, 5, 20, 14, 40, 11, 353000, tzinfo=timezone.utc)


def _row(component: str, offset_ms: float | None, message: str = "m") -> LogRow:
    time = None if offset_ms is None else T0 + timedelta(milliseconds=offset_ms)
    return LogRow(component=component, time=time, message=message)


def _task(group: str | None = "Fo1npr9eTFqsAj4DFlqBbA") -> TaskNode:
    return TaskNode(task_id="abc", label="build", task_group_id=group)


def test_string_table_interns_each_string_once() -> None:
    table = StringTable()

    assert table.index_for_string("setup") == 0
    assert table.index_for_string("vcs") == 1
    assert table.index_for_string("setup") == 0
    assert table.string_for_index(1) == "vcs"
    assert "vcs" in table and "other" not in table
    assert table.serialize() == ("setup", "vcs")


def test_category_lookup_is_exact_and_defaults_to_none() -> None:
    assert [c.name for c in CATEGORIES] == [
        "none",
        "fetches",
        "vcs",
        "setup",
        "taskcluster",
    ]
    assert category_index("taskcluster") == 4
    assert category_index("fetches") == 1
    assert category_index("Setup") == 0
    assert category_index("") == 0
    assert category_index("task") == 0


def test_events_are_relative_to_the_first_timestamped_row() -> None:
    rows = [
        _row("", None, "preamble"),
        _row("setup", 0),
        _row("vcs", 647),
        _row("setup", 1000),
    ]

    doc = build_trace(rows, _task())

    assert doc.start_time == epoch_ms(T0)
    assert [e.start for e in doc.events] == [0.0, 647.0, 1000.0]
    assert [e.category for e in doc.events] == [3, 2, 3]
    assert [e.name for e in doc.events] == [0, 1, 0]
    assert doc.string_table == ("setup", "vcs")
    assert all(e.end is None and e.phase == 0 for e in doc.events)


def test_first_anchor_is_not_the_minimum() -> None:
    rows = [_row("setup", 500), _row("setup", 0)]

    doc = build_trace(rows, _task())

    assert [e.start for e in doc.events] == [0.0, -500.0]


def test_earliest_anchor_policy_uses_the_minimum() -> None:
    rows = [_row("setup", 500), _row("setup", 0)]

    doc = build_trace(rows, _task(), TraceSettings(anchor="earliest"))

    assert doc.start_time == epoch_ms(T0)
    assert [e.start for e in doc.events] == [500.0, 0.0]


def test_unknown_anchor_policy_is_rejected() -> None:
    with pytest.raises(ValueError):
        TraceSettings(anchor="last")
    with pytest.raises(ValueError):
        anchor_time([_row("setup", 0)], "last")


def test_untimed_rows_contribute_no_events() -> None:
    doc = build_trace([_row("", None, "plain text no brackets")], _task())

    assert doc.start_time is None
    assert doc.events == ()
    assert doc.string_table == ()


def test_payload_carries_message_time_strings_and_urls() -> None:
    settings = TraceSettings.from_values(server="https://tc.example.com/")

    doc = build_trace([_row("taskcluster", 0, "retrying")], _task(), settings)

    assert doc.events[0].data == {
        "type": "LiveLogRow",
        "name": "LiveLogRow",
        "message": "retrying",
        "hour": "14:40:11",
        "date": "2024-05-20",
        "taskGroupURL": "https://tc.example.com/tasks/groups/Fo1npr9eTFqsAj4DFlqBbA",
        "taskGroupProfile": (
            "https://gregtatum.github.io/taskcluster-tools/src/taskprofiler/"
            "?taskGroupId=Fo1npr9eTFqsAj4DFlqBbA"
        ),
    }


def test_payload_urls_are_empty_without_a_task_group() -> None:
    doc = build_trace([_row("setup", 0)], _task(group=None))
    assert doc.events[0].data["taskGroupURL"] is None
    assert doc.events[0].data["taskGroupProfile"] is None


def test_profile_export_is_column_oriented() -> None:
    doc = build_trace([_row("setup", 0), _row("vcs", 10)], _task())

    profile = to_profile(doc)

    assert profile["meta"]["startTime"] == epoch_ms(T0)
    assert profile["meta"]["categories"][4] == {
        "name": "taskcluster",
        "color": "green",
        "subcategories": ["Other"],
    }
    assert profile["meta"]["markerSchema"][0]["name"] == "LiveLogRow"
    (thread,) = profile["threads"]
    assert thread["name"] == "Live Log"
    assert thread["isMainThread"] is True
    assert thread["stringArray"] == ["setup", "vcs"]
    markers = thread["markers"]
    assert markers["length"] == 2
    assert markers["startTime"] == [0.0, 10.0]
    assert markers["endTime"] == [None, None]
    assert markers["phase"] == [0, 0]
    assert markers["category"] == [3, 2]
    assert markers["name"] == [0, 1]
