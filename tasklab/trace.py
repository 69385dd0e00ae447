from __future__ import annotations

"""Timeline trace synthesis from parsed live-log rows.

Each timestamped row becomes one instant marker. Marker names are interned
into a string table; categories come from a fixed vocabulary matched on the
row's component. Rows are emitted in input order and never re-sorted, so
relative times can go negative when the log is out of order and the anchor
policy is "first".
"""

import logging
from datetime import datetime
from typing import Any, Sequence

from tasklab.config import TraceSettings
from tasklab.model import epoch_ms, format_timestamp
from tasklab.types import Category, LogRow, TaskNode, TraceDocument, TraceEvent

logger = logging.getLogger(__name__)

LIVE_LOG_ROW = "LiveLogRow"

# Index is the category id. Colors use the timeline viewer's palette names.
CATEGORIES: tuple[Category, ...] = (
    Category(name="none", color="grey"),
    Category(name="fetches", color="purple"),
    Category(name="vcs", color="orange"),
    Category(name="setup", color="lightblue"),
    Category(name="taskcluster", color="green"),
)


class StringTable:
    """Append-only string interning table."""

    def __init__(self) -> None:
        self._strings: list[str] = []
        self._index: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, s: object) -> bool:
        return s in self._index

    def index_for_string(self, s: str) -> int:
        index = self._index.get(s)
        if index is None:
            index = len(self._strings)
            self._strings.append(s)
            self._index[s] = index
        return index

    def string_for_index(self, index: int) -> str:
        return self._strings[index]

    def serialize(self) -> tuple[str, ...]:
        return tuple(self._strings)


def category_index(
    component: str, categories: Sequence[Category] = CATEGORIES
) -> int:
    for i, category in enumerate(categories):
        if category.name == component:
            return i
    return 0


def anchor_time(rows: Sequence[LogRow], policy: str = "first") -> datetime | None:
    times = [r.time for r in rows if r.time is not None]
    if not times:
        return None
    if policy == "first":
        return times[0]
    if policy == "earliest":
        return min(times)
    raise ValueError(f"unknown anchor policy: {policy!r}")


def _payload(
    row: LogRow, time: datetime, task: TaskNode, settings: TraceSettings
) -> dict[str, Any]:
    stamp = format_timestamp(time)
    group = task.task_group_id
    return {
        "type": LIVE_LOG_ROW,
        "name": LIVE_LOG_ROW,
        "message": row.message,
        "hour": stamp[11:19],
        "date": stamp[:10],
        "taskGroupURL": settings.task_group_url(group) if group else None,
        "taskGroupProfile": settings.task_group_profile_url(group) if group else None,
    }


def build_trace(
    rows: Sequence[LogRow],
    task: TaskNode,
    settings: TraceSettings | None = None,
) -> TraceDocument:
    settings = settings or TraceSettings()
    anchor = anchor_time(rows, settings.anchor)
    start_time = epoch_ms(anchor) if anchor is not None else None

    strings = StringTable()
    events: list[TraceEvent] = []
    for row in rows:
        if row.time is None or start_time is None:
            continue
        events.append(
            TraceEvent(
                start=epoch_ms(row.time) - start_time,
                category=category_index(row.component),
                name=strings.index_for_string(row.component),
                data=_payload(row, row.time, task, settings),
            )
        )

    dropped = len(rows) - len(events)
    if dropped:
        logger.debug("skipped %d row(s) without a timestamp", dropped)
    logger.info(
        "built trace for task %s: %d marker(s), %d name(s)",
        task.task_id,
        len(events),
        len(strings),
    )
    return TraceDocument(
        start_time=start_time,
        categories=CATEGORIES,
        string_table=strings.serialize(),
        events=tuple(events),
    )


def marker_schema() -> dict[str, Any]:
    return {
        "name": LIVE_LOG_ROW,
        "tooltipLabel": "{marker.data.message}",
        "tableLabel": "{marker.data.message}",
        "chartLabel": "{marker.data.message}",
        "display": ["marker-chart", "marker-table", "timeline-overview"],
        "data": [
            {"key": "startTime", "label": "Start time", "format": "string"},
            {
                "key": "message",
                "label": "Log Message",
                "format": "string",
                "searchable": True,
            },
            {"key": "hour", "label": "Hour", "format": "string"},
            {"key": "date", "label": "Date", "format": "string"},
            {"key": "time", "label": "Time", "format": "time"},
            {"key": "taskGroupURL", "label": "Task Group URL", "format": "url"},
            {
                "key": "taskGroupProfile",
                "label": "Task Group Profile",
                "format": "url",
            },
        ],
    }


def to_profile(doc: TraceDocument) -> dict[str, Any]:
    """Export a TraceDocument in the timeline viewer's profile shape."""

    markers: dict[str, Any] = {
        "startTime": [e.start for e in doc.events],
        "endTime": [e.end for e in doc.events],
        "phase": [e.phase for e in doc.events],
        "category": [e.category for e in doc.events],
        "name": [e.name for e in doc.events],
        "data": [dict(e.data) for e in doc.events],
        "length": len(doc.events),
    }
    return {
        "meta": {
            "startTime": doc.start_time if doc.start_time is not None else 0,
            "categories": [
                {"name": c.name, "color": c.color, "subcategories": list(c.subcategories)}
                for c in doc.categories
            ],
            "markerSchema": [marker_schema()],
        },
        "threads": [
            {
                "name": doc.thread_name,
                "isMainThread": True,
                "markers": markers,
                "stringArray": list(doc.string_table),
            }
        ],
    }
