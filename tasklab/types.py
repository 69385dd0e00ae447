from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Run:
    run_id: int
    state: str | None
    reason_resolved: str | None
    scheduled: datetime | None = None
    started: datetime | None = None
    resolved: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.reason_resolved == "completed"


@dataclass(frozen=True)
class TaskNode:
    task_id: str
    label: str | None
    dependencies: tuple[str, ...] = ()
    runs: tuple[Run, ...] = ()
    task_group_id: str | None = None
    name: str | None = None  # metadata.name, used when there is no label
    state: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.name or self.task_id


@dataclass(frozen=True)
class LogRow:
    component: str
    time: datetime | None
    message: str
    level: str | None = None


@dataclass(frozen=True)
class Category:
    name: str
    color: str
    subcategories: tuple[str, ...] = ("Other",)


@dataclass(frozen=True)
class TraceEvent:
    start: float  # ms relative to TraceDocument.start_time
    category: int
    name: int  # index into TraceDocument.string_table
    data: dict[str, Any] = field(default_factory=dict)
    end: float | None = None
    phase: int = 0  # instant


@dataclass(frozen=True)
class TraceDocument:
    start_time: float | None  # epoch ms of the anchor row
    categories: tuple[Category, ...]
    string_table: tuple[str, ...]
    events: tuple[TraceEvent, ...]
    thread_name: str = "Live Log"
