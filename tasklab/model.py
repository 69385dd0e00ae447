from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

from tasklab.types import Run, TaskNode

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken as UTC. Raises ValueError for anything
    `datetime.fromisoformat` rejects.
    """

    s = text.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    # Older interpreters only accept 3 or 6 fractional digits.
    s = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as e:
        # An offset can push an in-range local time past year 1 or 9999.
        raise ValueError(f"timestamp out of range: {text!r}") from e


def format_timestamp(dt: datetime) -> str:
    text = dt.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def epoch_ms(dt: datetime) -> float:
    # Integer microseconds first so whole milliseconds stay exact.
    return ((dt - _EPOCH) // timedelta(microseconds=1)) / 1000.0


def _optional_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    return parse_timestamp(str(value))


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def run_from_json(obj: dict[str, Any]) -> Run:
    return Run(
        run_id=int(obj.get("runId", 0)),
        state=_optional_str(obj.get("state")),
        reason_resolved=_optional_str(obj.get("reasonResolved")),
        scheduled=_optional_timestamp(obj.get("scheduled")),
        started=_optional_timestamp(obj.get("started")),
        resolved=_optional_timestamp(obj.get("resolved")),
    )


def task_node_from_definition(task_id: str, task: dict[str, Any]) -> TaskNode:
    """Build a node from a bare queue task definition (no status/runs)."""

    tags = task.get("tags") or {}
    metadata = task.get("metadata") or {}
    return TaskNode(
        task_id=str(task_id),
        label=_optional_str(tags.get("label")),
        dependencies=tuple(str(d) for d in task.get("dependencies") or []),
        runs=(),
        task_group_id=_optional_str(task.get("taskGroupId")),
        name=_optional_str(metadata.get("name")),
    )


def task_node_from_json(obj: dict[str, Any]) -> TaskNode:
    """Build a node from a task-group list entry (`{"status", "task"}`)."""

    status = obj["status"]
    node = task_node_from_definition(str(status["taskId"]), obj["task"])
    runs = tuple(run_from_json(r) for r in status.get("runs") or [])
    group = node.task_group_id or _optional_str(status.get("taskGroupId"))
    return TaskNode(
        task_id=node.task_id,
        label=node.label,
        dependencies=node.dependencies,
        runs=runs,
        task_group_id=group,
        name=node.name,
        state=_optional_str(status.get("state")),
    )


def _run_to_json(run: Run) -> dict[str, Any]:
    def _ts(dt: datetime | None) -> str | None:
        return format_timestamp(dt) if dt is not None else None

    return {
        "runId": run.run_id,
        "state": run.state,
        "reasonResolved": run.reason_resolved,
        "scheduled": _ts(run.scheduled),
        "started": _ts(run.started),
        "resolved": _ts(run.resolved),
    }


def task_node_to_json(node: TaskNode) -> dict[str, Any]:
    return {
        "taskId": node.task_id,
        "label": node.display_label,
        "taskGroupId": node.task_group_id,
        "state": node.state,
        "dependencies": list(node.dependencies),
        "runs": [_run_to_json(r) for r in node.runs],
    }
