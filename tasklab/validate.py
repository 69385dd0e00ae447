from __future__ import annotations

import re
from typing import Any

from tasklab.model import parse_timestamp

_TASK_GROUP_ID = re.compile(r"^[a-zA-Z0-9_-]+$")


class TaskGroupValidationError(ValueError):
    pass


def validate_task_group_id(task_group_id: str) -> None:
    if not _TASK_GROUP_ID.match(task_group_id):
        raise TaskGroupValidationError(
            f"task group id {task_group_id!r} is not valid"
        )


def _validate_timestamps(where: str, run: dict[str, Any]) -> None:
    for key in ("scheduled", "started", "resolved"):
        value = run.get(key)
        if value is None or value == "":
            continue
        if not isinstance(value, str):
            raise TaskGroupValidationError(f"{where} '{key}' must be a string")
        try:
            parse_timestamp(value)
        except ValueError as e:
            raise TaskGroupValidationError(
                f"{where} '{key}' is not a timestamp: {value!r}"
            ) from e


def validate_task_definition(where: str, task: Any) -> None:
    if not isinstance(task, dict):
        raise TaskGroupValidationError(f"{where} must be an object")

    deps = task.get("dependencies", [])
    if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
        raise TaskGroupValidationError(
            f"{where} 'dependencies' must be a list of task ids"
        )

    tags = task.get("tags", {})
    if tags is not None and not isinstance(tags, dict):
        raise TaskGroupValidationError(f"{where} 'tags' must be an object")
    label = (tags or {}).get("label")
    if label is not None and not isinstance(label, str):
        raise TaskGroupValidationError(f"{where} label must be a string")

    group = task.get("taskGroupId")
    if group is not None:
        validate_task_group_id(str(group))


def validate_task_entry(where: str, entry: Any) -> None:
    if not isinstance(entry, dict):
        raise TaskGroupValidationError(f"{where} must be an object")
    for key in ("status", "task"):
        if key not in entry:
            raise TaskGroupValidationError(f"{where} is missing '{key}'")

    status = entry["status"]
    if not isinstance(status, dict):
        raise TaskGroupValidationError(f"{where} 'status' must be an object")
    task_id = status.get("taskId")
    if not isinstance(task_id, str) or not task_id:
        raise TaskGroupValidationError(f"{where} status.taskId must be a string")

    runs = status.get("runs", [])
    if runs is not None:
        if not isinstance(runs, list):
            raise TaskGroupValidationError(f"{where} status.runs must be a list")
        for i, run in enumerate(runs):
            if not isinstance(run, dict):
                raise TaskGroupValidationError(
                    f"{where} run {i} must be an object"
                )
            run_id = run.get("runId", 0)
            if not isinstance(run_id, int) or isinstance(run_id, bool):
                raise TaskGroupValidationError(
                    f"task '{task_id}' run {i} runId must be an integer"
                )
            _validate_timestamps(f"task '{task_id}' run {i}", run)

    validate_task_definition(f"task '{task_id}'", entry["task"])


def validate_task_group(payload: Any) -> None:
    """Reject task-group list documents the core cannot consume."""

    if not isinstance(payload, dict):
        raise TaskGroupValidationError("task group payload must be an object")

    group = payload.get("taskGroupId")
    if group is not None:
        validate_task_group_id(str(group))

    tasks = payload.get("tasks")
    if not isinstance(tasks, list):
        raise TaskGroupValidationError("task group payload requires a 'tasks' list")

    for i, entry in enumerate(tasks):
        validate_task_entry(f"tasks[{i}]", entry)
