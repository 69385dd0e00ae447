from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

from tasklab.graph import ConsolidatedGraph
from tasklab.model import task_node_from_definition, task_node_from_json, task_node_to_json
from tasklab.timing import node_timings, summarize, task_type_groups, training_run
from tasklab.trace import to_profile
from tasklab.types import TaskNode, TraceDocument
from tasklab.validate import (
    TaskGroupValidationError,
    validate_task_definition,
    validate_task_group,
)

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise TaskGroupValidationError(f"{path}: not UTF-8 text") from e
    return json.loads(text)


def _write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, sort_keys=True), encoding="utf-8")


def load_task_group(path: Path) -> list[TaskNode]:
    payload = _read_json(path)
    try:
        validate_task_group(payload)
    except TaskGroupValidationError as e:
        raise TaskGroupValidationError(f"{path}: {e}") from e
    nodes = [task_node_from_json(entry) for entry in payload["tasks"]]
    logger.info(
        "loaded %d task(s) from group %s",
        len(nodes),
        payload.get("taskGroupId") or path.name,
    )
    return nodes


def load_task_groups(paths: Sequence[Path]) -> list[TaskNode]:
    """Concatenate task-group list documents in the order given."""

    nodes: list[TaskNode] = []
    for path in paths:
        nodes.extend(load_task_group(path))
    return nodes


def load_task_definition(path: Path, task_id: str) -> TaskNode:
    task = _read_json(path)
    try:
        validate_task_definition(f"task '{task_id}'", task)
    except TaskGroupValidationError as e:
        raise TaskGroupValidationError(f"{path}: {e}") from e
    return task_node_from_definition(task_id, task)


def read_log_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def graph_to_json(graph: ConsolidatedGraph) -> dict[str, Any]:
    timings = node_timings(graph.nodes)
    summary = summarize(timings)
    groups = task_type_groups(graph.nodes)
    run = training_run(graph.nodes)
    return {
        "nodes": [
            {**task_node_to_json(n), "group": groups[n.task_id]} for n in graph.nodes
        ],
        "dependents": graph.dependents,
        "timing": {
            t.task_id: {
                "durationMs": t.duration_ms,
                "startMs": t.start_ms,
                "endMs": t.end_ms,
            }
            for t in timings
        },
        "summary": None
        if summary is None
        else {
            "minDurationMs": summary.min_duration_ms,
            "maxDurationMs": summary.max_duration_ms,
            "minStartMs": summary.min_start_ms,
            "maxStartMs": summary.max_start_ms,
            "maxEndMs": summary.max_end_ms,
            "totalDurationMs": summary.total_duration_ms,
        },
        "trainingRun": None if run is None else {"src": run[0], "trg": run[1]},
    }


def write_graph_json(path: Path, graph: ConsolidatedGraph) -> None:
    _write_json(path, graph_to_json(graph))


def write_profile_json(path: Path, doc: TraceDocument) -> None:
    _write_json(path, to_profile(doc))
