from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from tasklab.model import epoch_ms
from tasklab.types import TaskNode

_TRAINING_RUN = re.compile(r"^all-(\w+)-(\w+)$")


@dataclass(frozen=True)
class NodeTiming:
    task_id: str
    duration_ms: float  # summed over completed runs
    start_ms: float  # epoch ms, earliest completed start
    end_ms: float  # epoch ms, latest completed resolve


@dataclass(frozen=True)
class TimingSummary:
    min_duration_ms: float
    max_duration_ms: float
    min_start_ms: float
    max_start_ms: float
    max_end_ms: float
    total_duration_ms: float


def node_timing(node: TaskNode) -> NodeTiming | None:
    """Timing over completed runs; None when no run completed with timestamps."""

    runs = [
        r
        for r in node.runs
        if r.is_completed and r.started is not None and r.resolved is not None
    ]
    if not runs:
        return None

    starts = np.array([epoch_ms(r.started) for r in runs], dtype=np.float64)
    ends = np.array([epoch_ms(r.resolved) for r in runs], dtype=np.float64)
    return NodeTiming(
        task_id=node.task_id,
        duration_ms=float(np.sum(ends - starts)),
        start_ms=float(starts.min()),
        end_ms=float(ends.max()),
    )


def node_timings(nodes: Sequence[TaskNode]) -> list[NodeTiming]:
    out: list[NodeTiming] = []
    for node in nodes:
        t = node_timing(node)
        if t is not None:
            out.append(t)
    return out


def summarize(timings: Sequence[NodeTiming]) -> TimingSummary | None:
    if not timings:
        return None

    durations = np.array([t.duration_ms for t in timings], dtype=np.float64)
    starts = np.array([t.start_ms for t in timings], dtype=np.float64)
    ends = np.array([t.end_ms for t in timings], dtype=np.float64)
    return TimingSummary(
        min_duration_ms=float(durations.min()),
        max_duration_ms=float(durations.max()),
        min_start_ms=float(starts.min()),
        max_start_ms=float(starts.max()),
        max_end_ms=float(ends.max()),
        total_duration_ms=float(ends.max() - starts.min()),
    )


def task_type(label: str | None, depth: int = 1) -> str:
    """First `depth` dash-separated parts of `label`, or "" if it is shorter."""

    if not label:
        return ""
    parts = label.split("-")
    if len(parts) < depth:
        return ""
    return "-".join(parts[:depth])


def task_type_groups(nodes: Sequence[TaskNode]) -> dict[str, int]:
    """Node id -> index of its first-level task type, in first-seen order."""

    types: dict[str, int] = {}
    out: dict[str, int] = {}
    for node in nodes:
        t = task_type(node.label, 1)
        out[node.task_id] = types.setdefault(t, len(types))
    return out


def training_run(nodes: Sequence[TaskNode]) -> tuple[str, str] | None:
    for node in nodes:
        m = _TRAINING_RUN.match(node.label or "")
        if m:
            return m.group(1), m.group(2)
    return None
