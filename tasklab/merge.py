from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

# Trailing "-<index>/<count>" chunk suffix, e.g. "test-linux-3/8".
_CHUNK_SUFFIX = re.compile(r"(.*)-\d+/\d+")


class MergeStrategy(Protocol):
    def merge_key(self, label: str | None) -> str | None:
        """Key shared by nodes that collapse together, or None to pass through."""
        raise NotImplementedError

    def survivor_label(self, label: str | None) -> str | None:
        """Label given to the first node seen for a key."""
        raise NotImplementedError

    def merged_label(self, label: str | None) -> str | None:
        """Label given to a survivor once a peer has merged into it."""
        raise NotImplementedError


@dataclass(frozen=True)
class ChunkMerge:
    def _base_label(self, label: str | None) -> str | None:
        if label is None:
            return None
        m = _CHUNK_SUFFIX.fullmatch(label)
        return m.group(1) if m else None

    def merge_key(self, label: str | None) -> str | None:
        base = self._base_label(label)
        return None if base is None else "chunk:" + base

    def survivor_label(self, label: str | None) -> str | None:
        base = self._base_label(label)
        return label if base is None else base

    def merged_label(self, label: str | None) -> str | None:
        return label


@dataclass(frozen=True)
class TaskTypeMerge:
    task_type: str

    def __post_init__(self) -> None:
        if not self.task_type:
            raise ValueError("task_type must be a non-empty string")

    def merge_key(self, label: str | None) -> str | None:
        if label is not None and label.startswith(self.task_type + "-"):
            return "type:" + self.task_type
        return None

    def survivor_label(self, label: str | None) -> str | None:
        # A lone match keeps its own label.
        return label

    def merged_label(self, label: str | None) -> str | None:
        return f"{self.task_type} (merged)"


def task_type_strategies(task_types: list[str] | tuple[str, ...]) -> list[TaskTypeMerge]:
    """One strategy per distinct requested type, first-seen order."""

    seen: set[str] = set()
    out: list[TaskTypeMerge] = []
    for t in task_types:
        t = t.strip()
        if not t or t in seen:
            continue
        seen.add(t)
        out.append(TaskTypeMerge(task_type=t))
    return out
