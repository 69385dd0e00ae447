from __future__ import annotations

"""Task graph sanitization, consolidation and reverse adjacency.

Every function here takes a node list snapshot and returns a new one; nodes
are frozen, so a pass never mutates what the caller handed in.

Pipeline order (see `consolidate_graph`):

    sanitize -> chunk merge (optional) -> sanitize
             -> type merge per requested type, sanitizing after each
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from tasklab.merge import ChunkMerge, MergeStrategy, TaskTypeMerge, task_type_strategies
from tasklab.types import TaskNode

logger = logging.getLogger(__name__)


def sanitize_dependencies(nodes: Sequence[TaskNode]) -> list[TaskNode]:
    """Drop dependency ids that do not name a node in `nodes`.

    Relative order is kept and duplicates are left alone. Idempotent.
    """

    present = {n.task_id for n in nodes}
    out: list[TaskNode] = []
    pruned = 0
    for node in nodes:
        kept = tuple(d for d in node.dependencies if d in present)
        if len(kept) != len(node.dependencies):
            pruned += len(node.dependencies) - len(kept)
            node = replace(node, dependencies=kept)
        out.append(node)
    if pruned:
        logger.debug("pruned %d dangling dependency edge(s)", pruned)
    return out


def _union(first: Iterable[str], second: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys([*first, *second]))


def consolidate(nodes: Sequence[TaskNode], strategy: MergeStrategy) -> list[TaskNode]:
    """Run one merge pass of `strategy` over `nodes`.

    The first node seen for a merge key survives; later nodes for that key
    are folded into it (runs appended, dependencies unioned) and every edge
    pointing at a folded node is redirected to its survivor.
    """

    # Arena indexed by input position; survivors are rewritten through it.
    arena: list[TaskNode] = list(nodes)
    emitted: list[int] = []
    survivor_for_key: dict[str, int] = {}
    redirects: dict[str, str] = {}

    for i, node in enumerate(nodes):
        key = strategy.merge_key(node.label)
        if key is None:
            emitted.append(i)
            continue

        s = survivor_for_key.get(key)
        if s is None:
            survivor_for_key[key] = i
            arena[i] = replace(node, label=strategy.survivor_label(node.label))
            emitted.append(i)
            continue

        survivor = arena[s]
        redirects[node.task_id] = survivor.task_id
        arena[s] = replace(
            survivor,
            label=strategy.merged_label(survivor.label),
            runs=survivor.runs + node.runs,
            dependencies=_union(survivor.dependencies, node.dependencies),
        )

    out: list[TaskNode] = []
    for i in emitted:
        node = arena[i]
        # Survivors are never redirected in the same pass, so one hop suffices.
        deps = (redirects.get(d, d) for d in node.dependencies)
        rewritten = tuple(dict.fromkeys(deps))
        if rewritten != node.dependencies:
            node = replace(node, dependencies=rewritten)
        out.append(node)

    if redirects:
        logger.debug(
            "%s folded %d node(s) into %d survivor(s)",
            type(strategy).__name__,
            len(redirects),
            len(set(redirects.values())),
        )
    return out


def merge_chunks(nodes: Sequence[TaskNode]) -> list[TaskNode]:
    return consolidate(nodes, ChunkMerge())


def merge_task_type(nodes: Sequence[TaskNode], task_type: str) -> list[TaskNode]:
    return consolidate(nodes, TaskTypeMerge(task_type=task_type))


def merge_task_types(
    nodes: Sequence[TaskNode], task_types: Sequence[str]
) -> list[TaskNode]:
    """Fold one type-merge pass per distinct type, sanitizing after each."""

    out = list(nodes)
    for strategy in task_type_strategies(tuple(task_types)):
        out = sanitize_dependencies(consolidate(out, strategy))
    return out


def dependents_index(nodes: Sequence[TaskNode]) -> dict[str, list[str]]:
    """Map each node id to the sorted ids of nodes that depend on it.

    One entry per edge, so a repeated dependency is listed twice. Ids nobody
    depends on are absent from the result.
    """

    found: dict[str, list[str]] = {}
    for node in nodes:
        for dep in node.dependencies:
            found.setdefault(dep, []).append(node.task_id)
    return {dep: sorted(ids) for dep, ids in found.items()}


@dataclass(frozen=True)
class ConsolidatedGraph:
    nodes: tuple[TaskNode, ...]
    dependents: dict[str, list[str]]


def consolidate_graph(
    nodes: Sequence[TaskNode],
    *,
    chunks: bool = False,
    task_types: Sequence[str] = (),
) -> ConsolidatedGraph:
    out = sanitize_dependencies(nodes)
    if chunks:
        out = merge_chunks(out)
    out = sanitize_dependencies(out)
    out = merge_task_types(out, task_types)

    logger.debug("consolidated %d task(s) into %d node(s)", len(nodes), len(out))
    return ConsolidatedGraph(nodes=tuple(out), dependents=dependents_index(out))

