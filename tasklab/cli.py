from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from tasklab.config import ANCHOR_POLICIES, TraceSettings
from tasklab.graph import consolidate_graph
from tasklab.io import (
    load_task_definition,
    load_task_groups,
    read_log_lines,
    write_graph_json,
    write_profile_json,
)
from tasklab.logging_setup import configure
from tasklab.logparse import fixup_rows, parse_lines
from tasklab.trace import build_trace
from tasklab.validate import TaskGroupValidationError

logger = logging.getLogger(__name__)


def _split_types(values: list[str] | None) -> list[str]:
    out: list[str] = []
    for v in values or []:
        out.extend(part for part in v.split(",") if part.strip())
    return out


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tasklab", description="CI task graph and live-log trace tools"
    )
    p.add_argument("--log-level", required=False, default=None)
    sub = p.add_subparsers(dest="cmd", required=True)

    graph = sub.add_parser("graph", help="Consolidate task-group dependency graphs")
    graph.add_argument("--task-group", required=True, type=Path, nargs="+")
    graph.add_argument("--merge-chunks", action="store_true")
    graph.add_argument(
        "--merge-task-type",
        action="append",
        default=None,
        help="Collapse '<type>-*' labels into one node (repeatable, comma lists ok)",
    )
    graph.add_argument("--out", required=True, type=Path)

    trace = sub.add_parser("trace", help="Build a timeline profile from a task's live log")
    trace.add_argument("--task", required=True, type=Path)
    trace.add_argument("--task-id", required=True)
    trace.add_argument("--log", required=True, type=Path)
    trace.add_argument("--out", required=True, type=Path)
    trace.add_argument("--server", required=False, default=None)
    trace.add_argument(
        "--anchor", required=False, default="first", choices=ANCHOR_POLICIES
    )
    return p


def _run_graph(args: argparse.Namespace) -> int:
    nodes = load_task_groups(args.task_group)
    graph = consolidate_graph(
        nodes,
        chunks=args.merge_chunks,
        task_types=_split_types(args.merge_task_type),
    )
    write_graph_json(args.out, graph)
    logger.info("wrote %d node(s) to %s", len(graph.nodes), args.out)
    return 0


def _run_trace(args: argparse.Namespace) -> int:
    settings = TraceSettings.from_values(server=args.server, anchor=args.anchor)
    task = load_task_definition(args.task, args.task_id)
    rows = fixup_rows(parse_lines(read_log_lines(args.log)))
    doc = build_trace(rows, task, settings)
    write_profile_json(args.out, doc)
    logger.info("wrote %d marker(s) to %s", len(doc.events), args.out)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = _build_parser()
    args = p.parse_args(argv)
    configure(args.log_level)

    try:
        if args.cmd == "graph":
            return _run_graph(args)
        if args.cmd == "trace":
            return _run_trace(args)
    except (TaskGroupValidationError, OSError, json.JSONDecodeError) as e:
        logger.error("%s", e)
        return 2

    raise AssertionError(f"Unhandled command: {args.cmd}")
