from __future__ import annotations

"""Repo-root convenience shim for the tasklab CLI.

    python runner.py graph --task-group group.json --out graph.json

It delegates to the canonical entry point:

    python -m tasklab
"""

import sys


def main() -> int:
    """Run the tasklab CLI with this process's arguments."""

    from tasklab.cli import main as cli_main

    return cli_main(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
