"""Headless CI task-graph consolidation and log-trace synthesis.

Two engines live here:

- `tasklab.graph` sanitizes and consolidates task dependency graphs.
- `tasklab.trace` turns parsed live-log rows into a timeline profile.

Run from source:

    python -m tasklab --help
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
