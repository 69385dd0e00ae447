from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _add_repo_root_to_syspath() -> None:
    """Make `runner.py` importable when running tests from `tests/`.

    Some PyTest invocations end up with `tests/` as the import root. Ensure
    the repo root is on `sys.path` so `import runner` works.
    """

    root = Path(__file__).resolve().parents[1]
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


@pytest.fixture(autouse=True)
def _detach_tasklab_log_handlers():
    """`tasklab.cli.main` installs a stderr handler; don't leak it across tests."""

    yield
    logger = logging.getLogger("tasklab")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
