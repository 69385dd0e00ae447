from __future__ import annotations

import sys

import tasklab.cli as cli_module


def test_runner_delegates_to_tasklab_cli_main(monkeypatch):
    captured = {}

    def fake_cli_main(argv: list[str] | None = None) -> int:
        captured["argv"] = argv
        return 0

    monkeypatch.setattr(cli_module, "main", fake_cli_main)
    monkeypatch.setattr(sys, "argv", ["runner.py", "graph", "--out", "g.json"])

    import runner

    rc = runner.main()

    assert rc == 0
    assert captured["argv"] == ["graph", "--out", "g.json"]
