"""Tests for the JSON run report."""

from __future__ import annotations

import json

from imagesweep.config.loader import Config, ConfigModel
from imagesweep.core import ActionMode, ActionOutcome, ActionRecord, FieldScan, RunSummary
from imagesweep.core.sources import STATUS_SKIPPED
from imagesweep.reports import write_run_report


def test_write_run_report(tmp_path):
    model = ConfigModel.model_validate({"paths": {"root": str(tmp_path)}})
    config = Config(model=model)
    summary = RunSummary(
        started_at="2024-05-01T10:00:00+00:00",
        completed_at="2024-05-01T10:00:02+00:00",
        mode=ActionMode.MOVE,
        dry_run=False,
        referenced=4,
        inventoried=6,
        unused=["images/a.jpg", "images/b.jpg"],
        skipped_fields=[
            FieldScan("jos_menu", "params", True, STATUS_SKIPPED, reason="no such table")
        ],
        actions=[
            ActionRecord("images/a.jpg", ActionOutcome.MOVED, destination="unused/a.jpg"),
            ActionRecord("images/b.jpg", ActionOutcome.FAILED, reason="denied"),
        ],
    )

    path = write_run_report(summary, config, tmp_path / "reports")

    assert path.parent == tmp_path / "reports"
    assert path.name.startswith("run-") and path.suffix == ".json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["run"]["mode"] == "move"
    assert data["stats"]["unused"] == 2
    assert data["stats"]["outcomes"] == {
        "moved": 1,
        "deleted": 0,
        "dry-run-reported": 0,
        "skipped-missing": 0,
        "failed": 1,
    }
    assert data["skipped_fields"] == [
        {"table": "jos_menu", "column": "params", "reason": "no such table"}
    ]
    assert data["actions"][1] == {
        "path": "images/b.jpg",
        "outcome": "failed",
        "destination": None,
        "reason": "denied",
    }
    assert data["paths"]["whitelist"] == ["banners", "headers", "sampledata"]
