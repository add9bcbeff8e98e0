"""JSON run report writer."""

from __future__ import annotations

import json
import platform
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from imagesweep import get_version
from imagesweep.config import Config
from imagesweep.core.orchestrator import RunSummary


def build_run_report(summary: RunSummary, config: Config) -> dict[str, Any]:
    """Describe a finished run as a JSON-serializable mapping."""

    return {
        "run": {
            "started_at": summary.started_at,
            "completed_at": summary.completed_at,
            "mode": summary.mode.value,
            "dry_run": summary.dry_run,
        },
        "paths": {
            "root": str(config.root),
            "assets_dir": config.paths.assets_dir,
            "quarantine_dir": config.paths.quarantine_dir,
            "whitelist": list(config.paths.whitelist),
        },
        "stats": {
            "referenced": summary.referenced,
            "inventoried": summary.inventoried,
            "unused": len(summary.unused),
            "outcomes": summary.outcome_counts,
        },
        "skipped_fields": [
            {"table": scan.table, "column": scan.column, "reason": scan.reason}
            for scan in summary.skipped_fields
        ],
        "actions": [
            {
                "path": record.path,
                "outcome": record.outcome.value,
                "destination": record.destination,
                "reason": record.reason,
            }
            for record in summary.actions
        ],
        "environment": {
            "imagesweep_version": get_version(),
            "python_version": platform.python_version(),
        },
    }


def write_run_report(summary: RunSummary, config: Config, directory: Path) -> Path:
    """Write ``run-<timestamp>.json`` into ``directory`` and return its path."""

    directory.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
    report_path = directory / f"run-{stamp}.json"
    report_path.write_text(
        json.dumps(build_run_report(summary, config), indent=2), encoding="utf-8"
    )
    return report_path
