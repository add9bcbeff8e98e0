"""Tests for full reconciliation runs."""

from __future__ import annotations

import hashlib

import pytest

from imagesweep.config.loader import Config, ConfigModel
from imagesweep.core import ActionMode, ActionOutcome, Orchestrator, RunOptions
from imagesweep.storage import ContentStore, ContentStoreConnectionError

UNUSED = ["images/gallery/orphan.png", "images/orphan.jpg"]


def _config(root) -> Config:
    model = ConfigModel.model_validate(
        {
            "paths": {"root": str(root), "whitelist": ["banners", "headers"]},
            "database": {"joomla_config": None},
            "sources": [
                {
                    "table": "#__content",
                    "fields": ["introtext", "fulltext", {"name": "images", "structured": True}],
                },
                {"table": "#__menu", "fields": [{"name": "params", "structured": True}]},
                {"table": "#__fields_values", "fields": [{"name": "value", "structured": True}]},
            ],
        }
    )
    return Config(model=model)


def _store(root) -> ContentStore:
    return ContentStore(f"sqlite:///{root / 'site.sqlite'}", prefix="jos_")


def _snapshot(root):
    return {
        path.relative_to(root).as_posix(): hashlib.sha256(path.read_bytes()).hexdigest()
        for path in sorted(root.rglob("*"))
        if path.is_file() and path.suffix != ".sqlite"
    }


def test_move_run_quarantines_unreferenced_files(site, logger):
    orchestrator = Orchestrator(config=_config(site), store=_store(site), logger=logger)

    summary = orchestrator.run()

    assert summary.mode is ActionMode.MOVE
    assert summary.unused == UNUSED
    assert summary.referenced == 3
    assert summary.inventoried == 5
    assert [(scan.table, scan.column) for scan in summary.skipped_fields] == [
        ("jos_menu", "params")
    ]
    assert summary.outcome_counts[ActionOutcome.MOVED.value] == 2
    assert (site / "unused/gallery/orphan.png").exists()
    assert (site / "unused/orphan.jpg").exists()
    assert not (site / "images/orphan.jpg").exists()
    assert (site / "images/banners/never-referenced.jpg").exists()
    assert (site / "images/headers/logo.png").exists()
    assert (site / "images/.hidden.jpg").exists()
    assert summary.completed_at is not None


def test_dry_run_leaves_tree_identical(site, logger, caplog):
    before = _snapshot(site)
    orchestrator = Orchestrator(config=_config(site), store=_store(site), logger=logger)

    with caplog.at_level("INFO", logger=logger.name):
        summary = orchestrator.run(RunOptions(dry_run=True))

    assert _snapshot(site) == before
    assert not (site / "unused").exists()
    assert [record.outcome for record in summary.actions] == [ActionOutcome.DRY_RUN] * 2
    assert "[DRY RUN] Would move: images/orphan.jpg -> unused/orphan.jpg" in caplog.text
    assert "Unused images detected: 2" in caplog.text


def test_delete_run_removes_files(site, logger):
    orchestrator = Orchestrator(config=_config(site), store=_store(site), logger=logger)

    summary = orchestrator.run(RunOptions(delete=True))

    assert summary.outcome_counts[ActionOutcome.DELETED.value] == 2
    assert not (site / "images/orphan.jpg").exists()
    assert not (site / "unused").exists()


def test_second_run_finds_nothing_new(site, logger):
    first = Orchestrator(config=_config(site), store=_store(site), logger=logger).run()
    second = Orchestrator(config=_config(site), store=_store(site), logger=logger).run()

    assert first.unused == UNUSED
    assert second.unused == []
    assert second.actions == []
    assert (site / "unused/orphan.jpg").exists()


def test_quarantine_inside_asset_root_is_never_rescanned(site, logger):
    model = _config(site).model
    nested = model.model_copy(
        update={"paths": model.paths.model_copy(update={"quarantine_dir": "images/unused"})}
    )
    config = Config(model=nested)

    Orchestrator(config=config, store=_store(site), logger=logger).run()
    second = Orchestrator(config=config, store=_store(site), logger=logger).run()

    assert (site / "images/unused/orphan.jpg").exists()
    assert second.unused == []


def test_connection_failure_is_fatal(tmp_path, site, logger, caplog):
    before = _snapshot(site)
    store = ContentStore(f"sqlite:///{tmp_path / 'nowhere' / 'db.sqlite'}")
    orchestrator = Orchestrator(config=_config(site), store=store, logger=logger)

    with caplog.at_level("INFO", logger=logger.name):
        with pytest.raises(ContentStoreConnectionError):
            orchestrator.run()

    assert "DB connection failed" in caplog.text
    assert "Scanning database..." not in caplog.text
    assert _snapshot(site) == before


def test_uncreatable_quarantine_reports_failures(site, logger, caplog):
    (site / "unused").write_bytes(b"not a directory")
    orchestrator = Orchestrator(config=_config(site), store=_store(site), logger=logger)

    with caplog.at_level("INFO", logger=logger.name):
        summary = orchestrator.run()

    assert summary.unused == UNUSED
    assert [record.outcome for record in summary.actions] == [ActionOutcome.FAILED] * 2
    assert all(record.reason for record in summary.actions)
    assert (site / "images/orphan.jpg").exists()
    assert (site / "images/gallery/orphan.png").exists()
    assert (site / "unused").read_bytes() == b"not a directory"
    assert "FAILED to move: images/orphan.jpg" in caplog.text
    assert "=== Image Cleanup Complete ===" in caplog.text
