"""Orchestrator for Imagesweep runs."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime

from imagesweep.config import Config
from imagesweep.core.actions import ActionExecutor, ActionMode, ActionOutcome, ActionRecord
from imagesweep.core.inventory import scan
from imagesweep.core.reconciler import reconcile
from imagesweep.core.sources import FieldScan, SourceReader
from imagesweep.storage import ContentStore, ContentStoreConnectionError


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Flags selected on the command line."""

    dry_run: bool = False
    delete: bool = False
    quiet: bool = False

    @property
    def mode(self) -> ActionMode:
        return ActionMode.DELETE if self.delete else ActionMode.MOVE


@dataclass(slots=True)
class RunSummary:
    """Result of a completed run."""

    started_at: str
    mode: ActionMode
    dry_run: bool
    referenced: int = 0
    inventoried: int = 0
    unused: list[str] = field(default_factory=list)
    skipped_fields: list[FieldScan] = field(default_factory=list)
    actions: list[ActionRecord] = field(default_factory=list)
    completed_at: str | None = None

    @property
    def outcome_counts(self) -> dict[str, int]:
        counts = Counter(record.outcome.value for record in self.actions)
        return {outcome.value: counts.get(outcome.value, 0) for outcome in ActionOutcome}


def _utcnow() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True)
class Orchestrator:
    """Run the four phases in order: references, inventory, difference, actions."""

    config: Config
    store: ContentStore
    logger: logging.Logger

    def run(self, options: RunOptions | None = None) -> RunSummary:
        options = options or RunOptions()
        summary = RunSummary(started_at=_utcnow(), mode=options.mode, dry_run=options.dry_run)
        paths = self.config.paths

        self.logger.info("=== Image Cleanup Started ===")
        if options.dry_run:
            self.logger.info("Dry run: no files will be %s.", _past_tense(options.mode))

        try:
            self.store.connect()
        except ContentStoreConnectionError as exc:
            self.logger.error("DB connection failed: %s", exc)
            raise

        try:
            self.logger.info("Scanning database...")
            reader = SourceReader(self.store, self.config.sources, self.logger)
            collection = reader.collect()
        finally:
            self.store.close()
        summary.referenced = len(collection.referenced)
        summary.skipped_fields = collection.skipped

        self.logger.info("Scanning /%s directory...", paths.assets_dir)
        if not self.config.asset_root.is_dir():
            self.logger.warning("Asset root %s does not exist.", self.config.asset_root)
        inventory = scan(
            self.config.root,
            paths.whitelist,
            paths.quarantine_dir,
            asset_dir=paths.assets_dir,
        )
        summary.inventoried = len(inventory)

        summary.unused = reconcile(inventory, collection.referenced)
        self.logger.info("Unused images detected: %s", len(summary.unused))

        executor = ActionExecutor(
            root=self.config.root,
            quarantine_root=self.config.quarantine_root,
            asset_dir=paths.assets_dir,
            logger=self.logger,
            mode=options.mode,
            dry_run=options.dry_run,
        )
        summary.actions = executor.execute_all(summary.unused)

        summary.completed_at = _utcnow()
        self.logger.info("=== Image Cleanup Complete ===")
        return summary


def _past_tense(mode: ActionMode) -> str:
    return "deleted" if mode is ActionMode.DELETE else "moved"
