"""Move, delete or report unused assets, one file at a time."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ActionOutcome(str, Enum):
    """Terminal state of one unused asset."""

    MOVED = "moved"
    DELETED = "deleted"
    DRY_RUN = "dry-run-reported"
    SKIPPED_MISSING = "skipped-missing"
    FAILED = "failed"


class ActionMode(str, Enum):
    MOVE = "move"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class ActionRecord:
    """What happened to a single asset."""

    path: str
    outcome: ActionOutcome
    destination: str | None = None
    reason: str | None = None


@dataclass(slots=True)
class ActionExecutor:
    """Apply the configured action to each unused asset.

    Every outcome is logged before the next file is touched, so the audit log always reflects
    the files already processed.
    """

    root: Path
    quarantine_root: Path
    asset_dir: str
    logger: logging.Logger
    mode: ActionMode = ActionMode.MOVE
    dry_run: bool = False

    def destination_for(self, path: str) -> Path:
        """Map ``images/a/b.jpg`` to ``<quarantine>/a/b.jpg``."""

        prefix = f"{self.asset_dir}/"
        relative = path[len(prefix):] if path.startswith(prefix) else path
        return self.quarantine_root / relative

    def execute_all(self, paths: Iterable[str]) -> list[ActionRecord]:
        return [self.execute(path) for path in paths]

    def execute(self, path: str) -> ActionRecord:
        source = self.root / path
        destination = self.destination_for(path)
        shown = self._display(destination)

        if not source.is_file():
            self.logger.info("Missing (skipped): %s", path)
            return ActionRecord(path, ActionOutcome.SKIPPED_MISSING)

        if self.dry_run:
            if self.mode is ActionMode.DELETE:
                self.logger.info("[DRY RUN] Would delete: %s", path)
                return ActionRecord(path, ActionOutcome.DRY_RUN)
            self.logger.info("[DRY RUN] Would move: %s -> %s", path, shown)
            return ActionRecord(path, ActionOutcome.DRY_RUN, destination=shown)

        if self.mode is ActionMode.DELETE:
            return self._delete(source, path)
        return self._move(source, destination, path, shown)

    def _delete(self, source: Path, path: str) -> ActionRecord:
        try:
            source.unlink()
        except OSError as exc:
            self.logger.error("FAILED to delete: %s (%s)", path, exc)
            return ActionRecord(path, ActionOutcome.FAILED, reason=str(exc))
        self.logger.info("Deleted: %s", path)
        return ActionRecord(path, ActionOutcome.DELETED)

    def _move(self, source: Path, destination: Path, path: str, shown: str) -> ActionRecord:
        # The quarantined copy may be the only one left; never overwrite it.
        if destination.exists() or destination.is_symlink():
            reason = "destination exists"
            self.logger.error("FAILED to move: %s (%s: %s)", path, reason, shown)
            return ActionRecord(path, ActionOutcome.FAILED, destination=shown, reason=reason)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(destination))
        except OSError as exc:
            self.logger.error("FAILED to move: %s (%s)", path, exc)
            return ActionRecord(path, ActionOutcome.FAILED, destination=shown, reason=str(exc))
        self.logger.info("Moved: %s -> %s", path, shown)
        return ActionRecord(path, ActionOutcome.MOVED, destination=shown)

    def _display(self, destination: Path) -> str:
        try:
            return destination.relative_to(self.root).as_posix()
        except ValueError:
            return destination.as_posix()
