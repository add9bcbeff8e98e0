"""Disk inventory of the asset root.

Exclusion is a plain predicate over root-relative paths, so the same rule filters a real
directory walk or an in-memory list of paths.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath


@dataclass(frozen=True, slots=True)
class ExclusionRule:
    """Decide whether a root-relative path is kept out of the inventory."""

    asset_dir: str
    whitelist: tuple[str, ...] = ()
    quarantine: str | None = None

    def __call__(self, path: str) -> bool:
        return self.excludes(path)

    def excludes(self, path: str) -> bool:
        # Plain prefix test: "images/banners" also covers "images/banners-old".
        for folder in self.whitelist:
            if path.startswith(f"{self.asset_dir}/{folder}"):
                return True
        for prefix in self._quarantine_prefixes():
            if path == prefix.rstrip("/") or path.startswith(prefix):
                return True
        return False

    def _quarantine_prefixes(self) -> tuple[str, ...]:
        if not self.quarantine:
            return ()
        quarantine = self.quarantine.strip("/")
        nested = f"{self.asset_dir}/{PurePosixPath(quarantine).name}/"
        return (f"{quarantine}/", nested)


def walk_files(root: Path, asset_dir: str) -> Iterator[str]:
    """Yield root-relative paths of the regular files below ``root/asset_dir``.

    Symlinks and dot-entries are skipped.
    """

    base = root / asset_dir
    if not base.is_dir():
        return
    for current, dirnames, filenames in os.walk(base, followlinks=False):
        current_path = Path(current)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not name.startswith(".") and not (current_path / name).is_symlink()
        )
        for name in filenames:
            if name.startswith("."):
                continue
            candidate = current_path / name
            if candidate.is_symlink() or not candidate.is_file():
                continue
            yield candidate.relative_to(root).as_posix()


def build_inventory(paths: Iterable[str], rule: ExclusionRule) -> list[str]:
    """Filter, de-duplicate and sort root-relative paths."""

    kept = {path.replace("\\", "/") for path in paths}
    return sorted(path for path in kept if not rule(path))


def scan(
    root: Path,
    whitelist: Iterable[str],
    quarantine: str | None,
    asset_dir: str = "images",
) -> list[str]:
    """Return the sorted disk inventory for ``root/asset_dir``."""

    rule = ExclusionRule(asset_dir=asset_dir, whitelist=tuple(whitelist), quarantine=quarantine)
    return build_inventory(walk_files(root, asset_dir), rule)
