"""Imagesweep: quarantine media files that no content row references."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path

PROJECT_NAME = "imagesweep"


def _source_checkout_version(start: Path) -> str | None:
    for candidate in (start, *start.parents):
        pyproject = candidate / "pyproject.toml"
        if not pyproject.is_file():
            continue
        try:
            with pyproject.open("rb") as handle:
                project = tomllib.load(handle).get("project")
        except (OSError, tomllib.TOMLDecodeError):  # pragma: no cover - filesystem errors
            return None
        if not isinstance(project, dict) or project.get("name") != PROJECT_NAME:
            return None
        version = project.get("version")
        if isinstance(version, str) and version.strip():
            return version.strip()
        return None
    return None


@lru_cache(maxsize=1)
def get_version() -> str:
    """Return the Imagesweep version.

    A source checkout reads `[project].version` from `pyproject.toml`; an installed copy falls
    back to the package metadata generated from the same file.
    """

    version = _source_checkout_version(Path(__file__).resolve().parent)
    if version is not None:
        return version

    try:
        return metadata.version(PROJECT_NAME)
    except metadata.PackageNotFoundError as exc:  # pragma: no cover - occurs in dev
        raise RuntimeError("Unable to determine Imagesweep version.") from exc


__all__ = ["get_version"]
