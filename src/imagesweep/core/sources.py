"""Collect referenced asset paths from the configured content sources."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from imagesweep.config import SourceSettings
from imagesweep.core.extractor import extract
from imagesweep.storage import ContentStoreError

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"


class ColumnReader(Protocol):
    """What the reader needs from a content store."""

    def resolve_table(self, template: str) -> str:
        """Return the concrete table name for a template."""

    def describe_query(self, table: str, column: str) -> str:
        """Return a printable form of the column query."""

    def fetch_column(self, table: str, column: str) -> Sequence[Any]:
        """Return every value stored in the column."""


@dataclass(frozen=True, slots=True)
class FieldScan:
    """Outcome of scanning one column of one table."""

    table: str
    column: str
    structured: bool
    status: str
    rows: int = 0
    references: frozenset[str] = frozenset()
    reason: str | None = None


@dataclass(slots=True)
class ReferenceCollection:
    """Union of every reference found, with the per-column results."""

    referenced: frozenset[str]
    scans: list[FieldScan] = field(default_factory=list)

    @property
    def skipped(self) -> list[FieldScan]:
        return [scan for scan in self.scans if scan.status == STATUS_SKIPPED]

    @property
    def rows(self) -> int:
        return sum(scan.rows for scan in self.scans)


@dataclass(frozen=True, slots=True)
class _Target:
    table: str
    column: str
    structured: bool


class SourceReader:
    """Scan content columns and accumulate the referenced set.

    Table templates are resolved once, when the reader is built.
    """

    def __init__(
        self,
        store: ColumnReader,
        sources: Iterable[SourceSettings],
        logger: logging.Logger,
    ) -> None:
        self.store = store
        self.logger = logger
        self._targets = [
            _Target(store.resolve_table(source.table), spec.name, spec.structured)
            for source in sources
            for spec in source.fields
        ]

    @property
    def targets(self) -> list[tuple[str, str]]:
        return [(target.table, target.column) for target in self._targets]

    def collect(self) -> ReferenceCollection:
        referenced: set[str] = set()
        scans: list[FieldScan] = []
        for target in self._targets:
            scan = self._scan(target)
            scans.append(scan)
            referenced.update(scan.references)
        self.logger.debug(
            "Collected %s referenced path(s) from %s column(s).", len(referenced), len(scans)
        )
        return ReferenceCollection(referenced=frozenset(referenced), scans=scans)

    def _scan(self, target: _Target) -> FieldScan:
        try:
            values = self.store.fetch_column(target.table, target.column)
        except ContentStoreError as exc:
            self.logger.warning(
                "Failed query: %s", self.store.describe_query(target.table, target.column)
            )
            self.logger.debug("Query failure detail: %s", exc)
            return FieldScan(
                table=target.table,
                column=target.column,
                structured=target.structured,
                status=STATUS_SKIPPED,
                reason=str(exc),
            )

        found: set[str] = set()
        for value in values:
            found.update(extract(value, target.structured))
        return FieldScan(
            table=target.table,
            column=target.column,
            structured=target.structured,
            status=STATUS_OK,
            rows=len(values),
            references=frozenset(found),
        )
