"""Read-only SQL access to the site's content tables."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

TABLE_PLACEHOLDER = "#__"


class ContentStoreError(Exception):
    """Base error for content store failures."""


class ContentStoreConnectionError(ContentStoreError):
    """Raised when the content store cannot be reached."""


class ContentStoreQueryError(ContentStoreError):
    """Raised when a single column query fails."""


class ContentStore:
    """SQLAlchemy-backed reader for content columns.

    Table names are written as templates (``#__content``); the placeholder is replaced with the
    configured prefix by :meth:`resolve_table`.
    """

    def __init__(
        self,
        url: str | URL,
        *,
        prefix: str = "",
        placeholder: str = TABLE_PLACEHOLDER,
    ) -> None:
        self.url = url
        self.prefix = prefix
        self.placeholder = placeholder
        self._engine: Engine | None = None

    def __enter__(self) -> ContentStore:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> None:
        """Create the engine and verify the server answers."""

        if self._engine is not None:
            return
        try:
            engine = create_engine(self.url)
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except (SQLAlchemyError, ImportError, ValueError) as exc:
            raise ContentStoreConnectionError(str(exc)) from exc
        self._engine = engine

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def resolve_table(self, template: str) -> str:
        """Replace the prefix placeholder in a table template."""

        return template.replace(self.placeholder, self.prefix)

    def describe_query(self, table: str, column: str) -> str:
        return f"SELECT `{column}` FROM `{table}`"

    def fetch_column(self, table: str, column: str) -> list[Any]:
        """Return every value of ``column`` in ``table``."""

        if self._engine is None:
            raise ContentStoreQueryError("Content store is not connected.")
        preparer = self._engine.dialect.identifier_preparer
        statement = text(
            f"SELECT {preparer.quote(column)} FROM {preparer.quote(table)}"
        )
        try:
            with self._engine.connect() as connection:
                return list(connection.execute(statement).scalars())
        except SQLAlchemyError as exc:
            raise ContentStoreQueryError(str(exc)) from exc
