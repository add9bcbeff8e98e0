"""Shared fixtures for Imagesweep tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text


def build_site_database(path: Path, tables: Mapping[str, Mapping[str, Iterable[object]]]) -> str:
    """Create a SQLite database holding ``{table: {column: values}}`` and return its URL."""

    url = f"sqlite:///{path}"
    engine = create_engine(url)
    with engine.begin() as connection:
        for table, columns in tables.items():
            names = list(columns)
            column_sql = ", ".join(f'"{name}" TEXT' for name in names)
            connection.execute(text(f'CREATE TABLE "{table}" ({column_sql})'))
            rows = list(zip(*(list(values) for values in columns.values())))
            placeholders = ", ".join(f":c{index}" for index in range(len(names)))
            quoted = ", ".join(f'"{name}"' for name in names)
            for row in rows:
                connection.execute(
                    text(f'INSERT INTO "{table}" ({quoted}) VALUES ({placeholders})'),
                    {f"c{index}": value for index, value in enumerate(row)},
                )
    engine.dispose()
    return url


def write_file(path: Path, content: bytes = b"data") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def logger() -> logging.Logger:
    test_logger = logging.getLogger("imagesweep-test")
    test_logger.setLevel(logging.DEBUG)
    return test_logger


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A small Joomla-like site: an asset tree and a content database."""

    root = tmp_path / "site"
    for relative in (
        "images/used.jpg",
        "images/orphan.jpg",
        "images/gallery/used space.png",
        "images/gallery/orphan.png",
        "images/banners/never-referenced.jpg",
        "images/headers/logo.png",
        "images/.hidden.jpg",
        "images/field.jpg",
    ):
        write_file(root / relative)

    build_site_database(
        root / "site.sqlite",
        {
            "jos_content": {
                "introtext": ['<img src="images/used.jpg">', None],
                "fulltext": ["<p>text</p>", '<img src="/images/gallery/used%20space.png">'],
                "images": [json.dumps({"image_intro": "", "image_fulltext": ""}), "{broken"],
            },
            "jos_fields_values": {
                "value": [json.dumps({"imagefile": "images/field.jpg#joomlaImage://x"})],
            },
        },
    )
    return root
