"""Read database settings from a Joomla ``configuration.php`` without running PHP."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import URL

_ASSIGNMENT = re.compile(
    r"""(?:public|var)\s+\$(?P<name>\w+)\s*=\s*
        (?:'(?P<single>(?:[^'\\]|\\.)*)'
          |"(?P<double>(?:[^"\\]|\\.)*)"
          |(?P<bare>[^;\s]+))
        \s*;""",
    re.VERBOSE,
)
_ESCAPE = re.compile(r"\\(.)")

MYSQL_TYPES = frozenset({"mysql", "mysqli", "pdomysql"})


@dataclass(frozen=True, slots=True)
class JoomlaSettings:
    """Connection values declared in a Joomla ``JConfig`` class."""

    dbtype: str
    host: str
    user: str
    password: str
    db: str
    dbprefix: str

    def url(self, *, charset: str = "utf8mb4") -> URL:
        """Build a SQLAlchemy URL for the declared database."""

        if self.dbtype.lower() not in MYSQL_TYPES:
            raise ValueError(f"Unsupported Joomla database type: {self.dbtype!r}")
        host, port = _split_host(self.host)
        return URL.create(
            "mysql+pymysql",
            username=self.user or None,
            password=self.password or None,
            host=host or None,
            port=port,
            database=self.db or None,
            query={"charset": charset},
        )


def parse_joomla_config(content: str) -> dict[str, str]:
    """Return the scalar assignments found in a ``configuration.php`` body."""

    values: dict[str, str] = {}
    for match in _ASSIGNMENT.finditer(content):
        if match.group("single") is not None:
            value = _ESCAPE.sub(r"\1", match.group("single"))
        elif match.group("double") is not None:
            value = _ESCAPE.sub(r"\1", match.group("double"))
        else:
            value = match.group("bare")
        values[match.group("name")] = value
    return values


def read_joomla_config(path: Path) -> JoomlaSettings:
    """Load the database section of a Joomla configuration file."""

    values = parse_joomla_config(path.read_text(encoding="utf-8", errors="replace"))
    return JoomlaSettings(
        dbtype=values.get("dbtype", "mysqli"),
        host=values.get("host", "localhost"),
        user=values.get("user", ""),
        password=values.get("password", ""),
        db=values.get("db", ""),
        dbprefix=values.get("dbprefix", ""),
    )


def _split_host(host: str) -> tuple[str, int | None]:
    name, sep, port = host.rpartition(":")
    if sep and port.isdigit():
        return name, int(port)
    return host, None
