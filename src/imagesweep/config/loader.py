"""Configuration loading for Imagesweep."""

from __future__ import annotations

import os
from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from sqlalchemy.engine import URL

from imagesweep.config.joomla import read_joomla_config

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
LOCAL_CONFIG_PATH = Path("config/local.yaml")

DATABASE_URL_ENV = "IMAGESWEEP_DATABASE_URL"
DATABASE_PREFIX_ENV = "IMAGESWEEP_DB_PREFIX"


class LoggingSettings(BaseModel):
    """Audit log configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Path = Path("cleanup-log.txt")
    level: str = Field(default="info")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("Logging level must be a string.")
        normalized = value.strip().lower()
        if normalized not in {"debug", "info", "warn", "warning", "error", "critical"}:
            raise ValueError(f"Unsupported logging level: {value!r}")
        return normalized


class PathSettings(BaseModel):
    """Filesystem layout: asset root, quarantine root and untouchable folders."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: Path = Path(".")
    assets_dir: str = "images"
    quarantine_dir: str = "unused"
    whitelist: tuple[str, ...] = ("banners", "headers", "sampledata")

    @field_validator("assets_dir", "quarantine_dir", mode="before")
    @classmethod
    def _normalize_dir(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError("Directory names must be strings.")
        cleaned = value.replace("\\", "/").strip().strip("/")
        if not cleaned:
            raise ValueError("Directory names must not be empty.")
        return cleaned

    @field_validator("whitelist", mode="before")
    @classmethod
    def _normalize_whitelist(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if not isinstance(value, (list, tuple)):
            raise TypeError("whitelist must be a list of folder names.")
        cleaned: list[str] = []
        for item in value:
            if not isinstance(item, str):
                raise TypeError("whitelist entries must be strings.")
            folder = item.strip().strip("/")
            if folder and folder not in cleaned:
                cleaned.append(folder)
        return tuple(cleaned)


class DatabaseSettings(BaseModel):
    """Content store connection settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str | None = None
    driver: str = "mysql+pymysql"
    host: str = "localhost"
    port: int | None = Field(default=None, ge=1, le=65535)
    user: str | None = None
    password: str | None = None
    name: str | None = None
    prefix: str | None = None
    charset: str = "utf8mb4"
    joomla_config: Path | None = Path("configuration.php")


class FieldSettings(BaseModel):
    """A column to scan and whether it holds JSON."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    structured: bool = False


class SourceSettings(BaseModel):
    """A content table and the columns that may reference assets."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    table: str
    fields: tuple[FieldSettings, ...] = ()

    @field_validator("fields", mode="before")
    @classmethod
    def _expand_shorthand(cls, value: Any) -> Any:
        if value is None:
            return ()
        if not isinstance(value, (list, tuple)):
            raise TypeError("fields must be a list.")
        # A bare string names an unstructured column.
        return [{"name": item} if isinstance(item, str) else item for item in value]


class OutputSettings(BaseModel):
    """Optional run report output."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    report_dir: Path | None = None


class ConfigModel(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: int = 1
    paths: PathSettings = Field(default_factory=PathSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    sources: tuple[SourceSettings, ...] = ()
    outputs: OutputSettings = Field(default_factory=OutputSettings)

    @model_validator(mode="after")
    def _validate_sources(self) -> ConfigModel:
        tables = [source.table for source in self.sources]
        if len(set(tables)) != len(tables):
            raise ValueError("Source tables must be unique.")
        return self


@dataclass(frozen=True, slots=True)
class DatabaseTarget:
    """Resolved connection URL and table prefix."""

    url: str | URL
    prefix: str
    origin: str


@dataclass(frozen=True, slots=True)
class Config:
    """Validated configuration with convenience helpers."""

    model: ConfigModel
    loaded_from: tuple[str, ...] = field(default_factory=tuple, repr=False)

    @property
    def paths(self) -> PathSettings:
        return self.model.paths

    @property
    def logging(self) -> LoggingSettings:
        return self.model.logging

    @property
    def database(self) -> DatabaseSettings:
        return self.model.database

    @property
    def sources(self) -> tuple[SourceSettings, ...]:
        return self.model.sources

    @property
    def outputs(self) -> OutputSettings:
        return self.model.outputs

    @property
    def root(self) -> Path:
        """Directory holding both the asset root and the quarantine root."""

        return _resolve_path(self.paths.root)

    @property
    def asset_root(self) -> Path:
        return self.root / self.paths.assets_dir

    @property
    def quarantine_root(self) -> Path:
        return self.root / self.paths.quarantine_dir

    @property
    def log_path(self) -> Path:
        path = self.logging.path
        return path if path.is_absolute() else self.root / path

    @property
    def report_dir(self) -> Path | None:
        directory = self.outputs.report_dir
        if directory is None:
            return None
        return directory if directory.is_absolute() else self.root / directory

    def resolve_database(self, environ: Mapping[str, str] | None = None) -> DatabaseTarget:
        """Pick the connection URL and table prefix.

        Precedence: environment, explicit ``database.url``, Joomla ``configuration.php``, then
        the discrete ``database.*`` fields.
        """

        env = os.environ if environ is None else environ
        settings = self.database
        joomla = None
        joomla_path = settings.joomla_config
        if joomla_path is not None:
            if not joomla_path.is_absolute():
                joomla_path = self.root / joomla_path
            if joomla_path.is_file():
                joomla = read_joomla_config(joomla_path)

        prefix = env.get(DATABASE_PREFIX_ENV)
        if prefix is None:
            prefix = settings.prefix
        if prefix is None:
            prefix = joomla.dbprefix if joomla is not None else ""

        env_url = env.get(DATABASE_URL_ENV)
        if env_url:
            return DatabaseTarget(url=env_url, prefix=prefix, origin=DATABASE_URL_ENV)
        if settings.url:
            return DatabaseTarget(url=settings.url, prefix=prefix, origin="database.url")
        if joomla is not None:
            return DatabaseTarget(
                url=joomla.url(charset=settings.charset), prefix=prefix, origin=str(joomla_path)
            )

        url = URL.create(
            settings.driver,
            username=settings.user,
            password=settings.password,
            host=settings.host,
            port=settings.port,
            database=settings.name,
            query={"charset": settings.charset} if settings.driver.startswith("mysql") else {},
        )
        return DatabaseTarget(url=url, prefix=prefix, origin="database")


def load_config(path: Path | None = None) -> Config:
    """Load configuration from defaults/local overrides, or from an explicit config document."""

    merged: dict[str, Any] = {}
    loaded_from: list[str] = []

    if path is not None:
        override_path = _resolve_path(path)
        if not override_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        merged = _merge_dicts(merged, _read_yaml(override_path))
        loaded_from.append(str(override_path))
    else:
        default_candidate = _resolve_path(DEFAULT_CONFIG_PATH)
        if default_candidate.exists():
            merged = _merge_dicts(merged, _read_yaml(default_candidate))
            loaded_from.append(str(default_candidate))
        else:
            packaged_payload = _read_packaged_yaml("imagesweep.config", "default.yaml")
            if packaged_payload is not None:
                merged = _merge_dicts(merged, packaged_payload)
                loaded_from.append("imagesweep.config:default.yaml")

        local_candidate = _resolve_path(LOCAL_CONFIG_PATH)
        if local_candidate.exists():
            merged = _merge_dicts(merged, _read_yaml(local_candidate))
            loaded_from.append(str(local_candidate))

    if not merged:
        raise FileNotFoundError("No configuration data could be loaded.")

    try:
        model = ConfigModel.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    return Config(model=model, loaded_from=tuple(loaded_from))


def _resolve_path(path: Path) -> Path:
    """Resolve configuration paths relative to the current working directory."""

    return path if path.is_absolute() else Path.cwd() / path


def _read_yaml(path: Path) -> dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must define a mapping at the top level.")
    return data


def _read_packaged_yaml(package: str, name: str) -> dict[str, Any] | None:
    try:
        content = resources.files(package).joinpath(name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Packaged configuration {package}:{name} must define a mapping at the top level."
        )
    return data


def _merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two dictionaries, with override values taking precedence."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key == "sources" and isinstance(result.get(key), list) and isinstance(value, list):
            result[key] = _merge_sources(result[key], value)
        elif key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _merge_sources(base: list[Any], override: list[Any]) -> list[Any]:
    """Merge source lists by table; an override entry replaces the whole entry."""

    result = [deepcopy(entry) for entry in base]
    positions = {
        str(entry["table"]): index
        for index, entry in enumerate(result)
        if isinstance(entry, dict) and "table" in entry
    }

    for entry in override:
        replacement = deepcopy(entry)
        if isinstance(entry, dict) and "table" in entry:
            table = str(entry["table"])
            if table in positions:
                result[positions[table]] = replacement
                continue
            positions[table] = len(result)
        result.append(replacement)

    return result
