"""Configuration utilities for Imagesweep."""

from .joomla import JoomlaSettings, read_joomla_config
from .loader import (
    Config,
    ConfigModel,
    DatabaseTarget,
    FieldSettings,
    PathSettings,
    SourceSettings,
    load_config,
)

__all__ = [
    "Config",
    "ConfigModel",
    "DatabaseTarget",
    "FieldSettings",
    "JoomlaSettings",
    "PathSettings",
    "SourceSettings",
    "load_config",
    "read_joomla_config",
]
