"""Command line interface for Imagesweep."""

from __future__ import annotations

import logging
import pathlib
from typing import Optional

import typer
from dotenv import load_dotenv

from imagesweep import get_version
from imagesweep.config import Config, load_config
from imagesweep.core import Orchestrator, RunOptions
from imagesweep.logging import configure_logging
from imagesweep.reports import write_run_report
from imagesweep.storage import ContentStore, ContentStoreConnectionError

EXIT_CONNECTION_FAILED = 1
EXIT_BAD_CONFIG = 2

app = typer.Typer(
    name="imagesweep",
    help="Quarantine media files that no content row references.",
    add_completion=False,
)


def _load_environment(env_file: Optional[pathlib.Path]) -> None:
    """Load environment variables from .env files."""

    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=True)
    else:
        load_dotenv(override=False)


def _prepare_logging(
    config: Config,
    override_path: Optional[pathlib.Path],
    override_level: Optional[str],
    quiet: bool,
) -> logging.Logger:
    """Configure the audit log; the console mirror is dropped in quiet mode."""

    return configure_logging(
        log_path=override_path or config.log_path,
        level=(override_level or config.logging.level).upper(),
        mirror_to_console=not quiet,
    )


def _version_callback(value: bool) -> None:
    """Print the package version and exit when requested."""

    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Report what would happen without touching any file."
    ),
    delete: bool = typer.Option(
        False, "--delete", help="Delete unused files instead of moving them to quarantine."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", help="Suppress console output; the audit log is still written."
    ),
    config: Optional[pathlib.Path] = typer.Option(
        None,
        "--config",
        metavar="PATH",
        help="Path to YAML configuration file (used exclusively).",
    ),
    env_file: Optional[pathlib.Path] = typer.Option(
        None,
        "--env-file",
        metavar="PATH",
        help="Load environment variables from .env-style file before execution.",
    ),
    log_path: Optional[pathlib.Path] = typer.Option(
        None,
        "--log-path",
        metavar="PATH",
        help="Override the audit log file or directory.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        metavar="LEVEL",
        help="Override the configured log level (debug, info, warn, error).",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show Imagesweep version and exit.",
    ),
) -> None:
    """Move or delete images under the asset root that no content references."""

    _load_environment(env_file)

    try:
        config_obj = load_config(config)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=EXIT_BAD_CONFIG) from exc

    try:
        logger = _prepare_logging(config_obj, log_path, log_level, quiet)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=EXIT_BAD_CONFIG) from exc
    logger.debug("Configuration loaded from %s.", ", ".join(config_obj.loaded_from))

    try:
        target = config_obj.resolve_database()
    except (OSError, ValueError) as exc:
        logger.error("Invalid database configuration: %s", exc)
        raise typer.Exit(code=EXIT_BAD_CONFIG) from exc
    logger.debug("Database settings taken from %s.", target.origin)

    options = RunOptions(dry_run=dry_run, delete=delete, quiet=quiet)
    orchestrator = Orchestrator(
        config=config_obj,
        store=ContentStore(target.url, prefix=target.prefix),
        logger=logger,
    )
    try:
        summary = orchestrator.run(options)
    except ContentStoreConnectionError as exc:
        raise typer.Exit(code=EXIT_CONNECTION_FAILED) from exc

    report_dir = config_obj.report_dir
    if report_dir is not None:
        report_path = write_run_report(summary, config_obj, report_dir)
        logger.debug("Run report written to %s.", report_path)

    if not quiet:
        typer.echo("Done.")
