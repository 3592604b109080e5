"""
Workstation setup CLI.

Usage:
    workstation setup
    workstation --config path/to/workstation.toml setup
"""
import asyncio
from pathlib import Path

import click

from workstation import __version__
from workstation.config import DEFAULT_CONFIG_FILE, current_platform_key, load_platform_config
from workstation.errors import ConfigError
from workstation.logging import LOG_LEVEL_ENV, configure_logging, get_logger, resolve_level
from workstation.orchestrator import run_setup
from workstation.progress import RichProgressBoard

logger = get_logger("cli")


@click.group()
@click.version_option(version=__version__, prog_name="workstation")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Sets a custom config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """Bootstrap a workstation from a declarative package list."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    try:
        ctx.obj["log_level"] = resolve_level()
    except ValueError as e:
        raise click.ClickException(f"{LOG_LEVEL_ENV}: {e}") from e


@cli.command()
@click.pass_context
def setup(ctx: click.Context) -> None:
    """Set up this computer with the workstation config."""
    config_path: Path = ctx.obj["config_path"]
    board = RichProgressBoard()
    configure_logging(ctx.obj["log_level"], console=board.progress.console)

    try:
        arch_config = load_platform_config(config_path, current_platform_key())
    except ConfigError as e:
        logger.error("config_invalid", path=str(config_path), error=str(e))
        raise click.ClickException(str(e)) from e

    with board:
        asyncio.run(run_setup(arch_config, board))


def main() -> None:
    cli(obj={})
