"""hxbuild CLI.

Provides commands to build once, keep building on source changes,
and manage the configuration file.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click
import yaml

from .build.fanout import FanoutError
from .build.pipeline import BuildPipeline
from .build.pipeline import CompileError
from .config.loader import create_default_config
from .config.loader import get_config_path
from .config.loader import load_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@click.group()
def cli():
    """hxbuild - Haxe builds through a persistent compilation server."""
    pass


@cli.command()
@click.option("--watch", is_flag=True, help="Keep rebuilding when sources change")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./hxbuild.yaml, else $HXBUILD_HOME/config/hxbuild.yaml)",
)
@click.option("--source-root", default=None, help="Directory the compiler runs in")
@click.option("--port", type=int, default=None, help="Compilation server port")
@click.option("--log-level", default=None, help="Logging level (debug, info, warning, error)")
def build(watch: bool, config_path: Path | None, source_root: str | None, port: int | None, log_level: str | None):
    """Compile the project, optionally watching for changes."""
    settings = load_config(config_path, source_root=source_root, port=port, log_level=log_level)
    configure_logging(settings.log_level)

    pipeline = BuildPipeline(settings)
    try:
        asyncio.run(pipeline.run(watch=watch))
    except KeyboardInterrupt:
        pipeline.close()
        click.echo("\nStopped")
    except (CompileError, FanoutError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command("init-config")
def init_config():
    """Create the default config file if it does not exist."""
    create_default_config()
    click.echo(f"Config: {get_config_path()}")


@cli.command("show-config")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./hxbuild.yaml, else $HXBUILD_HOME/config/hxbuild.yaml)",
)
def show_config(config_path: Path | None):
    """Print the effective configuration."""
    settings = load_config(config_path)
    click.echo(yaml.safe_dump(settings.model_dump(), sort_keys=False).rstrip())


def main():
    """Entry point for hxbuild CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInterrupted")
        sys.exit(0)


if __name__ == "__main__":
    main()
