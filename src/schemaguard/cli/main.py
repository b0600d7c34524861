"""SchemaGuard CLI - schemaguard command."""

from pathlib import Path

import click

from schemaguard.cli.analyze import analyze_command, usage_command
from schemaguard.config.loader import load_config
from schemaguard.core.errors import ConfigError
from schemaguard.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="schemaguard")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory holding .schemaguard/config.yaml (default: current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, project: Path | None) -> None:
    """SchemaGuard - how dangerous is it to drop, move or re-own a schema object?"""
    ctx.ensure_object(dict)
    try:
        config = load_config(project)
    except ConfigError as e:
        raise click.ClickException(e.message) from e
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    configure_logging(config.logging, level="DEBUG" if verbose else None)


cli.add_command(analyze_command, name="analyze")
cli.add_command(usage_command, name="usage")


if __name__ == "__main__":
    cli()
