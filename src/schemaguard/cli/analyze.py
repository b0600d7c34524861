"""schemaguard analyze / usage commands - run the analyzer over a snapshot file."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console

from schemaguard.analysis.analyzer import ObjectSafetyAnalyzer
from schemaguard.analysis.models import AnalysisResult, UsageReference
from schemaguard.cli.render import render_result, render_usage
from schemaguard.config.models import SchemaGuardConfig
from schemaguard.core.errors import AnalysisError
from schemaguard.metadata.provider import StaticMetadataProvider, load_snapshot


def _analyzer(ctx: click.Context, snapshot_path: Path) -> ObjectSafetyAnalyzer:
    try:
        snapshot = load_snapshot(snapshot_path)
    except AnalysisError as e:
        raise click.ClickException(e.message) from e
    config: SchemaGuardConfig = ctx.obj.get("config") or SchemaGuardConfig()
    return ObjectSafetyAnalyzer(StaticMetadataProvider(snapshot), config=config, build_index=False)


async def _analyze(
    analyzer: ObjectSafetyAnalyzer, schema: str, object_name: str, fuzzy: bool
) -> AnalysisResult:
    if not fuzzy:
        await analyzer.rebuild_index()
    return await analyzer.analyze_object_safety(schema, object_name, fuzzy_usage=fuzzy)


async def _usage(analyzer: ObjectSafetyAnalyzer, schema: str, object_name: str) -> list[UsageReference]:
    await analyzer.rebuild_index()
    return await analyzer.find_usage(object_name, schema)


@click.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("schema")
@click.argument("object_name", default="")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--fuzzy", is_flag=True, help="Match references by pattern instead of the index")
@click.pass_context
def analyze_command(
    ctx: click.Context,
    snapshot: Path,
    schema: str,
    object_name: str,
    as_json: bool,
    fuzzy: bool,
) -> None:
    """Assess delete, move and change-owner risk of a schema object.

    SNAPSHOT is a JSON or YAML metadata snapshot. Omit OBJECT_NAME to
    analyze the schema itself.
    """
    analyzer = _analyzer(ctx, snapshot)
    result = asyncio.run(_analyze(analyzer, schema, object_name, fuzzy))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        render_result(Console(), result)

    if not result.found:
        ctx.exit(1)


@click.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("schema")
@click.argument("object_name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def usage_command(
    ctx: click.Context,
    snapshot: Path,
    schema: str,
    object_name: str,
    as_json: bool,
) -> None:
    """List views and routines referencing SCHEMA.OBJECT_NAME."""
    analyzer = _analyzer(ctx, snapshot)
    usage = asyncio.run(_usage(analyzer, schema, object_name))

    if as_json:
        click.echo(json.dumps([ref.to_dict() for ref in usage], indent=2))
    else:
        render_usage(Console(), usage)
