"""Rich rendering of analysis results.

Object names, usage entries and error text come from the snapshot and are
escaped before they reach console markup.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schemaguard.analysis.models import AnalysisResult, OperationRisk, RiskLevel, UsageReference

_LEVEL_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "dark_orange",
    RiskLevel.CRITICAL: "bold red",
}


def level_text(level: RiskLevel) -> str:
    style = _LEVEL_STYLES[level]
    return f"[{style}]{level.label.upper()}[/{style}]"


def _risk_row(table: Table, label: str, risk: OperationRisk) -> None:
    details = "\n".join(f"• {escape(line)}" for line in risk.details) or "-"
    table.add_row(label, level_text(risk.level), f"{escape(risk.message)}\n[dim]{details}[/dim]")


def render_result(console: Console, result: AnalysisResult) -> None:
    if not result.found or result.assessment is None:
        console.print(f"[red]✗[/red] {escape(result.error or 'not found')}")
        return

    assessment = result.assessment
    kind = result.object_type.value if result.object_type else "object"
    console.print(
        f"[bold]{escape(f'{result.schema_name}.{result.object_name}')}[/bold] ({kind}) "
        f"overall {level_text(assessment.overall_level)}"
    )

    table = Table(show_header=True, header_style="bold", padding=(0, 1), pad_edge=False)
    table.add_column("operation", style="cyan", no_wrap=True)
    table.add_column("level", no_wrap=True)
    table.add_column("explanation")
    _risk_row(table, "delete", assessment.can_delete)
    _risk_row(table, "move", assessment.can_move)
    _risk_row(table, "change owner", assessment.can_change_owner)
    if result.foreign_key_risk is not None:
        _risk_row(table, "incoming FKs", result.foreign_key_risk)
    console.print(table)

    if result.used_in_identifiers:
        render_usage(console, result.used_in_identifiers)
    if result.referenced_by_foreign_keys:
        console.print("[bold]Referenced by foreign keys[/bold]")
        for fk in result.referenced_by_foreign_keys:
            on_delete = f" ON DELETE {fk.on_delete.upper()}" if fk.on_delete else ""
            source = f"{fk.from_schema}.{fk.from_table} ({fk.constraint_name or 'unnamed'}){on_delete}"
            console.print(f"  {escape(source)}")


def render_usage(console: Console, usage: list[UsageReference]) -> None:
    if not usage:
        console.print("[dim]No usage found[/dim]")
        return
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1), pad_edge=False)
    table.add_column("kind", style="cyan")
    table.add_column("name")
    table.add_column("location", style="dim")
    for ref in usage:
        table.add_row(ref.ref_kind, escape(ref.name), escape(ref.location))
    console.print(table)
