"""Alert rule management commands."""

from __future__ import annotations

from typing import Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from auditwatch_common import AlertRule, Severity

from auditwatch.commands.common import console, run, yes_no
from auditwatch.runtime import Runtime
from auditwatch.services.matcher import classify_severity

app = typer.Typer(no_args_is_help=True)

_SEVERITY_STYLE = {Severity.HIGH: "red", Severity.MEDIUM: "yellow", Severity.LOW: "green"}


@app.command()
def add(
    name: str = typer.Option(..., help="Rule name"),
    pattern: str = typer.Option(..., help="Substring matched against event actions"),
    severity: Optional[Severity] = typer.Option(
        None, help="Alert severity (guessed from the pattern when omitted)"
    ),
    disabled: bool = typer.Option(False, "--disabled", help="Save the rule disabled"),
) -> None:
    """Add an alert rule."""
    try:
        rule = AlertRule(
            name=name,
            action_pattern=pattern,
            severity=severity or classify_severity(pattern),
            enabled=not disabled,
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid rule:[/red] {exc}")
        raise typer.Exit(1)

    saved = run(lambda rt: rt.rules.save(rule))
    console.print(
        f"[green]Rule {saved.id} saved:[/green] {saved.name} "
        f"([{_SEVERITY_STYLE[saved.severity]}]{saved.severity.value}[/]) "
        f"on actions containing '{saved.action_pattern}'"
    )


@app.command(name="list")
def list_rules() -> None:
    """List alert rules."""
    rules = run(lambda rt: rt.rules.all())
    if not rules:
        console.print("[yellow]No alert rules configured.[/yellow]")
        return

    table = Table(title="Alert Rules")
    table.add_column("ID", style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Pattern")
    table.add_column("Severity")
    table.add_column("Enabled")
    for rule in rules:
        table.add_row(
            str(rule.id),
            rule.name,
            rule.action_pattern,
            f"[{_SEVERITY_STYLE[rule.severity]}]{rule.severity.value}[/]",
            yes_no(rule.enabled),
        )
    console.print(table)


@app.command()
def remove(rule_id: int = typer.Argument(..., help="Rule ID")) -> None:
    """Delete an alert rule."""
    if run(lambda rt: rt.rules.delete(rule_id)):
        console.print(f"[green]Rule {rule_id} removed.[/green]")
    else:
        console.print(f"[yellow]Rule {rule_id} not found.[/yellow]")
        raise typer.Exit(1)


def _set_enabled(rule_id: int, enabled: bool) -> AlertRule:
    async def job(rt: Runtime) -> AlertRule:
        rule = await rt.rules.get(rule_id)
        return await rt.rules.save(rule.model_copy(update={"enabled": enabled}))

    return run(job)


@app.command()
def enable(rule_id: int = typer.Argument(..., help="Rule ID")) -> None:
    """Enable an alert rule."""
    rule = _set_enabled(rule_id, True)
    console.print(f"[green]Rule {rule.id} ({rule.name}) enabled.[/green]")


@app.command()
def disable(rule_id: int = typer.Argument(..., help="Rule ID")) -> None:
    """Disable an alert rule."""
    rule = _set_enabled(rule_id, False)
    console.print(f"[yellow]Rule {rule.id} ({rule.name}) disabled.[/yellow]")
