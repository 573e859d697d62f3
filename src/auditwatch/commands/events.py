"""Audit event commands — poll the stream, inspect stored events."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import List, Optional

import typer
from rich.table import Table

from auditwatch_common import EventCriteria

from auditwatch.commands.common import console, run
from auditwatch.config import get_config
from auditwatch.errors import AuditwatchError
from auditwatch.runtime import Runtime
from auditwatch.services.matcher import classify_severity
from auditwatch.services.metrics import summarize_events

app = typer.Typer(no_args_is_help=True)

_SEVERITY_STYLE = {"high": "red", "medium": "yellow", "low": "green"}


@app.command()
def poll() -> None:
    """Fetch the next page of events, store them and raise alerts."""
    result = run(lambda rt: rt.poll_once())
    console.print(
        f"[green]✓[/green] {result.fetched} events fetched, {result.matched} rule matches"
    )


@app.command()
def watch(
    interval: Optional[float] = typer.Option(None, help="Seconds between polls"),
) -> None:
    """Poll continuously until interrupted, with background sweeps enabled."""
    cfg = get_config()
    if interval is not None:
        cfg = cfg.model_copy(update={"poll_interval": interval})

    async def _main() -> None:
        async with Runtime.open(cfg) as runtime:
            await runtime.event_source()
            runtime.start_polling()
            console.print(f"[bold]Watching audit stream every {cfg.poll_interval:g}s[/bold]")
            await asyncio.Event().wait()

    try:
        asyncio.run(_main())
    except AuditwatchError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(exc.exit_code)
    except KeyboardInterrupt:
        console.print("Stopped.")


def _criteria(
    action: Optional[str],
    actor: Optional[List[str]],
    since: Optional[datetime],
    until: Optional[datetime],
    ip: Optional[List[str]],
) -> EventCriteria:
    return EventCriteria(action=action, actor=actor or [], start=since, end=until, ip=ip or [])


@app.command(name="list")
def list_events(
    action: Optional[str] = typer.Option(None, help="Action substring"),
    actor: Optional[List[str]] = typer.Option(None, help="Actor name/email substring (repeatable)"),
    since: Optional[datetime] = typer.Option(None, help="Earliest event time"),
    until: Optional[datetime] = typer.Option(None, help="Latest event time"),
    ip: Optional[List[str]] = typer.Option(None, help="Source IP substring (repeatable)"),
    limit: int = typer.Option(50, help="Show at most this many of the newest events"),
) -> None:
    """List stored events matching the filters."""
    criteria = _criteria(action, actor, since, until, ip)
    events = run(lambda rt: rt.events.query(criteria, limit=limit))
    if not events:
        console.print("[yellow]No matching events.[/yellow]")
        return

    table = Table(title=f"Audit Events ({len(events)})")
    table.add_column("Time", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Actor")
    table.add_column("IP")
    table.add_column("Severity")
    for event in events:
        severity = classify_severity(event.action).value
        table.add_row(
            event.time.strftime("%Y-%m-%d %H:%M:%S"),
            event.action,
            f"{event.actor.name} <{event.actor.email}>",
            event.location.ip if event.location else "",
            f"[{_SEVERITY_STYLE[severity]}]{severity}[/]",
        )
    console.print(table)


@app.command()
def stats(
    action: Optional[str] = typer.Option(None, help="Action substring"),
    since: Optional[datetime] = typer.Option(None, help="Earliest event time"),
    until: Optional[datetime] = typer.Option(None, help="Latest event time"),
) -> None:
    """Summarize stored events."""
    criteria = _criteria(action, None, since, until, None)
    summary = summarize_events(run(lambda rt: rt.events.query(criteria)))

    console.print(f"[bold]Total events:[/bold] {summary.total}")
    for title, counts in (
        ("By action", summary.by_action),
        ("By country", summary.by_country),
        ("By severity", summary.by_severity),
    ):
        table = Table(title=title)
        table.add_column("Key", style="cyan")
        table.add_column("Count", justify="right")
        for key, count in sorted(counts.items(), key=lambda kv: kv[1], reverse=True):
            table.add_row(key, str(count))
        console.print(table)

    if summary.top_actors:
        console.print("[bold]Top actors:[/bold] " + ", ".join(
            f"{name} ({count})" for name, count in summary.top_actors
        ))
