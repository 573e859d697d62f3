"""Event source setup commands."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from auditwatch_common import SourceSettings
from auditwatch_common.constants import ATLASSIAN_BASE_URL

from auditwatch.commands.common import console, run
from auditwatch.runtime import Runtime

app = typer.Typer(no_args_is_help=True)


@app.command()
def save(
    org_id: str = typer.Option(..., "--org-id", help="Organization ID"),
    api_key: str = typer.Option(..., "--api-key", prompt=True, hide_input=True),
    base_url: str = typer.Option(ATLASSIAN_BASE_URL, "--base-url"),
) -> None:
    """Save the events-stream credentials."""
    try:
        settings = SourceSettings(org_id=org_id, api_key=api_key, base_url=base_url)
    except ValidationError as exc:
        console.print(f"[red]Invalid settings:[/red] {exc}")
        raise typer.Exit(1)

    run(lambda rt: rt.settings.save_source(settings))
    console.print(f"[green]Event source saved[/green] for organization {org_id}")


@app.command()
def show() -> None:
    """Show the configured event source and stream cursor."""

    async def job(rt: Runtime):
        return await rt.settings.load_source(), await rt.settings.get_cursor()

    settings, cursor = run(job)
    if settings is None:
        console.print("[yellow]Event source not configured.[/yellow]")
        return
    console.print(f"  org_id   = {settings.org_id}")
    console.print(f"  base_url = {settings.base_url}")
    console.print(f"  api_key  = {settings.api_key[:4]}...")
    console.print(f"  cursor   = {cursor or '-'}")


@app.command()
def test() -> None:
    """Check that the saved credentials can read the events stream."""

    async def job(rt: Runtime) -> bool:
        source = await rt.event_source()
        return await source.test_connection()

    if run(job):
        console.print("[green]✓[/green] Event source connection successful")
    else:
        console.print("[red]✗[/red] Event source connection failed (see log)")
        raise typer.Exit(1)
