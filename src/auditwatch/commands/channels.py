"""Alert channel management commands."""

from __future__ import annotations

from typing import Any, Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from auditwatch_common import AlertChannel, ChannelStatus, ChannelType

from auditwatch.commands.common import console, run, yes_no

app = typer.Typer(no_args_is_help=True)

_STATUS_STYLE = {
    ChannelStatus.UNTESTED: "dim",
    ChannelStatus.CONNECTED: "green",
    ChannelStatus.FAILED: "red",
}


def _save(channel_type: ChannelType, name: str, disabled: bool, configuration: dict[str, Any]) -> None:
    try:
        channel = AlertChannel(
            type=channel_type,
            name=name,
            configuration=configuration,
            enabled=not disabled,
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid {channel_type.value} channel:[/red] {exc}")
        raise typer.Exit(1)

    saved = run(lambda rt: rt.channels.save(channel))
    console.print(f"[green]Channel {saved.id} saved:[/green] {saved.name} ({saved.type.value})")
    console.print(f"Verify it with: auditwatch channels test {saved.id}")


@app.command("add-chat")
def add_chat(
    name: str = typer.Option(..., help="Channel name"),
    webhook_url: str = typer.Option(..., "--webhook-url", help="Incoming webhook URL"),
    channel: Optional[str] = typer.Option(None, help="Override the webhook's default room"),
    disabled: bool = typer.Option(False, "--disabled"),
) -> None:
    """Add a chat webhook channel."""
    _save(ChannelType.CHAT, name, disabled, {"webhook_url": webhook_url, "channel": channel})


@app.command("add-ticketing")
def add_ticketing(
    name: str = typer.Option(..., help="Channel name"),
    url: str = typer.Option(..., help="Ticketing site URL"),
    project: str = typer.Option(..., help="Project key"),
    email: str = typer.Option(..., help="Account email"),
    api_token: str = typer.Option(..., "--api-token", prompt=True, hide_input=True),
    issue_type: str = typer.Option("Task", "--issue-type"),
    disabled: bool = typer.Option(False, "--disabled"),
) -> None:
    """Add a ticketing channel that opens one issue per alert."""
    _save(
        ChannelType.TICKETING,
        name,
        disabled,
        {
            "url": url,
            "project": project,
            "email": email,
            "api_token": api_token,
            "issue_type": issue_type,
        },
    )


@app.command("add-siem")
def add_siem(
    name: str = typer.Option(..., help="Channel name"),
    endpoint: str = typer.Option(..., help="SIEM ingestion endpoint"),
    api_key: str = typer.Option(..., "--api-key", prompt=True, hide_input=True),
    disabled: bool = typer.Option(False, "--disabled"),
) -> None:
    """Add a SIEM forwarding channel."""
    _save(ChannelType.SIEM, name, disabled, {"endpoint": endpoint, "api_key": api_key})


@app.command(name="list")
def list_channels() -> None:
    """List alert channels and their last test status."""
    channels = run(lambda rt: rt.channels.all())
    if not channels:
        console.print("[yellow]No alert channels configured.[/yellow]")
        return

    table = Table(title="Alert Channels")
    table.add_column("ID", style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Enabled")
    table.add_column("Status")
    for channel in channels:
        style = _STATUS_STYLE[channel.status]
        table.add_row(
            str(channel.id),
            channel.name,
            channel.type.value,
            yes_no(channel.enabled),
            f"[{style}]{channel.status.value}[/]",
        )
    console.print(table)


@app.command()
def remove(channel_id: int = typer.Argument(..., help="Channel ID")) -> None:
    """Delete an alert channel."""
    if run(lambda rt: rt.channels.delete(channel_id)):
        console.print(f"[green]Channel {channel_id} removed.[/green]")
    else:
        console.print(f"[yellow]Channel {channel_id} not found.[/yellow]")
        raise typer.Exit(1)


@app.command()
def test(channel_id: int = typer.Argument(..., help="Channel ID")) -> None:
    """Send a test message through a channel and record the result."""
    status = run(lambda rt: rt.test_channel(channel_id))
    if status is ChannelStatus.CONNECTED:
        console.print(f"[green]✓[/green] Channel {channel_id} connected")
    else:
        console.print(f"[red]✗[/red] Channel {channel_id} test failed (see log)")
        raise typer.Exit(1)
