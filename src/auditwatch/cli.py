"""Root Typer application for the auditwatch CLI."""

from __future__ import annotations

import typer

from auditwatch.commands import channels, events, rules, setup
from auditwatch.config import get_config
from auditwatch.log import configure_logging

app = typer.Typer(
    name="auditwatch",
    help="Audit event alerting — match organization audit events and notify channels.",
    no_args_is_help=True,
)

app.add_typer(rules.app, name="rules", help="Alert rule management.")
app.add_typer(channels.app, name="channels", help="Alert channel management.")
app.add_typer(events.app, name="events", help="Poll, store and inspect audit events.")
app.add_typer(setup.app, name="setup", help="Event source configuration.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging("DEBUG" if verbose else get_config().log_level)


if __name__ == "__main__":
    app()
