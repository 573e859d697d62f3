"""Helpers shared by the CLI command groups."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import typer
from rich.console import Console

from auditwatch.config import get_config
from auditwatch.errors import AuditwatchError
from auditwatch.runtime import Runtime

console = Console()

T = TypeVar("T")


def run(job: Callable[[Runtime], Awaitable[T]]) -> T:
    """Open a runtime (no background sweeps), run ``job`` and shut down.

    Domain errors are printed and turned into a non-zero exit.
    """

    async def _main() -> T:
        async with Runtime.open(get_config(), schedule=False) as runtime:
            return await job(runtime)

    try:
        return asyncio.run(_main())
    except AuditwatchError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(exc.exit_code)


def yes_no(value: Any) -> str:
    return "[green]yes[/green]" if value else "[dim]no[/dim]"
