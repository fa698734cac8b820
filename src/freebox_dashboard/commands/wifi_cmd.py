"""CLI commands for WiFi status."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from freebox_dashboard.config import get_config
from freebox_dashboard.dashboard import FreeboxDashboard
from freebox_dashboard.utils.errors import FreeboxError, handle_error
from freebox_dashboard.utils.output import OutputFormat, print_output

app = typer.Typer(name="wifi", help="WiFi access points and networks.")


@app.command("status")
def wifi_status(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show WiFi config, access points and BSS for the bands this box has."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            async with dashboard.session():
                return await dashboard.wifi.get_full_status()

    try:
        print_output(asyncio.run(_run()), output, title="WiFi")
    except FreeboxError as e:
        handle_error(e)
        raise typer.Exit(1)
