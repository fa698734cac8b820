"""CLI commands for Freebox system information."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from freebox_dashboard.config import get_config
from freebox_dashboard.dashboard import FreeboxDashboard
from freebox_dashboard.utils.errors import FreeboxError, handle_error, response_error
from freebox_dashboard.utils.output import OutputFormat, print_output

app = typer.Typer(name="system", help="Freebox system information.")


@app.command()
def info(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show firmware, uptime and sensors."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            async with dashboard.session():
                return await dashboard.system.get_info()

    try:
        response = asyncio.run(_run())
        if not response.success:
            raise response_error(response)
        print_output(response.result or {}, output, title="System")
    except FreeboxError as e:
        handle_error(e)
        raise typer.Exit(1)
