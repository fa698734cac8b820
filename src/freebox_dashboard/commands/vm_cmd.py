"""CLI commands for virtual machines."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from freebox_dashboard.config import get_config
from freebox_dashboard.dashboard import FreeboxDashboard
from freebox_dashboard.utils.errors import FreeboxError, handle_error, response_error
from freebox_dashboard.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="vm", help="Virtual machines (Ultra and Delta only).")


@app.command("list")
def list_vms(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """List virtual machines."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            async with dashboard.session():
                return await dashboard.vm.list()

    try:
        response = asyncio.run(_run())
        if not response.success:
            raise response_error(response)
        vms = response.result or []
        if not vms:
            console.print("[dim]No virtual machines.[/dim]")
            raise typer.Exit(0)

        columns = ["id", "name", "os", "status", "vcpus", "memory"]
        print_output(vms, output, columns=columns, title="Virtual Machines")
    except FreeboxError as e:
        handle_error(e)
        raise typer.Exit(1)
