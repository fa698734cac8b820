"""CLI commands for hardware capability detection."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from freebox_dashboard.config import get_config
from freebox_dashboard.dashboard import FreeboxDashboard
from freebox_dashboard.utils.output import OutputFormat, print_output

app = typer.Typer(name="capabilities", help="Inspect what the connected Freebox supports.")

OutputOption = Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")]


@app.command()
def show(output: OutputOption = OutputFormat.TABLE) -> None:
    """Show the detected model and its full capability record."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            return await dashboard.detector.detect_model()

    print_output(asyncio.run(_run()), output, title="Capabilities")


@app.command()
def features(output: OutputOption = OutputFormat.TABLE) -> None:
    """Show the simplified feature summary."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            return await dashboard.detector.get_features()

    print_output(asyncio.run(_run()), output, title="Features")


@app.command()
def refresh(output: OutputOption = OutputFormat.TABLE) -> None:
    """Re-run detection, ignoring any cached result."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            return await dashboard.detector.refresh_capabilities()

    print_output(asyncio.run(_run()), output, title="Capabilities")
