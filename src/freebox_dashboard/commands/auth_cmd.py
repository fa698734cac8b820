"""CLI commands for app registration and sessions."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from freebox_dashboard.config import get_config
from freebox_dashboard.dashboard import FreeboxDashboard
from freebox_dashboard.utils.errors import FreeboxError, LoginError, handle_error
from freebox_dashboard.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Register the app and manage Freebox sessions.")

OutputOption = Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")]


@app.command()
def register(
    wait: Annotated[bool, typer.Option("--wait/--no-wait", help="Poll until the request is confirmed on the Freebox")] = True,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Request an app token; confirm it on the Freebox screen."""
    config = get_config()

    async def _run() -> dict[str, object]:
        async with FreeboxDashboard(config) as dashboard:
            registration = await dashboard.auth.register()
            console.print(
                f"Registration requested (track id [bold]{registration.track_id}[/bold]). "
                "Please confirm on your Freebox screen.",
                style="yellow",
            )
            result: dict[str, object] = {"track_id": registration.track_id, "status": "pending"}
            if wait:
                status = await dashboard.auth.wait_for_authorization(
                    registration.track_id,
                    interval=config.poll_interval,
                    timeout=config.poll_timeout,
                )
                result["status"] = status.status.value
            return result

    try:
        print_output(asyncio.run(_run()), output, title="Registration")
    except FreeboxError as e:
        handle_error(e)
        raise typer.Exit(1)


@app.command()
def status(
    track_id: Annotated[int, typer.Argument(help="Track id returned by `auth register`")],
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Check the progress of a registration."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            return await dashboard.auth.check_status(track_id)

    try:
        result = asyncio.run(_run())
        print_output({"track_id": track_id, "status": result.status.value}, output, title="Registration Status")
    except FreeboxError as e:
        handle_error(e)
        raise typer.Exit(1)


@app.command()
def login(
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Open a session and show granted permissions and the detected model."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            async with dashboard.session() as summary:
                return summary

    try:
        summary = asyncio.run(_run())
        result = {
            "status": "authenticated",
            "model": summary.capabilities.model.value,
            "model_name": summary.capabilities.model_name,
            "permissions": summary.permissions,
        }
        print_output(result, output, title="Authentication")
    except FreeboxError as e:
        handle_error(e)
        raise typer.Exit(1)


@app.command()
def check(
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Show whether the app is registered and can open a session."""
    config = get_config()

    async def _run():
        async with FreeboxDashboard(config) as dashboard:
            if not dashboard.auth.is_registered():
                return await dashboard.check()
            try:
                async with dashboard.session():
                    return await dashboard.check()
            except LoginError as e:
                console.print(f"[yellow]Login refused: {e}[/yellow]")
                return await dashboard.check()

    try:
        status_ = asyncio.run(_run())
        result = {
            "is_registered": status_.is_registered,
            "is_logged_in": status_.is_logged_in,
            "permissions": status_.permissions,
            "model": status_.capabilities.model.value if status_.capabilities else "N/A",
        }
        print_output(result, output, title="Session Status")
    except FreeboxError as e:
        handle_error(e)
        raise typer.Exit(1)
