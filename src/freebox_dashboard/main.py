"""Freebox dashboard CLI entry point.

Registers with a Freebox, opens sessions and shows what the connected
model supports.
"""

from __future__ import annotations

import logging

import typer

from freebox_dashboard.commands.auth_cmd import app as auth_app
from freebox_dashboard.commands.capabilities_cmd import app as capabilities_app
from freebox_dashboard.commands.system_cmd import app as system_app
from freebox_dashboard.commands.wifi_cmd import app as wifi_app
from freebox_dashboard.commands.vm_cmd import app as vm_app
from freebox_dashboard.config import get_config

app = typer.Typer(
    name="freebox-dashboard",
    help="Authenticate against a Freebox and inspect it through its REST API.",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(auth_app, name="auth")
app.add_typer(capabilities_app, name="capabilities")
app.add_typer(system_app, name="system")
app.add_typer(wifi_app, name="wifi")
app.add_typer(vm_app, name="vm")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    local: bool = typer.Option(False, "--local", help="Connect to the Freebox LAN address (FREEBOX_LOCAL_IP)"),
) -> None:
    """Freebox dashboard: registration, sessions and capabilities."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    if local:
        get_config().use_local = True


if __name__ == "__main__":
    app()
