"""Command module for creating a new component."""

import typer

from site_deploy.cli.app import app
from site_deploy.cli.commands.command_utils import console, run_command
from site_deploy.config import get_config
from site_deploy.services.scaffold_service import ScaffoldService


async def run_new_component(name: str) -> None:
    created = ScaffoldService(get_config()).create_component(name)
    for path in created:
        console.print(f"[green]+[/green] {path}")


@app.command("new-component")
def new_component(
    name: str = typer.Argument(..., help="Name of the new component."),
) -> None:
    """Create a new component from the templates."""
    run_command(run_new_component(name), "New component")
