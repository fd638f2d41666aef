"""Command module for deploying staged output to production."""

from typing import List, Optional

import typer
from rich.panel import Panel
from rich.tree import Tree

from site_deploy.cli.app import app
from site_deploy.cli.commands.command_utils import console, reconcile_tree, run_command
from site_deploy.config import get_config
from site_deploy.services.deploy_service import DeployReport, DeployService


def display_deploy_report(report: DeployReport) -> None:
    """Display deploy results with trees."""
    tree = Tree("[bold]Release[/bold]")
    if report.pruned.total_changes:
        tree.add(reconcile_tree("Pruned production", report.pruned))

    if report.copied_dirs:
        copied = tree.add(f"[green]Copied {len(report.copied_dirs)} directories[/green]")
        for directory in sorted(report.copied_dirs):
            copied.add(f"[green]{directory or '.'}/[/green]")

    if report.committed:
        tree.add(f"[green]Committed[/green] {len(report.changed_files)} changed files")
    else:
        tree.add("No files have changed")
    console.print(Panel(tree, expand=False))


async def run_deploy(components: List[str]) -> DeployReport:
    report = await DeployService(get_config()).deploy(components)
    display_deploy_report(report)
    return report


@app.command()
def deploy(
    components: Optional[List[str]] = typer.Argument(
        None, help="Components to deploy. Everything is deployed when none are given."
    ),
) -> None:
    """Stage for production and release into the production repository."""
    run_command(run_deploy(components or []), "Deploy")
