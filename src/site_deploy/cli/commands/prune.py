"""Command module for pruning a destination tree against a source tree."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.panel import Panel

from site_deploy.cli.app import app
from site_deploy.cli.commands.command_utils import console, reconcile_tree, run_command
from site_deploy.config import get_config
from site_deploy.exceptions import BatchError
from site_deploy.sync import TreeReconciler
from site_deploy.sync.utils import ReconcileReport


async def run_prune(
    source: Path, dest: Path, ignore: List[str], dry_run: bool
) -> ReconcileReport:
    reconciler = TreeReconciler([*get_config().ignore_patterns, *ignore])
    report = await reconciler.reconcile(source, dest, dry_run=dry_run)
    console.print(Panel(reconcile_tree(str(dest), report), expand=False))
    if report.errors:
        raise BatchError("prune", report.errors)
    return report


@app.command()
def prune(
    source: Path = typer.Argument(..., help="Tree that is the source of truth."),
    dest: Path = typer.Argument(..., help="Tree to prune."),
    ignore: Optional[List[str]] = typer.Option(
        None, "--ignore", "-i", help="Pattern of entries to leave alone. May be repeated."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Only show what would be deleted."
    ),
) -> None:
    """Delete everything in DEST that does not exist in SOURCE."""
    run_command(run_prune(source, dest, ignore or [], dry_run), "Prune")
