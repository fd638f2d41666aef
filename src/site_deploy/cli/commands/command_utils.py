"""utility functions for commands"""

import asyncio
from typing import Any, Coroutine, TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.tree import Tree

from site_deploy.exceptions import (
    BatchError,
    ExternalToolError,
    PreconditionError,
    SiteDeployError,
)
from site_deploy.sync.utils import ReconcileReport

console = Console()

T = TypeVar("T")


def run_command(operation: Coroutine[Any, Any, T], action: str) -> T:
    """Run an async operation, turning failures into a one line message and exit code 1."""
    try:
        return asyncio.run(operation)
    except PreconditionError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    except BatchError as e:
        console.print(f"[red]✗ {action} failed for {len(e.failures)} path(s)[/red]")
        for path, error in sorted(e.failures.items()):
            console.print(f"  [red]{path}[/red]: {error}")
        raise typer.Exit(1)
    except ExternalToolError as e:
        logger.debug(e.output)
        console.print(f"[red]✗ {action} failed: {e}[/red]")
        raise typer.Exit(1)
    except SiteDeployError as e:
        logger.opt(exception=e).debug(f"{action} failed")
        console.print(f"[red]✗ {action} failed: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.exception(f"{action} failed")
            typer.echo(f"Error during {action.lower()}: {e}", err=True)
            raise typer.Exit(1)
        raise


def reconcile_tree(title: str, report: ReconcileReport) -> Tree:
    """Build a tree of the paths a reconcile pass deleted."""
    tree = Tree(title)
    if report.total_changes == 0 and report.ok:
        tree.add("[green]Nothing to prune[/green]")
        return tree

    verb = "Would delete" if report.dry_run else "Deleted"
    if report.deleted_dirs:
        branch = tree.add(f"[red]{verb} {len(report.deleted_dirs)} directories[/red]")
        for path in sorted(report.deleted_dirs):
            branch.add(f"[red]{path}/[/red]")
    if report.deleted_files:
        branch = tree.add(f"[red]{verb} {len(report.deleted_files)} files[/red]")
        for path in sorted(report.deleted_files):
            branch.add(f"[red]{path}[/red]")
    if report.errors:
        branch = tree.add(f"[bold red]{len(report.errors)} errors[/bold red]")
        for path, error in sorted(report.errors.items()):
            branch.add(f"[yellow]{path}[/yellow]: {error}")
    return tree
