"""Command module for listing the directories touched by uncommitted changes."""

from pathlib import Path
from typing import Optional, Set

import typer
from rich.tree import Tree

from site_deploy.cli.app import app
from site_deploy.cli.commands.command_utils import console, run_command
from site_deploy.config import get_config
from site_deploy.git import GitRunner
from site_deploy.sync import reduce_to_directories


def changes_tree(title: str, directories: Set[str]) -> Tree:
    tree = Tree(title)
    if not directories:
        tree.add("No changes")
    for directory in sorted(directories):
        tree.add(f"[yellow]{directory or '.'}/[/yellow]")
    return tree


async def run_changes(repo: Path) -> Set[str]:
    changed = GitRunner(repo).changed_files()
    directories = reduce_to_directories(changed)
    console.print(changes_tree(f"{len(changed)} changed files in {repo}", directories))
    return directories


@app.command()
def changes(
    repo: Optional[Path] = typer.Option(
        None, "--repo", "-r", help="Repository to inspect. Defaults to the staging repository."
    ),
) -> None:
    """Show the directories that a deploy would copy."""
    run_command(run_changes(repo or get_config().stage_path), "Changes")
