"""Command module for staging development files."""

from pathlib import Path
from typing import List, Optional

import typer

from site_deploy.cli.app import app
from site_deploy.cli.commands.command_utils import console, reconcile_tree, run_command
from site_deploy.config import StageOptions, get_config
from site_deploy.services.stage_service import StageReport, StageService
from site_deploy.substitution import load_overrides


def display_stage_report(report: StageReport) -> None:
    """Display a one-line summary of a staging run."""
    if report.pruned.total_changes:
        console.print(reconcile_tree("Pruned staging", report.pruned))

    summary = f"Staged {len(report.staged)} files"
    if report.skipped:
        summary += f" ([dim]{len(report.skipped)} skipped[/dim])"
    console.print(f"[green]✓ {summary}[/green] (type {report.options.mode.value})")

    if not report.options.mode.commits:
        return
    if report.committed:
        console.print(f"[green]✓ Pushed[/green] {report.commit_message}")
    else:
        console.print("Nothing new to push")


async def run_stage(args: List[str], overrides_file: Optional[Path]) -> StageReport:
    config = get_config()
    options = StageOptions.from_args(
        args, default_targets=config.default_targets, components_dir=config.components_dir
    )
    overrides = {**config.resolved_overrides(), **load_overrides(overrides_file)}
    report = await StageService(config, overrides=overrides).stage(options)
    display_stage_report(report)
    return report


@app.command()
def stage(
    args: Optional[List[str]] = typer.Argument(
        None,
        metavar="[TYPE] [TARGET]...",
        help=(
            "Optional staging type followed by components or default paths. "
            "1: copy, 2: minify (default), 3: copy with production values, "
            "4: minify with production values, 8: stage for a deploy without committing."
        ),
    ),
    overrides_file: Optional[Path] = typer.Option(
        None, "--overrides", "-o", help="YAML file of production values."
    ),
) -> None:
    """Copy development files into the staging repository and push them."""
    run_command(run_stage(args or [], overrides_file), "Stage")
