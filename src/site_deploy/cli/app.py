from typing import Optional

import typer

from site_deploy.config import get_config
from site_deploy.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import site_deploy

        typer.echo(f"site-deploy version: {site_deploy.__version__}")
        raise typer.Exit()


app = typer.Typer(name="site-deploy", no_args_is_help=True)


@app.callback()
def app_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug output to the console.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Stage and deploy a static site between git repositories."""

    # Set up logging for every command unless --version was specified
    if not version and ctx.invoked_subcommand is not None:
        config = get_config()
        setup_logging(level="DEBUG" if verbose else config.log_level, log_file=config.log_file)
