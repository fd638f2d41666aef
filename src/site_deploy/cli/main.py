"""Main CLI entry point for site-deploy."""  # pragma: no cover

from site_deploy.cli.app import app  # pragma: no cover

# Register commands
from site_deploy.cli.commands import changes, deploy, new_component, prune, stage  # pragma: no cover

__all__ = ["changes", "deploy", "new_component", "prune", "stage"]  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
