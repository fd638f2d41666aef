"""CLI commands for site-deploy."""

from . import changes, deploy, new_component, prune, stage

__all__ = ["changes", "deploy", "new_component", "prune", "stage"]
