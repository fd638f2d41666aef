"""site-deploy - stage and promote a static site between git repositories."""

__version__ = "0.1.0"
