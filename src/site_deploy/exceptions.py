"""Exceptions raised by site-deploy."""

from typing import Dict, Optional, Sequence


class SiteDeployError(Exception):
    """Base class for all site-deploy errors"""

    pass


class PreconditionError(SiteDeployError):
    """Raised when a required root, argument or option is missing or invalid.

    Nothing has been mutated when this is raised.
    """

    pass


class FileOperationError(SiteDeployError):
    """Raised when a single file operation fails"""

    pass


class MinifyError(SiteDeployError):
    """Raised when a file cannot be minified"""

    pass


class BatchError(SiteDeployError):
    """Raised when one or more operations in a concurrent batch failed.

    Every operation in the batch has completed by the time this is raised,
    `failures` maps each failed path to its error message.
    """

    def __init__(self, action: str, failures: Dict[str, str]):
        self.action = action
        self.failures = dict(failures)
        super().__init__(f"Failed to {action} {len(self.failures)} path(s)")

    def __str__(self) -> str:
        details = "; ".join(f"{path}: {error}" for path, error in sorted(self.failures.items()))
        return f"{self.args[0]}: {details}"


class ExternalToolError(SiteDeployError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command '{' '.join(self.command)}' failed with exit code {returncode}"
            + (f": {output.strip()}" if output.strip() else "")
        )


class PromotionError(SiteDeployError):
    """Raised when promotion to production fails. The repositories have been rolled back."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)
