"""Thin wrapper around the git command line."""

import subprocess
from pathlib import Path
from typing import List

from loguru import logger

from site_deploy.exceptions import ExternalToolError, PreconditionError


def _lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class GitRunner:
    """Runs git commands inside one working tree."""

    def __init__(self, repo_path: Path, executable: str = "git"):
        self.repo_path = repo_path
        self.executable = executable
        self.log = logger.bind(component=f"git:{repo_path.name}")

    def run(self, *args: str) -> str:
        """
        Run a git command and return its standard output.

        Raises:
            PreconditionError: If the repository directory does not exist
            ExternalToolError: If git is missing or exits non-zero
        """
        if not self.repo_path.is_dir():
            raise PreconditionError(f"Repository not found: {self.repo_path}")

        command = [self.executable, *args]
        self.log.debug(" ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            raise ExternalToolError(command, -1, str(e)) from e

        if result.returncode != 0:
            raise ExternalToolError(command, result.returncode, result.stdout + result.stderr)
        return result.stdout

    def current_branch(self) -> str:
        return self.run("branch", "--show-current").strip()

    def head(self) -> str:
        return self.run("rev-parse", "HEAD").strip()

    def add_all(self) -> None:
        self.run("add", "-A")

    def staged_changes(self) -> List[str]:
        """Files staged for the next commit."""
        return _lines(self.run("diff", "--name-only", "--cached"))

    def changed_files(self) -> List[str]:
        """Modified, deleted and untracked files of the working tree."""
        changed = _lines(self.run("diff", "--name-only"))
        untracked = _lines(self.run("ls-files", "--others", "--exclude-standard"))
        return sorted(set(changed) | set(untracked))

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    def push(self) -> None:
        self.run("push")

    def stash_count(self) -> int:
        return len(_lines(self.run("stash", "list")))

    def stash(self) -> bool:
        """Stash local changes, untracked files included. Returns True if anything was stashed."""
        before = self.stash_count()
        self.run("stash", "push", "--include-untracked")
        return self.stash_count() > before

    def stash_pop(self) -> None:
        self.run("stash", "pop")

    def checkout(self, branch: str) -> None:
        self.run("checkout", branch)

    def merge(self, branch: str, no_ff: bool = True) -> None:
        args = ["merge", "--no-edit"]
        if no_ff:
            args.append("--no-ff")
        self.run(*args, branch)

    def reset_hard(self, ref: str = "HEAD") -> None:
        self.run("reset", "--hard", ref)

    def clean(self, *paths: str) -> None:
        """Remove untracked files and directories."""
        self.run("clean", "-fd", *(["--", *paths] if paths else []))
