"""State machine for promoting staged output into the production repository."""

from enum import Enum
from typing import Dict, Optional, Set

from loguru import logger

from site_deploy.exceptions import SiteDeployError
from site_deploy.git import GitRunner


class RepoState(str, Enum):
    CLEAN = "clean"
    STAGED = "staged"
    MERGED = "merged"
    COMMITTED = "committed"


TRANSITIONS: Dict[RepoState, Set[RepoState]] = {
    RepoState.CLEAN: {RepoState.STAGED},
    RepoState.STAGED: {RepoState.MERGED, RepoState.CLEAN},
    RepoState.MERGED: {RepoState.COMMITTED, RepoState.CLEAN},
    RepoState.COMMITTED: set(),
}


class InvalidTransitionError(SiteDeployError):
    """Raised when an action is not allowed in the current state"""

    pass


class PromotionStateMachine:
    """
    Tracks the production repository through a release.

    CLEAN -> STAGED: local changes stashed, release branch checked out
    STAGED -> MERGED: working branch merged into the release branch
    MERGED -> COMMITTED: release committed and pushed (terminal)

    Every non-terminal state rolls back to CLEAN: the release branch is reset
    to where it was, the working branch is checked out again, the stash is
    restored, and the staging working tree is reset.
    """

    def __init__(self, prod_git: GitRunner, stage_git: GitRunner, release_branch: str):
        self.prod_git = prod_git
        self.stage_git = stage_git
        self.release_branch = release_branch

        self.state = RepoState.CLEAN
        self.original_branch: Optional[str] = None
        self.release_head: Optional[str] = None
        self.stashed = False
        self.log = logger.bind(component="promotion")

    def _transition(self, target: RepoState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Cannot move from {self.state.value} to {target.value}"
            )
        self.log.debug(f"{self.state.value} -> {target.value}")
        self.state = target

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self.state]

    def begin(self) -> None:
        """Stash local changes and switch to the release branch."""
        if self.state != RepoState.CLEAN:
            raise InvalidTransitionError(f"Cannot begin from {self.state.value}")

        self.original_branch = self.prod_git.current_branch()
        if not self.original_branch:
            raise SiteDeployError("Production repository is not on a branch")

        self.stashed = self.prod_git.stash()
        try:
            self.prod_git.checkout(self.release_branch)
        except Exception:
            self._restore_branch()
            raise
        self.release_head = self.prod_git.head()
        self._transition(RepoState.STAGED)

    def merge(self) -> None:
        """Merge the working branch into the release branch."""
        if self.state != RepoState.STAGED:
            raise InvalidTransitionError(f"Cannot merge from {self.state.value}")
        self.log.info(f"Merging {self.original_branch} into {self.release_branch}")
        self.prod_git.merge(self.original_branch, no_ff=True)
        self._transition(RepoState.MERGED)

    def commit(self, message: str) -> None:
        """Commit and push the release, then go back to the working branch."""
        if self.state != RepoState.MERGED:
            raise InvalidTransitionError(f"Cannot commit from {self.state.value}")
        self.prod_git.commit(message)
        self.prod_git.push()
        self._transition(RepoState.COMMITTED)
        self._restore_branch()

    def rollback(self) -> None:
        """Return both repositories to where they were before `begin`."""
        if self.is_terminal:
            raise InvalidTransitionError(f"Cannot roll back from {self.state.value}")
        if self.state == RepoState.CLEAN:
            return

        self.log.warning(f"Rolling back from {self.state.value}")
        self.prod_git.reset_hard(self.release_head or "HEAD")
        self.prod_git.clean()
        self.stage_git.reset_hard()
        self.stage_git.clean()
        self._restore_branch()
        self._transition(RepoState.CLEAN)

    def _restore_branch(self) -> None:
        if self.original_branch and self.prod_git.current_branch() != self.original_branch:
            self.prod_git.checkout(self.original_branch)
        if self.stashed:
            self.prod_git.stash_pop()
            self.stashed = False
