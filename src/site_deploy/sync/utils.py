"""Types and utilities for tree reconciliation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Set


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirectoryEntry:
    """An entry of a directory tree, relative to the root it was listed from.

    `relative_path` uses forward slashes and has no leading slash, so two trees
    can be compared regardless of where they live on disk.
    """

    relative_path: str
    kind: EntryKind

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


def paths_of_kind(entries: Iterable[DirectoryEntry], kind: EntryKind) -> Set[str]:
    """Get the relative paths of all entries of one kind."""
    return {entry.relative_path for entry in entries if entry.kind == kind}


@dataclass
class ReconcileReport:
    """Report of a pruning pass over a destination tree.

    Attributes:
        deleted_dirs: Directories that existed only in the destination
        deleted_files: Files that existed only in the destination
        errors: Paths that could not be deleted, with the error message
        dry_run: True if nothing was actually deleted
    """

    deleted_dirs: Set[str] = field(default_factory=set)
    deleted_files: Set[str] = field(default_factory=set)
    errors: Dict[str, str] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def deleted(self) -> Set[str]:
        """All deleted paths, directories and files."""
        return self.deleted_dirs | self.deleted_files

    @property
    def total_changes(self) -> int:
        return len(self.deleted_dirs) + len(self.deleted_files)

    @property
    def ok(self) -> bool:
        return not self.errors
