"""Reduce a list of changed files to the directories that need copying."""

from typing import Iterable, Set

SEPARATOR = "/"


def is_descendant(parent: str, child: str) -> bool:
    """Check if `child` is strictly below `parent`.

    The test is separator aware: `foobar` is not below `foo`. The empty path is
    the root and every other path is below it.
    """
    if parent == child:
        return False
    if parent == "":
        return True
    return child.startswith(parent + SEPARATOR)


def parent_directory(file_path: str) -> str:
    """Get the directory part of a relative path, `""` for a root level file."""
    file_path = file_path.strip().strip(SEPARATOR)
    head, sep, _ = file_path.rpartition(SEPARATOR)
    return head if sep else ""


def collapse_nested(directories: Iterable[str]) -> Set[str]:
    """Drop every directory that is below another directory of the set."""
    unique = set(directories)
    return {
        directory
        for directory in unique
        if not any(is_descendant(other, directory) for other in unique)
    }


def reduce_to_directories(changed_file_paths: Iterable[str]) -> Set[str]:
    """
    Collapse changed file paths to the smallest set of directories covering them.

    Copying every returned directory recursively reproduces every changed
    file. No returned directory lies inside another returned directory.

    Args:
        changed_file_paths: Relative file paths, e.g. `git diff --name-only` lines

    Returns:
        Set of relative directory paths, `""` standing for the root
    """
    directories = {parent_directory(path) for path in changed_file_paths if path and path.strip()}
    return collapse_nested(directories)
