"""Utilities for matching ignore patterns against tree entries."""

import fnmatch
from pathlib import Path
from typing import Iterable, Set


# Entries never reconciled between trees
DEFAULT_IGNORE_PATTERNS = {
    ".git",
}


def build_ignore_patterns(patterns: Iterable[str] = ()) -> Set[str]:
    """Merge user supplied patterns with the default ones.

    Blank entries and `#` comments are dropped so a pattern list can be read
    straight from a `.gitignore` style file.
    """
    result = set(DEFAULT_IGNORE_PATTERNS)
    for pattern in patterns:
        pattern = pattern.strip()
        if pattern and not pattern.startswith("#"):
            result.add(pattern)
    return result


def should_ignore_path(relative_path: str, ignore_patterns: Set[str]) -> bool:
    """Check if a relative (POSIX) path is matched by any ignore pattern.

    Args:
        relative_path: Path relative to the tree root, using forward slashes
        ignore_patterns: Set of patterns to match against

    Returns:
        True if the path should be ignored, False otherwise
    """
    parts = Path(relative_path).parts

    for pattern in ignore_patterns:
        # Root relative patterns only match from the first segment
        if pattern.startswith("/"):
            root_pattern = pattern[1:].rstrip("/")
            if parts and fnmatch.fnmatch(parts[0], root_pattern):
                return True
            if fnmatch.fnmatch(relative_path, root_pattern):
                return True
            continue

        # Directory patterns match any segment of the path
        if pattern.endswith("/"):
            if pattern[:-1] in parts:
                return True
            continue

        # Direct name match (e.g., ".git", "CNAME")
        if pattern in parts:
            return True

        if fnmatch.fnmatch(relative_path, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True

    return False
