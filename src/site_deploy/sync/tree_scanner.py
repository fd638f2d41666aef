"""Recursive listing of directory trees."""

import asyncio
from pathlib import Path
from typing import List, Optional, Set

from loguru import logger

from site_deploy.exceptions import PreconditionError
from site_deploy.ignore_utils import should_ignore_path
from site_deploy.sync.utils import DirectoryEntry, EntryKind

log = logger.bind(component="tree_scanner")


def _scan(root: Path, ignore_patterns: Set[str]) -> List[DirectoryEntry]:
    entries = []
    for path in root.rglob("*"):
        rel_path = path.relative_to(root).as_posix()
        if ignore_patterns and should_ignore_path(rel_path, ignore_patterns):
            continue
        kind = EntryKind.DIRECTORY if path.is_dir() else EntryKind.FILE
        entries.append(DirectoryEntry(relative_path=rel_path, kind=kind))
    return entries


async def list_tree(root: Path, ignore_patterns: Optional[Set[str]] = None) -> List[DirectoryEntry]:
    """
    Recursively list every file and directory below `root`.

    Args:
        root: Directory to scan
        ignore_patterns: Entries matching any of these are left out

    Returns:
        Entries with paths relative to `root`

    Raises:
        PreconditionError: If root does not exist or is not a directory
    """
    if not root.is_dir():
        raise PreconditionError(f"Directory not found: {root}")

    log.debug(f"Scanning directory: {root}")
    entries = await asyncio.to_thread(_scan, root, ignore_patterns or set())
    log.debug(f"Found {len(entries)} entries in {root}")
    return entries
