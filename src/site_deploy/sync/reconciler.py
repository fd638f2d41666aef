"""Prune destination entries that no longer exist in the source tree."""

import asyncio
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from site_deploy.exceptions import PreconditionError
from site_deploy.file_utils import delete_file, delete_recursive, run_batch
from site_deploy.ignore_utils import build_ignore_patterns
from site_deploy.sync.reducer import collapse_nested, is_descendant
from site_deploy.sync.tree_scanner import list_tree
from site_deploy.sync.utils import EntryKind, ReconcileReport, paths_of_kind


class TreeReconciler:
    """
    Removes files and directories from a destination tree that have no
    counterpart in a source tree. The source tree is never modified.

    Directories are pruned before files. Deleting a directory removes the files
    below it, so the destination is only re-scanned for files when at least one
    directory went away.
    """

    def __init__(self, ignore_patterns: Optional[Iterable[str]] = None):
        self.ignore_patterns = build_ignore_patterns(ignore_patterns or ())
        self.log = logger.bind(component="reconciler")

    async def reconcile(
        self, source_root: Path, dest_root: Path, dry_run: bool = False
    ) -> ReconcileReport:
        """
        Prune `dest_root` so it holds nothing that `source_root` does not.

        Args:
            source_root: Tree that is the source of truth
            dest_root: Tree to prune
            dry_run: Only report what would be deleted

        Returns:
            ReconcileReport with deleted paths and any per-path errors

        Raises:
            PreconditionError: If either root is missing
        """
        for root in (source_root, dest_root):
            if not root.is_dir():
                raise PreconditionError(f"Directory not found: {root}")

        report = ReconcileReport(dry_run=dry_run)

        source_entries, dest_entries = await asyncio.gather(
            list_tree(source_root, self.ignore_patterns),
            list_tree(dest_root, self.ignore_patterns),
        )

        source_dirs = paths_of_kind(source_entries, EntryKind.DIRECTORY)
        dest_dirs = paths_of_kind(dest_entries, EntryKind.DIRECTORY)
        delete_dirs = dest_dirs - source_dirs
        report.deleted_dirs = delete_dirs

        if delete_dirs:
            if dry_run:
                for rel_path in sorted(delete_dirs):
                    self.log.info(f"Would delete directory: {dest_root / rel_path}")
            else:
                # Nested directories go with their ancestor
                operations = {}
                for rel_path in sorted(collapse_nested(delete_dirs)):
                    self.log.info(f"Deleting directory: {dest_root / rel_path}")
                    operations[rel_path] = delete_recursive(dest_root / rel_path)
                report.errors.update(await run_batch(operations))

                dest_entries = await list_tree(dest_root, self.ignore_patterns)

        source_files = paths_of_kind(source_entries, EntryKind.FILE)
        dest_files = paths_of_kind(dest_entries, EntryKind.FILE)
        delete_files = dest_files - source_files

        if dry_run:
            # Files below a doomed directory go with it
            delete_files = {
                rel_path
                for rel_path in delete_files
                if not any(is_descendant(directory, rel_path) for directory in delete_dirs)
            }
        report.deleted_files = delete_files

        if delete_files:
            if dry_run:
                for rel_path in sorted(delete_files):
                    self.log.info(f"Would delete file: {dest_root / rel_path}")
            else:
                operations = {}
                for rel_path in sorted(delete_files):
                    self.log.info(f"Deleting file: {dest_root / rel_path}")
                    operations[rel_path] = delete_file(dest_root / rel_path)
                report.errors.update(await run_batch(operations))

        # Only paths that are actually gone count as deleted
        failed = set(report.errors)
        report.deleted_dirs = {
            rel_path
            for rel_path in report.deleted_dirs
            if rel_path not in failed and not any(is_descendant(f, rel_path) for f in failed)
        }
        report.deleted_files -= failed

        self.log.debug(
            f"Reconciled {dest_root}: {len(report.deleted_dirs)} directories, "
            f"{len(report.deleted_files)} files, {len(report.errors)} errors"
        )
        return report


async def reconcile(
    source_root: Path,
    dest_root: Path,
    ignore_patterns: Optional[Iterable[str]] = None,
    dry_run: bool = False,
) -> ReconcileReport:
    """Prune `dest_root` against `source_root` with a one-off reconciler."""
    return await TreeReconciler(ignore_patterns).reconcile(source_root, dest_root, dry_run=dry_run)
