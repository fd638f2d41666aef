"""Service for staging development files into the staging repository."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Dict, List, Optional, Set

from loguru import logger

from site_deploy.config import DeployConfig, StageOptions
from site_deploy.exceptions import BatchError, PreconditionError
from site_deploy.file_utils import copy_file, ensure_directory, read_text, run_batch, write_text
from site_deploy.git import GitRunner
from site_deploy.minify import FileKind, minify
from site_deploy.substitution import OverrideValue, apply_overrides
from site_deploy.sync import TreeReconciler, list_tree
from site_deploy.sync.utils import EntryKind, ReconcileReport, paths_of_kind


def utc_timestamp() -> str:
    """Current time in RFC 1123 form, e.g. `Sat, 18 Oct 2026 09:00:00 GMT`."""
    return format_datetime(datetime.now(timezone.utc), usegmt=True)


@dataclass
class StageReport:
    """Result of a staging run.

    Attributes:
        staged: Files written to staging, relative to the development tree
        skipped: Files that are never published
        pruned: Report of the staging clean-up
        committed: True if a commit was pushed
    """

    options: StageOptions
    staged: Set[str] = field(default_factory=set)
    skipped: Set[str] = field(default_factory=set)
    pruned: ReconcileReport = field(default_factory=ReconcileReport)
    committed: bool = False
    commit_message: Optional[str] = None


class StageService:
    """
    Copies component sources from the development tree to the staging docs
    tree, minifying and substituting them on the way.
    """

    def __init__(
        self,
        config: DeployConfig,
        git: Optional[GitRunner] = None,
        overrides: Optional[Dict[str, OverrideValue]] = None,
        reconciler: Optional[TreeReconciler] = None,
    ):
        self.config = config
        self.git = git or GitRunner(config.stage_path)
        self.overrides = overrides if overrides is not None else config.resolved_overrides()
        self.reconciler = reconciler or TreeReconciler(config.ignore_patterns)
        self.log = logger.bind(component="stage")

    @property
    def source_path(self) -> Path:
        return self.config.dev_path

    @property
    def dest_path(self) -> Path:
        return self.config.stage_docs_path

    async def check_preconditions(self, options: StageOptions) -> None:
        """
        Make sure the development tree and every target exist.

        Raises:
            PreconditionError: On the first missing directory
        """
        if not self.source_path.is_dir():
            raise PreconditionError(f"Development directory not found: {self.source_path}")
        if not self.config.stage_path.is_dir():
            raise PreconditionError(f"Staging repository not found: {self.config.stage_path}")
        for target in options.targets:
            if not (self.source_path / target).is_dir():
                raise PreconditionError(f'Source directory for "{target}" not found')

    async def process_file(self, rel_path: str, options: StageOptions) -> bool:
        """
        Stage one file.

        Args:
            rel_path: Path relative to the development tree
            options: Staging options

        Returns:
            False if the file kind is never published
        """
        kind = FileKind.from_path(rel_path)
        if kind == FileKind.MARKDOWN:
            return False

        source = self.source_path / rel_path
        dest = self.dest_path / rel_path
        await ensure_directory(dest.parent)

        if kind == FileKind.OTHER:
            await copy_file(source, dest)
            return True

        content = await read_text(source)
        if kind == FileKind.SCRIPT and options.mode.substitute:
            content = apply_overrides(content, self.overrides)
        content = minify(content, kind, options.minify_profile)
        await write_text(dest, content)
        return True

    async def target_files(self, target: str) -> List[str]:
        """Files of a target, relative to the development tree."""
        entries = await list_tree(self.source_path / target, self.config.ignore_patterns)
        return sorted(f"{target}/{path}" for path in paths_of_kind(entries, EntryKind.FILE))

    async def stage(self, options: StageOptions) -> StageReport:
        """
        Stage the targets of `options`.

        Raises:
            PreconditionError: If a required directory is missing
            BatchError: If any file could not be staged, after all files were tried
            ExternalToolError: If committing or pushing fails
        """
        await self.check_preconditions(options)
        report = StageReport(options=options)
        self.log.info(f"Staging {', '.join(options.targets)} (type {options.mode.value})")

        await ensure_directory(self.dest_path)

        # Clean up staging by deleting anything no longer in development
        report.pruned = await self.reconciler.reconcile(self.source_path, self.dest_path)
        if report.pruned.errors:
            raise BatchError("prune", report.pruned.errors)

        files: List[str] = []
        for target in options.targets:
            files.extend(await self.target_files(target))
        files = sorted(set(files))

        results: Dict[str, bool] = {}

        async def process(rel_path: str) -> None:
            results[rel_path] = await self.process_file(rel_path, options)

        failures = await run_batch({rel_path: process(rel_path) for rel_path in files})
        if failures:
            raise BatchError("stage", failures)

        report.staged = {path for path, staged in results.items() if staged}
        report.skipped = {path for path, staged in results.items() if not staged}
        self.log.info(f"Finished processing {len(report.staged)} files")

        if options.mode.commits:
            self.commit_and_push(report)
        return report

    def commit_and_push(self, report: StageReport) -> None:
        """Commit and push staging if anything changed."""
        self.git.add_all()
        if not self.git.staged_changes():
            self.log.info("Nothing new to push")
            return

        message = f"Staging: type - {report.options.mode.value} {utc_timestamp()}"
        self.log.info("Committing staged changes")
        self.git.commit(message)
        self.git.push()
        report.committed = True
        report.commit_message = message
