"""Service for promoting staged output into the production repository."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from loguru import logger

from site_deploy.config import DeployConfig, StageMode, StageOptions
from site_deploy.exceptions import BatchError, PreconditionError, PromotionError
from site_deploy.file_utils import copy_recursive, run_batch
from site_deploy.git import GitRunner
from site_deploy.promotion import PromotionStateMachine, RepoState
from site_deploy.services.stage_service import StageReport, StageService, utc_timestamp
from site_deploy.sync import TreeReconciler, reduce_to_directories
from site_deploy.sync.utils import ReconcileReport
from site_deploy.utils import sanitize_component_names


@dataclass
class DeployReport:
    """Result of a deploy."""

    components: List[str] = field(default_factory=list)
    stage: Optional[StageReport] = None
    pruned: ReconcileReport = field(default_factory=ReconcileReport)
    changed_files: List[str] = field(default_factory=list)
    copied_dirs: Set[str] = field(default_factory=set)
    committed: bool = False
    commit_message: Optional[str] = None
    final_state: RepoState = RepoState.CLEAN


def release_message(changed_files: Sequence[str], docs_subdir: str = "docs") -> str:
    prefix = f"{docs_subdir}/"
    files = [path[len(prefix) :] if path.startswith(prefix) else path for path in changed_files]
    return f"New Release: {utc_timestamp()}\n\nFiles Updated:\n" + "\n".join(files)


class DeployService:
    """
    Deploys a project: stages it for production, then copies the changed
    directories of staging into the release branch of production and pushes.
    """

    def __init__(
        self,
        config: DeployConfig,
        stage_service: Optional[StageService] = None,
        prod_git: Optional[GitRunner] = None,
        stage_git: Optional[GitRunner] = None,
    ):
        self.config = config
        self.stage_git = stage_git or GitRunner(config.stage_path)
        self.prod_git = prod_git or GitRunner(config.prod_path)
        self.stage_service = stage_service or StageService(config, git=self.stage_git)
        self.reconciler = TreeReconciler(config.ignore_patterns)
        self.log = logger.bind(component="deploy")

    def stage_options(self, components: Sequence[str]) -> StageOptions:
        return StageOptions.from_args(
            [str(StageMode.DEPLOY.value), *components],
            default_targets=self.config.default_targets,
            components_dir=self.config.components_dir,
        )

    def published_changes(self) -> List[str]:
        """Changed staging files inside the published docs tree."""
        prefix = f"{self.config.docs_subdir}/"
        changed = self.stage_git.changed_files()
        outside = [path for path in changed if not path.startswith(prefix)]
        if outside:
            self.log.warning(f"Ignoring {len(outside)} changed file(s) outside {prefix}")
        return [path for path in changed if path.startswith(prefix)]

    async def copy_changes(self, report: DeployReport) -> None:
        """Copy the directories holding staging changes into production."""
        report.changed_files = self.published_changes()
        # Every path is below docs/, so the repository root is never copied
        directories = reduce_to_directories(report.changed_files)

        operations = {}
        for directory in sorted(directories):
            source = self.config.stage_path / directory
            if not source.is_dir():
                # Deleted from staging, production was already pruned
                continue
            self.log.debug(f"Copying {directory}")
            operations[directory] = copy_recursive(source, self.config.prod_path / directory)

        failures = await run_batch(operations)
        if failures:
            raise BatchError("copy", failures)
        report.copied_dirs = set(operations)

    async def deploy(self, components: Sequence[str] = ()) -> DeployReport:
        """
        Stage and release the given components, or everything when none are given.

        Raises:
            PreconditionError: If staging preconditions fail, nothing is changed
            PromotionError: If the release failed and was rolled back
        """
        report = DeployReport(components=sanitize_component_names(components))
        options = self.stage_options(report.components)

        if not self.config.prod_path.is_dir():
            raise PreconditionError(f"Production repository not found: {self.config.prod_path}")
        await self.stage_service.check_preconditions(options)

        machine = PromotionStateMachine(self.prod_git, self.stage_git, self.config.release_branch)
        try:
            report.stage = await self.stage_service.stage(options)

            machine.begin()
            machine.merge()

            self.config.prod_docs_path.mkdir(parents=True, exist_ok=True)
            report.pruned = await self.reconciler.reconcile(
                self.config.stage_docs_path, self.config.prod_docs_path
            )
            if report.pruned.errors:
                raise BatchError("prune", report.pruned.errors)

            await self.copy_changes(report)

            self.prod_git.add_all()
            if self.prod_git.staged_changes():
                message = release_message(report.changed_files, self.config.docs_subdir)
                self.log.info("Committing new release")
                machine.commit(message)
                report.committed = True
                report.commit_message = message
            else:
                self.log.info("No files have changed")
                machine.rollback()
        except Exception as e:
            self.log.exception("Deploy failed")
            try:
                if machine.state == RepoState.CLEAN:
                    # Production untouched, only staging holds partial output
                    self.stage_git.reset_hard()
                    self.stage_git.clean()
                elif not machine.is_terminal:
                    machine.rollback()
            except Exception as rollback_error:
                self.log.error(f"Rollback failed: {rollback_error}")
            raise PromotionError(f"Deploy failed: {e}", cause=e) from e
        finally:
            report.final_state = machine.state

        return report
