"""Configuration management for site-deploy."""

from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from site_deploy.exceptions import PreconditionError
from site_deploy.minify import MinifyProfile
from site_deploy.substitution import OverrideValue, load_overrides

PROD_REPO_NAME = "rt-comps.github.io"
STAGE_REPO_NAME = "stage"
DEFAULT_TARGETS = ["components", "modules", "static"]


class DeployConfig(BaseSettings):
    """Configuration for the staging and production repositories."""

    # Directory holding both repositories
    workspace: Path = Field(
        default_factory=Path.cwd,
        description="Directory containing the production and staging repositories",
    )
    prod_repo: str = Field(default=PROD_REPO_NAME, description="Production repository name")
    stage_repo: str = Field(default=STAGE_REPO_NAME, description="Staging repository name")
    dev_subdir: str = Field(
        default="dev/simon", description="Development tree inside the production repository"
    )
    docs_subdir: str = Field(default="docs", description="Published tree inside each repository")
    components_dir: str = Field(
        default="components", description="Directory of named components in the development tree"
    )
    default_targets: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TARGETS),
        description="Paths staged when no target is given",
    )
    release_branch: str = Field(default="Release", description="Production release branch")

    overrides: Dict[str, OverrideValue] = Field(
        default_factory=dict, description="Production constant overrides"
    )
    overrides_file: Optional[Path] = Field(
        default=None, description="YAML file of overrides, merged over `overrides`"
    )
    ignore_patterns: Set[str] = Field(
        default_factory=lambda: {".git"}, description="Entries never pruned or compared"
    )
    templates_dir: Path = Field(
        default_factory=lambda: Path(__file__).parent / "templates",
        description="Templates for new components",
    )

    log_level: str = "INFO"
    log_file: Optional[Path] = Field(
        default_factory=lambda: Path.home() / ".site-deploy" / "site-deploy.log",
        description="Rotating log file, disabled when empty",
    )

    model_config = SettingsConfigDict(
        env_prefix="SITE_DEPLOY_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("log_file", "overrides_file", mode="before")
    @classmethod
    def empty_path_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def prod_path(self) -> Path:
        return self.workspace / self.prod_repo

    @property
    def stage_path(self) -> Path:
        return self.workspace / self.stage_repo

    @property
    def dev_path(self) -> Path:
        """Get development tree path."""
        return self.prod_path / self.dev_subdir

    @property
    def stage_docs_path(self) -> Path:
        return self.stage_path / self.docs_subdir

    @property
    def prod_docs_path(self) -> Path:
        return self.prod_path / self.docs_subdir

    @property
    def components_path(self) -> Path:
        return self.dev_path / self.components_dir

    def resolved_overrides(self) -> Dict[str, OverrideValue]:
        """Overrides from settings with the overrides file merged over them."""
        return {**self.overrides, **load_overrides(self.overrides_file)}


def get_config() -> DeployConfig:
    """Load configuration from the environment and `.env`."""
    return DeployConfig()


class StageMode(IntEnum):
    """How files are presented on staging."""

    PLAIN = 1
    MINIFIED = 2
    PRODUCTION = 3
    PRODUCTION_MINIFIED = 4
    # Staging on behalf of a deploy: nothing is committed
    DEPLOY = 8

    @property
    def minify_profile(self) -> MinifyProfile:
        return MinifyProfile.FULL if self.value % 2 == 0 else MinifyProfile.COMMENTS

    @property
    def substitute(self) -> bool:
        """Whether production overrides are applied."""
        return self.value > 2

    @property
    def commits(self) -> bool:
        return self != StageMode.DEPLOY


class StageOptions(BaseModel):
    """Immutable options for one staging run."""

    model_config = ConfigDict(frozen=True)

    mode: StageMode = StageMode.MINIFIED
    targets: Tuple[str, ...]
    minify_profile: MinifyProfile = MinifyProfile.FULL

    @field_validator("targets")
    @classmethod
    def targets_not_empty(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if not v:
            raise ValueError("At least one target is required")
        return v

    @classmethod
    def for_mode(cls, mode: StageMode, targets: Sequence[str]) -> "StageOptions":
        return cls(mode=mode, targets=tuple(targets), minify_profile=mode.minify_profile)

    @classmethod
    def from_args(
        cls,
        args: Sequence[str],
        default_targets: Sequence[str] = DEFAULT_TARGETS,
        components_dir: str = "components",
    ) -> "StageOptions":
        """
        Build options from command line arguments.

        An integer first argument is the mode and the rest are targets. Without
        arguments, or when only a mode is given, the default targets are staged.
        Targets that are not default targets name components.

        Raises:
            PreconditionError: If the mode is not a known staging mode
        """
        params = list(args)
        mode = StageMode.MINIFIED

        if params:
            try:
                value = int(params[0])
            except ValueError:
                value = None
            if value is not None:
                try:
                    mode = StageMode(value)
                except ValueError:
                    raise PreconditionError(
                        f'Unrecognised value "{params[0]}" for staging type. '
                        "Must be in range 1...4, or 8 to stage for a deploy"
                    )
                params = params[1:]

        if not params:
            params = list(default_targets)

        targets = [
            target if target in default_targets else f"{components_dir}/{target}"
            for target in params
        ]
        return cls.for_mode(mode, targets)
