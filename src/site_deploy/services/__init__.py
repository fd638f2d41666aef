"""Services package."""

from .deploy_service import DeployReport, DeployService
from .scaffold_service import ScaffoldService
from .stage_service import StageReport, StageService

__all__ = [
    "DeployReport",
    "DeployService",
    "ScaffoldService",
    "StageReport",
    "StageService",
]
