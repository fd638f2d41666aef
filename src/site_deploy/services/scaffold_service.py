"""Service for creating new components from templates."""

from pathlib import Path
from typing import List

from loguru import logger

from site_deploy.config import DeployConfig
from site_deploy.exceptions import PreconditionError
from site_deploy.utils import COMPONENT_NAME

NAME_MARKER = "<compName>"
FILENAME_MARKER = "comp"


class ScaffoldService:
    """Creates the directory and starter files of a new component."""

    def __init__(self, config: DeployConfig):
        self.config = config
        self.log = logger.bind(component="scaffold")

    def render(self, template: Path, name: str) -> str:
        content = template.read_text(encoding="utf-8")
        if template.suffix in (".html", ".htm"):
            # Every marker is replaced, not only the first
            content = content.replace(NAME_MARKER, name.upper())
        return content

    def create_component(self, name: str) -> List[Path]:
        """
        Create `components/<name>` with one file per template.

        Template file names have `comp` replaced by the component name.

        Returns:
            Paths of the created files

        Raises:
            PreconditionError: If the name is missing or invalid, the component
                already exists, or there are no templates
        """
        if not name:
            raise PreconditionError("No component name specified.")
        if not COMPONENT_NAME.match(name):
            raise PreconditionError(f"Invalid component name: {name}")

        components_path = self.config.components_path
        if not components_path.is_dir():
            raise PreconditionError(f"No project directory found: {components_path}")

        new_dir = components_path / name
        if new_dir.exists():
            raise PreconditionError(f"Component with name {name.upper()} already exists")

        templates_dir = self.config.templates_dir
        templates = []
        if templates_dir.is_dir():
            templates = sorted(p for p in templates_dir.iterdir() if p.is_file())
        if not templates:
            raise PreconditionError(f"No templates found in {templates_dir}")

        new_dir.mkdir()
        created = []
        for template in templates:
            target = new_dir / template.name.replace(FILENAME_MARKER, name, 1)
            target.write_text(self.render(template, name), encoding="utf-8")
            created.append(target)

        self.log.info(f"Created component {name} with {len(created)} files")
        return created
