"""Common test fixtures."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from site_deploy.config import DeployConfig
from site_deploy.exceptions import ExternalToolError


def create_test_file(path: Path, content: str = "test content") -> Path:
    """Create a test file with given content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def tree_paths(root: Path) -> set:
    """All relative paths below root, directories included."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*")}


class FakeGit:
    """In-memory stand-in for GitRunner that records the commands it receives."""

    def __init__(
        self,
        branch: str = "main",
        staged: Optional[List[str]] = None,
        changed: Optional[List[str]] = None,
        fail_on: Optional[str] = None,
    ):
        self.branch = branch
        self.staged = list(staged or [])
        self.changed = list(changed or [])
        self.fail_on = fail_on
        self.calls: List[str] = []
        self.stashes = 0
        self.commits: List[str] = []
        self.head_sha = "abc123"

    def _call(self, name: str, *args: str) -> None:
        self.calls.append(" ".join([name, *args]).strip())
        if self.fail_on == name:
            raise ExternalToolError(["git", name, *args], 1, f"{name} failed")

    def current_branch(self) -> str:
        self._call("current_branch")
        return self.branch

    def head(self) -> str:
        self._call("head")
        return self.head_sha

    def add_all(self) -> None:
        self._call("add_all")

    def staged_changes(self) -> List[str]:
        self._call("staged_changes")
        return list(self.staged)

    def changed_files(self) -> List[str]:
        self._call("changed_files")
        return list(self.changed)

    def commit(self, message: str) -> None:
        self._call("commit")
        self.commits.append(message)

    def push(self) -> None:
        self._call("push")

    def stash(self) -> bool:
        self._call("stash")
        self.stashes += 1
        return True

    def stash_pop(self) -> None:
        self._call("stash_pop")
        self.stashes -= 1

    def checkout(self, branch: str) -> None:
        self._call("checkout", branch)
        self.branch = branch

    def merge(self, branch: str, no_ff: bool = True) -> None:
        self._call("merge", branch)

    def reset_hard(self, ref: str = "HEAD") -> None:
        self._call("reset_hard", ref)

    def clean(self, *paths: str) -> None:
        self._call("clean", *paths)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace with a production repo holding a dev tree, and a staging repo.

    rt-comps.github.io/
      dev/simon/components/btn/{btn.js, btn.html, btn.css, README.md, icon.png}
      dev/simon/modules/rt.mjs
      dev/simon/static/img/logo.svg
      docs/
    stage/
      docs/
    """
    dev = tmp_path / "rt-comps.github.io" / "dev" / "simon"
    create_test_file(
        dev / "components/btn/btn.js",
        "// Button component\nconst API_ROOT = 'http://localhost';\n\nexport const label = 'btn';\n",
    )
    create_test_file(
        dev / "components/btn/btn.html",
        "<!-- button template -->\n<template>\n  <button>  Click  </button>\n</template>\n",
    )
    create_test_file(dev / "components/btn/btn.css", "/* styles */\nbutton {\n  color: red;\n}\n")
    create_test_file(dev / "components/btn/README.md", "# Button\n")
    (dev / "components/btn/icon.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    create_test_file(dev / "modules/rt.mjs", "/* runtime */\nexport function init() {}\n")
    create_test_file(dev / "static/img/logo.svg", "<svg></svg>")

    (tmp_path / "rt-comps.github.io" / "docs").mkdir(parents=True)
    (tmp_path / "stage" / "docs").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def config(workspace: Path) -> DeployConfig:
    return DeployConfig(workspace=workspace, log_file=None, overrides={})


@pytest.fixture
def stage_git() -> FakeGit:
    return FakeGit(branch="main")


@pytest.fixture
def prod_git() -> FakeGit:
    return FakeGit(branch="main")


@pytest.fixture
def env_config(workspace: Path, monkeypatch) -> Dict[str, str]:
    """Point environment based configuration at the test workspace."""
    env = {
        "SITE_DEPLOY_WORKSPACE": str(workspace),
        "SITE_DEPLOY_LOG_FILE": "",
        "SITE_DEPLOY_LOG_LEVEL": "WARNING",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    monkeypatch.chdir(workspace)
    return env
