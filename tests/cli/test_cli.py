"""Tests for the site-deploy command line."""

from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

from conftest import create_test_file, tree_paths
from site_deploy import __version__
from site_deploy.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_new_component(env_config, workspace: Path):
    result = runner.invoke(app, ["new-component", "card"])

    assert result.exit_code == 0, result.output
    component = workspace / "rt-comps.github.io/dev/simon/components/card"
    assert (component / "card.js").exists()
    assert (component / "card.html").exists()


def test_new_component_already_exists(env_config):
    result = runner.invoke(app, ["new-component", "btn"])

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_stage_for_deploy(env_config, workspace: Path):
    result = runner.invoke(app, ["stage", "8", "btn"])

    assert result.exit_code == 0, result.output
    assert "Staged 4 files" in result.output
    staged = tree_paths(workspace / "stage/docs")
    assert "components/btn/btn.js" in staged
    assert "components/btn/README.md" not in staged


def test_stage_with_overrides_file(env_config, workspace: Path):
    overrides = create_test_file(workspace / "prod.yaml", "API_ROOT: https://example.org\n")

    result = runner.invoke(app, ["stage", "8", "btn", "--overrides", str(overrides)])

    assert result.exit_code == 0, result.output
    staged = (workspace / "stage/docs/components/btn/btn.js").read_text()
    assert "const API_ROOT = 'https://example.org';" in staged


def test_stage_invalid_type(env_config, workspace: Path):
    result = runner.invoke(app, ["stage", "5", "btn"])

    assert result.exit_code == 1
    assert "Unrecognised value" in result.output
    assert list((workspace / "stage/docs").iterdir()) == []


def test_stage_missing_component(env_config):
    result = runner.invoke(app, ["stage", "2", "nope"])

    assert result.exit_code == 1
    assert "nope" in result.output


def test_prune(env_config, workspace: Path):
    source = workspace / "source"
    dest = workspace / "dest"
    create_test_file(source / "keep/a.html")
    create_test_file(dest / "keep/a.html")
    create_test_file(dest / "keep/b.html")
    create_test_file(dest / "gone/c.html")

    result = runner.invoke(app, ["prune", str(source), str(dest)])

    assert result.exit_code == 0, result.output
    assert tree_paths(dest) == {"keep", "keep/a.html"}


def test_prune_dry_run(env_config, workspace: Path):
    source = workspace / "source"
    dest = workspace / "dest"
    create_test_file(source / "keep/a.html")
    create_test_file(dest / "gone/c.html")
    create_test_file(dest / "CNAME")

    result = runner.invoke(app, ["prune", str(source), str(dest), "-n", "-i", "CNAME"])

    assert result.exit_code == 0, result.output
    assert "Would delete" in result.output
    assert tree_paths(dest) == {"gone", "gone/c.html", "CNAME"}


def test_prune_missing_source(env_config, workspace: Path):
    result = runner.invoke(app, ["prune", str(workspace / "missing"), str(workspace)])

    assert result.exit_code == 1
    assert "Directory not found" in result.output


def test_changes_missing_repo(env_config, workspace: Path):
    result = runner.invoke(app, ["changes", "--repo", str(workspace / "missing")])

    assert result.exit_code == 1
    assert "Repository not found" in result.output
