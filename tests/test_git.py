"""Tests for GitRunner against a real git binary."""

import os
import shutil
from pathlib import Path

import pytest

from conftest import create_test_file
from site_deploy.exceptions import ExternalToolError, PreconditionError
from site_deploy.git import GitRunner

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def repo(tmp_path: Path, monkeypatch) -> GitRunner:
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for prefix in ("GIT_AUTHOR", "GIT_COMMITTER"):
        monkeypatch.setenv(f"{prefix}_NAME", "Test User")
        monkeypatch.setenv(f"{prefix}_EMAIL", "test@example.com")

    path = tmp_path / "repo"
    path.mkdir()
    git = GitRunner(path)
    git.run("init", "-q")
    git.run("symbolic-ref", "HEAD", "refs/heads/main")

    create_test_file(path / "index.html", "<p>home</p>")
    create_test_file(path / ".gitignore", "*.log\n")
    git.add_all()
    git.commit("initial")
    return git


def test_missing_repository(tmp_path: Path):
    git = GitRunner(tmp_path / "missing")
    with pytest.raises(PreconditionError):
        git.current_branch()


def test_failing_command(repo: GitRunner):
    with pytest.raises(ExternalToolError) as exc_info:
        repo.checkout("does-not-exist")
    assert exc_info.value.returncode != 0
    assert exc_info.value.command[:2] == ["git", "checkout"]


def test_missing_executable(repo: GitRunner):
    git = GitRunner(repo.repo_path, executable="no-such-git-binary")
    with pytest.raises(ExternalToolError) as exc_info:
        git.head()
    assert exc_info.value.returncode == -1


def test_branch_and_head(repo: GitRunner):
    assert repo.current_branch() == "main"
    assert len(repo.head()) == 40


def test_changed_files(repo: GitRunner):
    root = repo.repo_path
    create_test_file(root / "index.html", "<p>changed</p>")
    create_test_file(root / "docs/new/page.html", "<p>new</p>")
    create_test_file(root / "debug.log", "ignored")

    assert repo.changed_files() == ["docs/new/page.html", "index.html"]
    assert repo.staged_changes() == []

    repo.add_all()
    assert repo.staged_changes() == ["docs/new/page.html", "index.html"]


def test_stash_round_trip(repo: GitRunner):
    assert repo.stash() is False

    create_test_file(repo.repo_path / "draft.html", "<p>draft</p>")
    assert repo.stash() is True
    assert not (repo.repo_path / "draft.html").exists()

    repo.stash_pop()
    assert (repo.repo_path / "draft.html").exists()
    assert repo.stash_count() == 0


def test_merge_creates_merge_commit(repo: GitRunner):
    repo.run("branch", "Release")
    create_test_file(repo.repo_path / "about.html", "<p>about</p>")
    repo.add_all()
    repo.commit("add about")

    repo.checkout("Release")
    repo.merge("main")

    parents = repo.run("rev-list", "--parents", "-n", "1", "HEAD").split()
    assert len(parents) == 3
    assert (repo.repo_path / "about.html").exists()


def test_reset_and_clean(repo: GitRunner):
    head = repo.head()
    create_test_file(repo.repo_path / "index.html", "<p>changed</p>")
    create_test_file(repo.repo_path / "stray/file.html", "<p>stray</p>")

    repo.reset_hard(head)
    repo.clean()

    assert (repo.repo_path / "index.html").read_text() == "<p>home</p>"
    assert not (repo.repo_path / "stray").exists()
    assert repo.changed_files() == []
