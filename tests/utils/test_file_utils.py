"""Tests for file utilities."""

import asyncio
from pathlib import Path

import pytest

from conftest import create_test_file
from site_deploy.exceptions import FileOperationError
from site_deploy.file_utils import (
    copy_file,
    copy_recursive,
    delete_file,
    delete_recursive,
    ensure_directory,
    read_text,
    run_batch,
    write_text,
)


@pytest.mark.asyncio
async def test_ensure_directory(tmp_path: Path):
    """Test directory creation."""
    test_dir = tmp_path / "test_dir" / "nested"
    await ensure_directory(test_dir)
    assert test_dir.is_dir()

    # Existing directory is fine
    await ensure_directory(test_dir)


@pytest.mark.asyncio
async def test_ensure_directory_error(tmp_path: Path):
    blocker = create_test_file(tmp_path / "blocker")
    with pytest.raises(FileOperationError):
        await ensure_directory(blocker / "child")


@pytest.mark.asyncio
async def test_write_read_text(tmp_path: Path):
    """Test atomic file writing."""
    test_file = tmp_path / "test.txt"
    content = "test content\nwith ünïcode"

    await write_text(test_file, content)
    assert await read_text(test_file) == content

    # Temp file should be cleaned up
    assert [p.name for p in tmp_path.iterdir()] == ["test.txt"]


@pytest.mark.asyncio
async def test_write_text_error(tmp_path: Path):
    """Try to write to a directory that doesn't exist."""
    with pytest.raises(FileOperationError):
        await write_text(tmp_path / "nonexistent" / "test.txt", "test content")


@pytest.mark.asyncio
async def test_read_missing_file(tmp_path: Path):
    with pytest.raises(FileOperationError):
        await read_text(tmp_path / "missing.txt")


@pytest.mark.asyncio
async def test_delete_recursive(tmp_path: Path):
    create_test_file(tmp_path / "dir/a/b.txt")
    await delete_recursive(tmp_path / "dir")
    assert not (tmp_path / "dir").exists()


@pytest.mark.asyncio
async def test_delete_recursive_missing_is_tolerated(tmp_path: Path):
    await delete_recursive(tmp_path / "missing")


@pytest.mark.asyncio
async def test_delete_recursive_overlapping_batch(tmp_path: Path):
    """Deleting a directory and its descendants together does not fail."""
    create_test_file(tmp_path / "dir/a/b/c.txt")
    await asyncio.gather(
        delete_recursive(tmp_path / "dir"),
        delete_recursive(tmp_path / "dir/a"),
        delete_recursive(tmp_path / "dir/a/b"),
    )
    assert not (tmp_path / "dir").exists()


@pytest.mark.asyncio
async def test_delete_file(tmp_path: Path):
    path = create_test_file(tmp_path / "a.txt")
    await delete_file(path)
    assert not path.exists()

    # Already gone
    await delete_file(path)


@pytest.mark.asyncio
async def test_copy_file(tmp_path: Path):
    source = create_test_file(tmp_path / "a.txt", "hello")
    await copy_file(source, tmp_path / "b.txt")
    assert (tmp_path / "b.txt").read_text() == "hello"


@pytest.mark.asyncio
async def test_copy_file_missing_source(tmp_path: Path):
    with pytest.raises(FileOperationError):
        await copy_file(tmp_path / "missing.txt", tmp_path / "b.txt")


@pytest.mark.asyncio
async def test_copy_recursive_overwrites(tmp_path: Path):
    create_test_file(tmp_path / "src/a/b.txt", "new")
    create_test_file(tmp_path / "src/c.txt", "c")
    create_test_file(tmp_path / "dst/a/b.txt", "old")
    create_test_file(tmp_path / "dst/keep.txt", "keep")

    await copy_recursive(tmp_path / "src", tmp_path / "dst")

    assert (tmp_path / "dst/a/b.txt").read_text() == "new"
    assert (tmp_path / "dst/c.txt").read_text() == "c"
    assert (tmp_path / "dst/keep.txt").read_text() == "keep"


@pytest.mark.asyncio
async def test_run_batch_collects_failures():
    completed = []

    async def ok(name: str) -> None:
        await asyncio.sleep(0)
        completed.append(name)

    async def fail(name: str) -> None:
        raise FileOperationError(f"{name} broke")

    failures = await run_batch(
        {"a": ok("a"), "b": fail("b"), "c": ok("c"), "d": fail("d")}
    )

    assert failures == {"b": "b broke", "d": "d broke"}
    assert sorted(completed) == ["a", "c"]


@pytest.mark.asyncio
async def test_run_batch_empty():
    assert await run_batch({}) == {}


@pytest.mark.asyncio
async def test_copy_recursive_skips_repository_metadata(tmp_path: Path):
    create_test_file(tmp_path / "src/.git/HEAD", "ref: refs/heads/stage")
    create_test_file(tmp_path / "src/index.html", "<p>home</p>")
    create_test_file(tmp_path / "dst/.git/HEAD", "ref: refs/heads/main")

    await copy_recursive(tmp_path / "src", tmp_path / "dst")

    assert (tmp_path / "dst/index.html").exists()
    assert (tmp_path / "dst/.git/HEAD").read_text() == "ref: refs/heads/main"
