"""Utilities for file operations."""

import asyncio
import shutil
import sys
from pathlib import Path
from typing import Awaitable, Dict, Iterable, Mapping

import aiofiles
from loguru import logger

from site_deploy.exceptions import FileOperationError
from site_deploy.ignore_utils import DEFAULT_IGNORE_PATTERNS

log = logger.bind(component="file_utils")


async def ensure_directory(path: Path) -> None:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure

    Raises:
        FileOperationError: If directory creation fails
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except Exception as e:
        log.error(f"Failed to create directory: {path}: {e}")
        raise FileOperationError(f"Failed to create directory {path}: {e}") from e


async def read_text(path: Path) -> str:
    """Read a UTF-8 text file."""
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()
    except Exception as e:
        raise FileOperationError(f"Failed to read {path}: {e}") from e


async def write_text(path: Path, content: str) -> None:
    """
    Write file with atomic operation using temporary file.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        FileOperationError: If write operation fails
    """
    temp_path = path.with_name(f".{path.name}.tmp")
    try:
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(content)
        temp_path.replace(path)
    except Exception as e:
        temp_path.unlink(missing_ok=True)
        log.error(f"Failed to write file: {path}: {e}")
        raise FileOperationError(f"Failed to write file {path}: {e}") from e


def _ignore_missing(func, path, exc) -> None:
    # Entries removed by another deletion in the same batch
    error = exc[1] if isinstance(exc, tuple) else exc
    if not isinstance(error, FileNotFoundError):
        raise error


def _remove_tree(path: Path) -> None:
    try:
        if sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=_ignore_missing)
        else:
            shutil.rmtree(path, onerror=_ignore_missing)
    except NotADirectoryError:
        path.unlink(missing_ok=True)


async def delete_recursive(path: Path) -> None:
    """Delete a directory and everything below it. A missing path is not an error."""
    try:
        await asyncio.to_thread(_remove_tree, path)
    except Exception as e:
        raise FileOperationError(f"Failed to delete directory {path}: {e}") from e


async def delete_file(path: Path) -> None:
    """Delete a single file. A missing file is not an error."""
    try:
        await asyncio.to_thread(path.unlink, missing_ok=True)
    except Exception as e:
        raise FileOperationError(f"Failed to delete file {path}: {e}") from e


async def copy_file(source: Path, destination: Path) -> None:
    """Copy a file, keeping its metadata."""
    try:
        await asyncio.to_thread(shutil.copy2, source, destination)
    except Exception as e:
        raise FileOperationError(f"Failed to copy {source} to {destination}: {e}") from e


async def copy_recursive(
    source: Path, destination: Path, skip_names: Iterable[str] = DEFAULT_IGNORE_PATTERNS
) -> None:
    """Copy a directory tree over `destination`, replacing files that already exist.

    Entries named in `skip_names` (repository metadata by default) are never copied.
    """
    try:
        await asyncio.to_thread(
            shutil.copytree,
            source,
            destination,
            dirs_exist_ok=True,
            ignore=shutil.ignore_patterns(*skip_names),
        )
    except Exception as e:
        raise FileOperationError(f"Failed to copy {source} to {destination}: {e}") from e


async def run_batch(operations: Mapping[str, Awaitable[object]]) -> Dict[str, str]:
    """Run independent operations concurrently and wait for all of them.

    A failing operation does not stop the others.

    Args:
        operations: Awaitables keyed by the path they operate on

    Returns:
        Dict mapping each failed path to its error message
    """
    keys = list(operations)
    results = await asyncio.gather(*operations.values(), return_exceptions=True)

    failures: Dict[str, str] = {}
    for key, result in zip(keys, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            log.error(f"{key}: {result}")
            failures[key] = str(result)
    return failures
