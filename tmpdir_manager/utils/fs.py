"""
Filesystem operations used by the temporary directory manager.

Async variants run the blocking call in a worker thread so the event
loop is never blocked. Removal is idempotent; unlink is not and raises
FileNotFoundError for a missing file.
"""

import asyncio
import os
import shutil
import tempfile


def remove_sync(path: str) -> None:
    """Remove a file or a directory tree, ignoring a missing path."""
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)
    except FileNotFoundError:
        pass


async def remove(path: str) -> None:
    """Remove a file or a directory tree, ignoring a missing path."""
    await asyncio.to_thread(remove_sync, path)


def unlink_sync(path: str) -> None:
    """Remove a single file."""
    os.unlink(path)


async def unlink(path: str) -> None:
    """Remove a single file."""
    await asyncio.to_thread(os.unlink, path)


async def ensure_dir(path: str, mode: int = 0o777) -> None:
    """Create a directory and its parents if they do not exist."""
    await asyncio.to_thread(os.makedirs, path, mode, True)


async def make_unique_dir(parent: str, prefix: str) -> str:
    """Atomically create a new uniquely named directory under ``parent``.

    Args:
        parent: Directory in which to create the new directory
        prefix: Prefix of the new directory's name

    Returns:
        Path to the created directory
    """
    return await asyncio.to_thread(tempfile.mkdtemp, prefix=prefix, dir=parent)


async def canonicalize(path: str) -> str:
    """Resolve symlinks and relative segments to an absolute path."""
    return await asyncio.to_thread(os.path.realpath, path)
