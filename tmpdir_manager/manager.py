"""
Per-owner manager of temporary files and directories.

A :class:`TmpDir` hands out unique paths under the shared base directory
and remembers them so that :meth:`TmpDir.cleanup` (or the exit hook) can
delete them later. Allocation never touches the disk except for
:meth:`TmpDir.create_temp_dir`.

Example:
    >>> tmp_dir = TmpDir("packager")
    >>> output = await tmp_dir.get_temp_file({"suffix": ".zip"})
    >>> work_dir = await tmp_dir.create_temp_dir({"prefix": "unpacked"})
    >>> await tmp_dir.cleanup()
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import inspect
import logging
import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from tmpdir_manager.config import CLEANUP_CONCURRENCY
from tmpdir_manager.service import TempDirService, get_service
from tmpdir_manager.utils import fs
from tmpdir_manager.utils.errors import handle_error
from tmpdir_manager.utils.naming import next_counter

logger = logging.getLogger(__name__)

# Receives the entry path; may return an awaitable
Disposer = Callable[[str], Any]


class TempFileOptions(BaseModel):
    """Options for a single temporary path."""

    prefix: str | None = Field(None, description="Prepended to the name, joined with '-'")
    suffix: str | None = Field(
        None, description="Appended as an extension if it starts with '.', else joined with '-'"
    )
    disposer: Disposer | None = Field(None, description="Replaces the default removal")

    @field_validator("prefix", "suffix")
    @classmethod
    def empty_to_none(cls, value: str | None) -> str | None:
        return value or None


@dataclass
class TempFileInfo:
    """A path handed out by a manager."""

    path: str
    is_dir: bool
    disposer: Disposer | None = None


def _parse_options(options: TempFileOptions | dict[str, Any] | None) -> TempFileOptions:
    if options is None:
        return TempFileOptions()
    if isinstance(options, TempFileOptions):
        return options
    return TempFileOptions.model_validate(options)


def _format_name(options: TempFileOptions) -> str:
    name_prefix = "" if options.prefix is None else f"{options.prefix}-"
    suffix = options.suffix
    if suffix is None:
        name_suffix = ""
    elif suffix.startswith("."):
        name_suffix = suffix
    else:
        name_suffix = f"-{suffix}"
    return f"{name_prefix}{next_counter()}{name_suffix}"


class TmpDir:
    """Allocates temporary paths and deletes them on cleanup."""

    def __init__(self, debug_name: str = "", service: TempDirService | None = None):
        """Initialize the manager.

        Args:
            debug_name: Label used in log messages
            service: Service to register with, defaults to the global one
        """
        self.debug_name = debug_name
        self._service = service
        # Service this manager is registered with, kept until its next cleanup
        self._bound_service: TempDirService | None = None
        self._temp_files: list[TempFileInfo] = []
        self._registered = False
        self._background: set[asyncio.Task] = set()

    def __repr__(self) -> str:
        return f"TmpDir({self.debug_name!r})"

    @property
    def service(self) -> TempDirService:
        if self._bound_service is not None:
            return self._bound_service
        return self._service if self._service is not None else get_service()

    @property
    def registered(self) -> bool:
        return self._registered

    @property
    def temp_files(self) -> list[TempFileInfo]:
        """Entries allocated since the last cleanup, in allocation order."""
        return list(self._temp_files)

    async def get_temp_dir(self, options: TempFileOptions | dict[str, Any] | None = None) -> str:
        """Reserve a path for a directory without creating it."""
        return await self.get_temp_file(options, is_dir=True)

    async def create_temp_dir(
        self, options: TempFileOptions | dict[str, Any] | None = None
    ) -> str:
        """Reserve a path for a directory and create the directory."""
        path = await self.get_temp_file(options, is_dir=True)
        await fs.ensure_dir(path)
        return path

    async def get_temp_file(
        self,
        options: TempFileOptions | dict[str, Any] | None = None,
        is_dir: bool = False,
    ) -> str:
        """Reserve a unique path under the shared base directory.

        Args:
            options: Prefix, suffix and disposer for the path
            is_dir: Whether the path will hold a directory, which decides
                how it is deleted

        Returns:
            Absolute path that does not exist yet

        Raises:
            BaseDirCreationError: If the shared base directory cannot be created
            pydantic.ValidationError: If ``options`` is an invalid dict
        """
        options = _parse_options(options)
        service = self.service
        base_dir = await service.resolver.resolve()

        if not self._registered:
            self._registered = True
            self._bound_service = service
            service.registry.add(self)

        path = os.path.join(base_dir, _format_name(options))
        self._temp_files.append(TempFileInfo(path=path, is_dir=is_dir, disposer=options.disposer))
        return path

    def cleanup_sync(self) -> None:
        """Delete every entry synchronously, in allocation order.

        Custom disposers are started but not awaited; see :meth:`_fire_disposer`.
        Errors are logged and never raised.
        """
        temp_files = self._temp_files
        self.service.registry.discard(self)
        self._registered = False
        self._bound_service = None
        if not temp_files:
            return

        self._temp_files = []
        logger.debug(f"{self!r}: removing {len(temp_files)} temporary entries")

        for file in temp_files:
            try:
                if file.disposer is not None:
                    self._fire_disposer(file)
                elif file.is_dir:
                    fs.remove_sync(file.path)
                else:
                    fs.unlink_sync(file.path)
            except Exception as e:
                handle_error(e, file.path)

    async def cleanup(self) -> None:
        """Delete every entry, a bounded number at a time.

        If this manager was the last registered one, the shared base
        directory is removed as well and a new one will be created on the
        next allocation. Errors are logged and never raised.
        """
        temp_files = self._temp_files
        service = self.service
        was_registered = self in service.registry
        service.registry.discard(self)
        self._registered = False
        self._bound_service = None
        self._temp_files = []

        if temp_files:
            logger.debug(f"{self!r}: removing {len(temp_files)} temporary entries")
            semaphore = asyncio.Semaphore(CLEANUP_CONCURRENCY)
            await asyncio.gather(*(self._dispose(file, semaphore) for file in temp_files))

        # Another manager may have registered while entries were being removed
        if was_registered and len(service.registry) == 0:
            await service.release_base_dir()

    async def _dispose(self, file: TempFileInfo, semaphore: asyncio.Semaphore) -> None:
        async with semaphore:
            try:
                if file.disposer is not None:
                    result = file.disposer(file.path)
                    if inspect.isawaitable(result):
                        await result
                elif file.is_dir:
                    await fs.remove(file.path)
                else:
                    await fs.unlink(file.path)
            except Exception as e:
                handle_error(e, file.path)

    def _fire_disposer(self, file: TempFileInfo) -> None:
        """Start a custom disposer from synchronous code, best-effort.

        With a running event loop the disposer is scheduled as a task and
        its result ignored. Without one (at interpreter exit, typically)
        it is run to completion on a fresh loop.
        """
        result = file.disposer(file.path)
        if not inspect.isawaitable(result):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_await(result))
            return

        task = loop.create_task(_await_logged(result, file.path))
        self._background.add(task)
        task.add_done_callback(self._background.discard)


async def _await(awaitable) -> Any:
    return await awaitable


async def _await_logged(awaitable, path: str) -> None:
    try:
        await awaitable
    except Exception as e:
        handle_error(e, path)
