"""
Process exit handling for temporary entries.

The exit hook drains every live manager and removes the shared base
directory. It runs synchronously from ``atexit``, or asynchronously from
a SIGINT/SIGTERM handler when an event loop is running.
"""

import asyncio
import atexit
from collections.abc import Callable
import logging
import os
import signal
from typing import Any

from tmpdir_manager.base_dir import BaseDirResolver
from tmpdir_manager.registry import ManagerRegistry
from tmpdir_manager.utils import fs
from tmpdir_manager.utils.errors import handle_error

logger = logging.getLogger(__name__)


class ExitHook:
    """Removes all temporary entries when the process terminates."""

    def __init__(self, registry: ManagerRegistry, resolver: BaseDirResolver):
        self.registry = registry
        self.resolver = resolver
        self.registered = False
        self._tasks: set[asyncio.Task] = set()
        self._previous_handlers: dict[int, Any] = {}

    def register(self) -> None:
        """Hook into process termination. Only the first call has an effect."""
        if self.registered:
            return
        self.registered = True
        self._install_process_hooks()

    def __call__(self, callback: Callable[[], Any] | None = None) -> asyncio.Task | None:
        """Run the hook.

        Args:
            callback: None when the host gives no time for asynchronous
                work. Otherwise cleanup runs as a task on the running loop
                and ``callback`` is invoked once it is over, even on failure.

        Returns:
            The cleanup task in the asynchronous case, else None
        """
        if callback is None:
            self.run_sync()
            return None

        task = asyncio.ensure_future(self._run_with_callback(callback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def run_sync(self) -> None:
        """Synchronously dispose of every manager, then the base directory."""
        managers = self.registry.drain()
        logger.debug(f"Removing temporary files of {len(managers)} managers")
        for manager in managers:
            manager.cleanup_sync()

        directory = self.resolver.value
        if directory is None:
            return
        self.resolver.reset()
        try:
            fs.remove_sync(directory)
        except Exception as e:
            handle_error(e, directory)

    async def run_async(self) -> None:
        """Dispose of every manager one at a time, then the base directory."""
        managers = self.registry.drain()
        logger.debug(f"Removing temporary files of {len(managers)} managers")
        # One manager at a time to avoid fs overload
        for manager in managers:
            await manager.cleanup()

        directory = self.resolver.value
        if directory is None:
            return
        self.resolver.reset()
        await fs.remove(directory)

    async def _run_with_callback(self, callback: Callable[[], Any]) -> None:
        directory = self.resolver.value
        try:
            await self.run_async()
        except Exception as e:
            handle_error(e, directory or "")
        finally:
            callback()

    def _install_process_hooks(self) -> None:
        atexit.register(self.run_sync)

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)
                logger.debug(f"Registered temporary file cleanup for signal {sig}")
            except (ValueError, AttributeError) as e:
                # Only the main thread may set handlers, and not every platform has every signal
                logger.debug(f"Could not register handler for signal {sig}: {str(e)}")

    def _handle_signal(self, signum: int, frame) -> None:
        logger.info(f"Received signal {signum}, removing temporary files...")

        def finish() -> None:
            self._resend_signal(signum)

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.run_sync()
            finish()
            return

        self(finish)

    def _resend_signal(self, signum: int) -> None:
        """Hand the signal back to the handler that was installed before ours.

        Without a known previous handler the process exits with ``128 + signum``.
        """
        previous = self._previous_handlers.get(signum)
        if previous is None:
            os._exit(128 + signum)
            return

        signal.signal(signum, previous)
        signal.raise_signal(signum)
