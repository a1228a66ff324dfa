"""
Process-wide temporary directory service.

Owns the manager registry, the base directory resolver and the exit hook.
Managers use the global instance from :func:`get_service` unless another
one is passed in explicitly.
"""

from collections.abc import Callable
import logging
from typing import Any

from tmpdir_manager.base_dir import BaseDirResolver
from tmpdir_manager.config import TempDirSettings, load_settings
from tmpdir_manager.exit_hook import ExitHook
from tmpdir_manager.registry import ManagerRegistry
from tmpdir_manager.utils import fs
from tmpdir_manager.utils.errors import handle_error


class TempDirService:
    """Shared state for every temporary directory manager in the process."""

    def __init__(self, settings_loader: Callable[[], TempDirSettings] = load_settings):
        """Initialize the service.

        Args:
            settings_loader: Reads the settings when a base directory is created
        """
        self.logger = logging.getLogger(__name__)
        self.registry = ManagerRegistry()
        self.resolver = BaseDirResolver(settings_loader, on_created=self._on_base_dir_created)
        self.exit_hook = ExitHook(self.registry, self.resolver)

    @property
    def base_dir(self) -> str | None:
        """The shared base directory, or None if none has been created."""
        return self.resolver.value

    async def release_base_dir(self) -> None:
        """Remove the base directory and let the next allocation create a new one."""
        directory = self.resolver.value
        # A creation still in flight belongs to a caller that is about to register
        if directory is None:
            return
        self.resolver.reset()

        self.logger.debug(f"Removing temporary base directory {directory}")
        try:
            await fs.remove(directory)
        except Exception as e:
            handle_error(e, directory)

    def trigger_exit(self, callback: Callable[[], Any] | None = None):
        """Run the exit hook as the host would, if it has been registered.

        Args:
            callback: See :meth:`ExitHook.__call__`

        Returns:
            The cleanup task for the asynchronous path, else None
        """
        if not self.exit_hook.registered:
            self.logger.debug("Exit hook not registered, leaving temporary files in place")
            return None
        return self.exit_hook(callback)

    def _on_base_dir_created(self, directory: str, settings: TempDirSettings) -> None:
        if settings.ensure_removed_on_exit:
            self.exit_hook.register()


# Global service instance
_service_instance: TempDirService | None = None


def get_service() -> TempDirService:
    """Get the global temporary directory service."""
    global _service_instance
    if _service_instance is None:
        _service_instance = TempDirService()
    return _service_instance


def reset_service():
    """Reset the global service instance (mainly for testing)."""
    global _service_instance
    _service_instance = None


def get_base_dir() -> str | None:
    """Return the shared base directory of the global service, if created."""
    return get_service().base_dir
