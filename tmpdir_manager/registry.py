"""
Registry of managers that currently own temporary entries.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tmpdir_manager.manager import TmpDir


class ManagerRegistry:
    """Set of live managers, unique by identity."""

    def __init__(self):
        self._managers: set["TmpDir"] = set()

    def add(self, manager: "TmpDir") -> None:
        self._managers.add(manager)

    def discard(self, manager: "TmpDir") -> None:
        self._managers.discard(manager)

    def drain(self) -> list["TmpDir"]:
        """Remove and return every registered manager in one step."""
        managers = list(self._managers)
        self._managers.clear()
        return managers

    def __contains__(self, manager: object) -> bool:
        return manager in self._managers

    def __len__(self) -> int:
        return len(self._managers)

    def __iter__(self):
        return iter(list(self._managers))
