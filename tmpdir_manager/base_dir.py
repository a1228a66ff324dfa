"""
Lazy creation of the shared base directory.

All managers in a process place their entries under a single base
directory. It is created on first use, and concurrent first callers all
wait on the same creation.
"""

import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import Generic, TypeVar

from tmpdir_manager.config import BASE_DIR_PREFIX, TempDirSettings, load_settings
from tmpdir_manager.utils import fs
from tmpdir_manager.utils.errors import BaseDirCreationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyValue(Generic[T]):
    """Memoized asynchronous value with an explicit reset.

    The cell is in one of three states: ``uninitialized``, ``pending``
    (a computation is running and every caller awaits it) or ``ready``.
    A failed computation returns the cell to ``uninitialized`` so the
    next caller starts over.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]):
        self._factory = factory
        self._pending: asyncio.Future | None = None
        self._value: T | None = None
        self._ready = False
        # Bumped by reset() so a computation started before it cannot store a value
        self._generation = 0

    @property
    def state(self) -> str:
        if self._ready:
            return "ready"
        if self._pending is not None:
            return "pending"
        return "uninitialized"

    @property
    def value(self) -> T | None:
        """The computed value, or None when not ready."""
        return self._value if self._ready else None

    async def get(self) -> T:
        if self._ready:
            return self._value
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._compute(self._generation))
        # Shielded so that one cancelled caller does not cancel the others
        return await asyncio.shield(self._pending)

    def reset(self) -> None:
        self._generation += 1
        self._pending = None
        self._value = None
        self._ready = False

    async def _compute(self, generation: int) -> T:
        try:
            value = await self._factory()
        except BaseException:
            if generation == self._generation:
                self._pending = None
            raise

        if generation == self._generation:
            self._value = value
            self._ready = True
            self._pending = None
        return value


class BaseDirResolver:
    """Creates the shared base directory once and remembers it."""

    def __init__(
        self,
        settings_loader: Callable[[], TempDirSettings] = load_settings,
        on_created: Callable[[str, TempDirSettings], None] | None = None,
    ):
        """Initialize the resolver.

        Args:
            settings_loader: Called on each creation to read the environment
            on_created: Called with the canonical path and the settings in
                effect once a new base directory exists
        """
        self._settings_loader = settings_loader
        self._on_created = on_created
        self._lazy: LazyValue[str] = LazyValue(self._create)

    @property
    def value(self) -> str | None:
        """The resolved base directory, or None if it does not exist yet."""
        return self._lazy.value

    @property
    def state(self) -> str:
        return self._lazy.state

    async def resolve(self) -> str:
        """Return the base directory, creating it on first use."""
        return await self._lazy.get()

    def reset(self) -> None:
        """Forget the current base directory so the next resolve creates a new one."""
        self._lazy.reset()

    async def _create(self) -> str:
        settings = self._settings_loader()
        try:
            await fs.ensure_dir(settings.tmp_root)
            created = await fs.make_unique_dir(settings.tmp_root, BASE_DIR_PREFIX)
            directory = await fs.canonicalize(created)
        except OSError as e:
            raise BaseDirCreationError(settings.tmp_root, e) from e

        logger.debug(f"Created temporary base directory {directory}")
        if self._on_created is not None:
            self._on_created(directory, settings)
        return directory
