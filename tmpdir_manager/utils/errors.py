"""
Error types and the disposal error policy.
"""

import errno
import logging

logger = logging.getLogger(__name__)


class TempDirError(Exception):
    """Base class for temporary directory manager errors."""


class BaseDirCreationError(TempDirError):
    """The shared base directory could not be created."""

    def __init__(self, tmp_root: str, cause: BaseException):
        super().__init__(f'Cannot create temporary directory under "{tmp_root}": {cause}')
        self.tmp_root = tmp_root


def handle_error(error: BaseException, path: str) -> None:
    """Report an error raised while deleting a temporary path.

    A missing path counts as deleted. Permission errors are expected when
    the host is tearing the process down and are only logged at debug
    level. Anything else is logged as a warning and never re-raised.

    Args:
        error: Exception raised by the removal or by a custom disposer
        path: Path that was being removed
    """
    code = getattr(error, "errno", None)
    if code == errno.ENOENT:
        return
    if code == errno.EPERM:
        logger.debug(f'Permission denied deleting temporary "{path}": {error}')
        return
    logger.warning(f'Cannot delete temporary "{path}": {error}', exc_info=error)
