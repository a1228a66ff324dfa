"""
Temporary file and directory management.

Allocates unique paths under a lazily created, process-wide base
directory, tracks them per manager and removes them on cleanup or when
the process exits.
"""

from tmpdir_manager.manager import TempFileInfo, TempFileOptions, TmpDir
from tmpdir_manager.service import TempDirService, get_base_dir, get_service, reset_service
from tmpdir_manager.utils.errors import BaseDirCreationError, TempDirError
from tmpdir_manager.utils.naming import get_temp_name

__all__ = [
    "BaseDirCreationError",
    "TempDirError",
    "TempDirService",
    "TempFileInfo",
    "TempFileOptions",
    "TmpDir",
    "get_base_dir",
    "get_service",
    "get_temp_name",
    "reset_service",
]

__version__ = "0.1.0"
