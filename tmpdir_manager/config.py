"""
Configuration settings for the temporary directory manager.
"""

import os
import tempfile

from pydantic import BaseModel, Field

# Environment variables that override the scratch root, checked in order
TMP_ROOT_ENV_VARS = [
    "TEST_TMP_DIR",
    "TMP_DIR_MANAGER_TMP_DIR",
]

# Set to "false" to leave temporary files behind at exit
ENSURE_REMOVED_ON_EXIT_ENV_VAR = "TMP_DIR_MANAGER_ENSURE_REMOVED_ON_EXIT"

# Prefix of the shared base directory name
BASE_DIR_PREFIX = "temp-dir-"

# Maximum number of entries disposed at once by an async cleanup
CLEANUP_CONCURRENCY = 8


class TempDirSettings(BaseModel):
    """Runtime settings resolved from the environment."""

    tmp_root: str = Field(..., description="Parent of the shared base directory")
    ensure_removed_on_exit: bool = Field(
        default=True, description="Remove all entries when the process exits"
    )


def get_tmp_root() -> str:
    """Return the scratch root, honouring the override variables.

    Returns:
        First non-empty override, or the platform temporary directory
    """
    for name in TMP_ROOT_ENV_VARS:
        value = os.environ.get(name, "")
        if value:
            return value
    return tempfile.gettempdir()


def load_settings() -> TempDirSettings:
    """Read settings from the current environment."""
    return TempDirSettings(
        tmp_root=get_tmp_root(),
        ensure_removed_on_exit=os.environ.get(ENSURE_REMOVED_ON_EXIT_ENV_VAR) != "false",
    )
