"""
Unique name generation for temporary entries.

Names combine a per-process fingerprint with a process-wide counter, so
they are unique within the process without probing the filesystem, and a
stale directory left by an earlier run never matches a fresh name.
"""

import itertools
import os
import time

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_counter = itertools.count()


def to_base36(value: int) -> str:
    """Format a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value}")
    if value == 0:
        return "0"

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_DIGITS[remainder])
    return "".join(reversed(digits))


def make_fingerprint(pid: int, started_ms: int) -> str:
    """Build the process fingerprint from a PID and a start time in milliseconds."""
    return f"{to_base36(pid)}-{to_base36(started_ms)}"


# Start time is included to avoid reusing a stale temp dir
PROCESS_FINGERPRINT = make_fingerprint(os.getpid(), int(time.time() * 1000))


def next_counter() -> str:
    """Return the next value of the process-wide counter in base 36."""
    return to_base36(next(_counter))


def get_temp_name(prefix: str | None = None) -> str:
    """Generate a process-unique temporary name.

    Args:
        prefix: Optional prefix, joined to the rest of the name with "-"

    Returns:
        Name of the form ``[prefix-]<pid36>-<start36>-<counter36>``
    """
    name_prefix = "" if prefix is None else f"{prefix}-"
    return f"{name_prefix}{PROCESS_FINGERPRINT}-{next_counter()}"
