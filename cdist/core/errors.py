"""Error codes for CLI exit status.

The values are process exit codes and should remain stable: the fallback
stub written at install time hard-codes ``UNSUPPORTED_PLATFORM``.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for cdist commands.

    - 0: Success
    - 1: User error (bad input, invalid arguments)
    - 2: No artifact exists for this platform
    - 3: Manifest names an artifact that is not on disk
    - 4: Config or manifest file is invalid
    - 5: I/O error (permission denied, disk full, ...)
    """

    OK = 0
    USER_ERROR = 1
    UNSUPPORTED_PLATFORM = 2
    MISSING_ARTIFACT = 3
    CONFIG_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
