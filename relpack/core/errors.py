"""Exit codes for the relpack CLI.

Each pipeline failure maps to one of these codes so release scripts can tell a
broken toolchain from a broken filesystem without parsing output.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    These values are part of the CLI contract and should remain stable:
    - 0: Success
    - 1: User error (invalid target descriptor, bad arguments)
    - 2: Environment error (no project, bad config, metadata lookup failed)
    - 3: Build error (compilation or installer generation failed)
    - 5: I/O error (staging or archiving failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
