"""Process exit codes.

A provisioning run exits 0 on success. Any failure maps to one stable code
chosen by the phase that failed, so CI logs can tell a bad configuration from
a flaky download without reading the output.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the ``ciprov`` command.

    - 0: Success
    - 1: User error (bad flags, invalid configuration)
    - 2: Environment error (tool output not understood, command failed)
    - 4: Network error (registry or release API unreachable, bad response)
    - 5: I/O error (extraction or file placement failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5
