"""
Error taxonomy for ntdbank.

Every failure raised by the library is an ``NtdBankError`` subclass tagged
with an ``ErrorKind``.  Only the CLI layer catches these; it prints the
message and exits with the class's ``exit_code``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    REMOTE_CALL = "remote_call"
    NETWORK = "network"


class NtdBankError(RuntimeError):
    kind: ErrorKind
    exit_code: int = 1


class ConfigurationError(NtdBankError):
    """A required environment value is missing or malformed."""

    kind = ErrorKind.CONFIGURATION
    exit_code = 3


class ValidationError(NtdBankError):
    """A required user-supplied argument is missing or has the wrong shape."""

    kind = ErrorKind.VALIDATION
    exit_code = 4


class RemoteCallError(NtdBankError):
    """The node rejected a call, or a submitted transaction reverted."""

    kind = ErrorKind.REMOTE_CALL
    exit_code = 5

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        tx_hash: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.tx_hash = tx_hash


class NetworkError(NtdBankError):
    """The RPC endpoint is unreachable or did not answer in time."""

    kind = ErrorKind.NETWORK
    exit_code = 6
