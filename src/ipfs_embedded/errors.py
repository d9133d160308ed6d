# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/errors.py

"""Exception hierarchy for the embedded IPFS bridge."""


class EmbeddedError(Exception):
    """Base exception for ipfs-embedded."""
    pass


class EncodingError(EmbeddedError):
    """Raised when a call cannot be encoded into a command."""
    pass


class UnsafeArgumentError(EncodingError):
    """Raised when an argument cannot be represented at the boundary."""

    def __init__(self, message: str, token: str = None):
        super().__init__(message)
        self.token = token


class UnknownOperationError(EncodingError):
    """Raised when an operation name is not in the registry."""
    pass


class ConfigError(EmbeddedError):
    """Raised when configuration is invalid."""
    pass


class RuntimeUnavailableError(EmbeddedError):
    """Raised when the embedded runtime cannot be reached at all."""

    def __init__(self, message: str, backend: str = None):
        super().__init__(message)
        self.backend = backend


class CommandFailedError(EmbeddedError):
    """Raised by InvokeResult.check() when the runtime reported failure."""

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result
