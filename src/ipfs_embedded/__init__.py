# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/__init__.py

"""
ipfs-embedded

Typed Python calls for an embedded IPFS runtime. Each call is encoded into a
command and handed, once and synchronously, to a single runtime entry point
(the `ipfs` executable, a shared library, or a daemon's HTTP API).

Basic usage:
    from ipfs_embedded import operations

    result = operations.pin_add("/ipfs/Qm...", recursive=True)
    result.check()
    print(result.stdout)

Encoding only:
    from ipfs_embedded import encoder

    encoder.pin_add("/ipfs/Qm...", True).line   # 'pin add /ipfs/Qm... -r true'

For more control:
    from ipfs_embedded.config import load_config
    from ipfs_embedded.dispatcher import Dispatcher, create_dispatcher
    from ipfs_embedded.runtime import SubprocessRuntime, LibraryRuntime, HttpRuntime
"""

__version__ = "0.1.0"

# Errors
from ipfs_embedded.errors import (
    CommandFailedError,
    ConfigError,
    EmbeddedError,
    EncodingError,
    RuntimeUnavailableError,
    UnknownOperationError,
    UnsafeArgumentError,
)

# Types
from ipfs_embedded.types import (
    Command,
    InvokeResult,
    Operation,
    Option,
    Param,
    Payload,
    RC_SUCCESS,
    RC_FAILED,
    RC_TIMEOUT,
)

# Config
from ipfs_embedded.config import EmbeddedConfig, load_config

# Encoding and dispatch
from ipfs_embedded import encoder
from ipfs_embedded import registry
from ipfs_embedded.dispatcher import Dispatcher, create_dispatcher
from ipfs_embedded.runtime import (
    HttpRuntime,
    LibraryRuntime,
    Runtime,
    SubprocessRuntime,
    create_runtime,
)

# Operations
from ipfs_embedded import operations
from ipfs_embedded.operations import get_api_version, run

__all__ = [
    "__version__",
    # Errors
    "CommandFailedError",
    "ConfigError",
    "EmbeddedError",
    "EncodingError",
    "RuntimeUnavailableError",
    "UnknownOperationError",
    "UnsafeArgumentError",
    # Types
    "Command",
    "InvokeResult",
    "Operation",
    "Option",
    "Param",
    "Payload",
    # Return codes
    "RC_SUCCESS",
    "RC_FAILED",
    "RC_TIMEOUT",
    # Config
    "EmbeddedConfig",
    "load_config",
    # Encoding and dispatch
    "encoder",
    "registry",
    "Dispatcher",
    "create_dispatcher",
    "HttpRuntime",
    "LibraryRuntime",
    "Runtime",
    "SubprocessRuntime",
    "create_runtime",
    # Operations
    "operations",
    "get_api_version",
    "run",
]
