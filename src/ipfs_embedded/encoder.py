# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/encoder.py

"""
Command encoder.

One pure function per operation. Each turns typed arguments into a Command:
positional arguments first, in fixed order, then flag/value pairs.

Rules:
    - bool flags are always emitted with an explicit true/false value
    - string options are omitted when None or empty
    - numeric options with a "not specified" sentinel are omitted at the sentinel
    - flags that only matter when another option is on are emitted conditionally

Misuse (missing required argument, wrong type, negative count, NUL byte)
raises EncodingError before any command exists.
"""

import functools
import inspect
import typing
from typing import Optional

from ipfs_embedded.errors import EncodingError, UnsafeArgumentError
from ipfs_embedded.types import (
    Command,
    Operation,
    Option,
    Param,
    KIND_BOOL,
    KIND_OPTIONAL_STR,
    KIND_STR,
    KIND_UINT,
)


TRUE = "true"
FALSE = "false"

DEFAULT_BITS = 2048
DEFAULT_DIAG_TIMEOUT = 20
PIN_TYPES = ("direct", "indirect", "recursive", "all")

# Filled by @_operation, in declaration order
OPERATIONS: dict[str, Operation] = {}


def _kind(hint) -> str:
    if hint is str:
        return KIND_STR
    if hint is bool:
        return KIND_BOOL
    if hint is int:
        return KIND_UINT
    if hint == Optional[str]:
        return KIND_OPTIONAL_STR
    raise TypeError(f"Unsupported parameter annotation: {hint!r}")


def _params(fn) -> tuple[Param, ...]:
    hints = typing.get_type_hints(fn)
    params = []
    for name, p in inspect.signature(fn).parameters.items():
        required = p.default is inspect.Parameter.empty
        params.append(Param(
            name=name,
            kind=_kind(hints[name]),
            required=required,
            default=None if required else p.default,
        ))
    return tuple(params)


def _operation(*words: str, group: str, upload: str = None):
    """Register an encoder function as an operation with the given command words."""
    def decorate(fn):
        @functools.wraps(fn)
        def encode(*args, **kwargs) -> Command:
            arguments, options = fn(*args, **kwargs)
            return Command(
                operation=fn.__name__,
                words=words,
                arguments=tuple(arguments),
                options=tuple(options),
            )

        doc = inspect.getdoc(fn) or ""
        OPERATIONS[fn.__name__] = Operation(
            name=fn.__name__,
            words=words,
            group=group,
            params=_params(fn),
            encode=encode,
            upload=upload,
            summary=doc.splitlines()[0] if doc else "",
        )
        return encode
    return decorate


def _text(name: str, value) -> str:
    if not isinstance(value, str):
        raise EncodingError(f"{name} must be a string, got {type(value).__name__}")
    if "\x00" in value:
        raise UnsafeArgumentError(f"{name} contains a NUL character", token=value)
    return value


def _required(name: str, value) -> str:
    if value is None or value == "":
        raise EncodingError(f"{name} is required")
    return _text(name, value)


def _positional(name: str, value) -> list[str]:
    if value is None or value == "":
        return []
    return [_text(name, value)]


def _string(flag: str, name: str, value) -> list[Option]:
    if value is None or value == "":
        return []
    return [Option(flag, name, _text(name, value))]


def _bool(flag: str, name: str, value) -> Option:
    if not isinstance(value, bool):
        raise EncodingError(f"{name} must be a bool, got {type(value).__name__}")
    return Option(flag, name, TRUE if value else FALSE)


def _uint(name: str, value) -> str:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be an unsigned integer, got {type(value).__name__}")
    if value < 0:
        raise EncodingError(f"{name} must be >= 0, got {value}")
    return str(value)


# =============================================================================
# Basic commands
# =============================================================================

@_operation("init", group="basic")
def init(bits: int = DEFAULT_BITS, passphrase: Optional[str] = None, force: bool = False):
    """Initialize local configuration and generate a new keypair."""
    return [], [
        Option("-b", "bits", _uint("bits", bits)),
        *_string("-p", "passphrase", passphrase),
        _bool("-f", "force", force),
    ]


@_operation("add", group="basic", upload="path")
def add(
    path: str,
    recursive: bool = False,
    quiet: bool = False,
    progress: bool = False,
    wrap_with_directory: bool = False,
    trickle: bool = False,
):
    """Add a file or directory."""
    return [_required("path", path)], [
        _bool("-r", "recursive", recursive),
        _bool("-q", "quiet", quiet),
        _bool("-p", "progress", progress),
        _bool("-w", "wrap-with-directory", wrap_with_directory),
        _bool("-t", "trickle", trickle),
    ]


@_operation("cat", group="basic")
def cat(ipfs_path: str):
    """Show object data."""
    return [_required("ipfs_path", ipfs_path)], []


@_operation("get", group="basic")
def get(
    ipfs_path: str,
    output: Optional[str] = None,
    archive: bool = False,
    compress: bool = False,
    compression_level: int = 0,
):
    """Download objects, optionally as a (gzipped) tar archive."""
    options = [
        *_string("-o", "output", output),
        _bool("-a", "archive", archive),
        _bool("-C", "compress", compress),
    ]
    # The level is only meaningful with compression on
    if compress:
        options.append(Option("-l", "compression-level", _uint("compression_level", compression_level)))
    return [_required("ipfs_path", ipfs_path)], options


@_operation("ls", group="basic")
def ls(ipfs_path: str):
    """List links from an object."""
    return [_required("ipfs_path", ipfs_path)], []


@_operation("refs", group="basic")
def refs(
    ipfs_path: str,
    format: Optional[str] = None,
    edges: bool = False,
    unique: bool = False,
    recursive: bool = False,
):
    """List hashes of links from an object."""
    return [_required("ipfs_path", ipfs_path)], [
        *_string("-format", "format", format),
        _bool("-e", "edges", edges),
        _bool("-u", "unique", unique),
        _bool("-r", "recursive", recursive),
    ]


@_operation("refs", "local", group="basic")
def refs_local():
    """List all local references."""
    return [], []


# =============================================================================
# Data structure commands
# =============================================================================

@_operation("block", "put", group="data", upload="data")
def block_put(data: str):
    """Store input as a raw block."""
    return [_required("data", data)], []


@_operation("block", "stat", group="data")
def block_stat(key: str):
    """Print information of a raw block."""
    return [_required("key", key)], []


@_operation("block", "get", group="data")
def block_get(key: str):
    """Get a raw block."""
    return [_required("key", key)], []


@_operation("object", "data", group="data")
def object_data(key: str):
    """Output the raw bytes of a DAG node."""
    return [_required("key", key)], []


@_operation("object", "links", group="data")
def object_links(key: str):
    """Output the links of a DAG node."""
    return [_required("key", key)], []


@_operation("object", "get", group="data")
def object_get(key: str):
    """Get and serialize a DAG node."""
    return [_required("key", key)], []


@_operation("object", "put", group="data", upload="data")
def object_put(data: str):
    """Store input as a DAG object."""
    return [_required("data", data)], []


@_operation("object", "stat", group="data")
def object_stat(key: str):
    """Get stats for a DAG node."""
    return [_required("key", key)], []


# =============================================================================
# Advanced commands
# =============================================================================

@_operation("daemon", group="advanced")
def daemon(
    init: bool = False,
    routing: Optional[str] = None,
    mount: bool = False,
    writable: bool = False,
    mount_ipfs: Optional[str] = None,
    mount_ipns: Optional[str] = None,
):
    """Start a long-running daemon process."""
    return [], [
        _bool("-init", "init", init),
        *_string("-routing", "routing", routing),
        _bool("-mount", "mount", mount),
        _bool("-writable", "writable", writable),
        *_string("-mount-ipfs", "mount-ipfs", mount_ipfs),
        *_string("-mount-ipns", "mount-ipns", mount_ipns),
    ]


@_operation("mount", group="advanced")
def mount(f: Optional[str] = None, n: Optional[str] = None):
    """Mount read-only IPFS and IPNS mountpoints."""
    return [], [
        *_string("-f", "ipfs-path", f),
        *_string("-n", "ipns-path", n),
    ]


@_operation("name", "publish", group="advanced")
def name_publish(name: str, ipfs_path: str):
    """Publish an object to IPNS."""
    return [_required("name", name), _required("ipfs_path", ipfs_path)], []


@_operation("name", "resolve", group="advanced")
def name_resolve(name: Optional[str] = None):
    """Resolve an IPNS name (defaults to the local peer ID)."""
    return _positional("name", name), []


@_operation("pin", "rm", group="advanced")
def pin_rm(ipfs_path: str, recursive: bool = False):
    """Unpin an object from local storage."""
    return [_required("ipfs_path", ipfs_path)], [_bool("-r", "recursive", recursive)]


@_operation("pin", "ls", group="advanced")
def pin_ls(type: Optional[str] = None):
    """List pinned objects; type is one of direct, indirect, recursive, all."""
    return [], _string("-t", "type", type)


@_operation("pin", "add", group="advanced")
def pin_add(ipfs_path: str, recursive: bool = False):
    """Pin objects to local storage."""
    return [_required("ipfs_path", ipfs_path)], [_bool("-r", "recursive", recursive)]


@_operation("repo", "gc", group="advanced")
def repo_gc(quiet: bool = False):
    """Garbage-collect unpinned objects."""
    return [], [_bool("-q", "quiet", quiet)]


# =============================================================================
# Network commands
# =============================================================================

@_operation("id", group="network")
def network_id(peer_id: Optional[str] = None):
    """Show node ID info for a peer, or the local node."""
    return _positional("peer_id", peer_id), []


@_operation("bootstrap", "list", group="network")
def bootstrap_list():
    """Show peers in the bootstrap list."""
    return [], []


@_operation("bootstrap", "add", group="network")
def bootstrap_add(peer: Optional[str] = None, default_nodes: bool = False):
    """Add peers to the bootstrap list."""
    return _positional("peer", peer), [_bool("-default", "default", default_nodes)]


@_operation("bootstrap", "rm", group="network")
def bootstrap_rm(peer: Optional[str] = None, all: bool = False):
    """Remove peers from the bootstrap list."""
    return _positional("peer", peer), [_bool("-all", "all", all)]


@_operation("swarm", "peers", group="network")
def swarm_peers():
    """List peers with open connections."""
    return [], []


@_operation("swarm", "addrs", group="network")
def swarm_addrs():
    """List known addresses."""
    return [], []


@_operation("swarm", "connect", group="network")
def swarm_connect(address: Optional[str] = None):
    """Open a connection to a multiaddr."""
    return _positional("address", address), []


@_operation("swarm", "disconnect", group="network")
def swarm_disconnect(address: Optional[str] = None):
    """Close a connection to a multiaddr."""
    return _positional("address", address), []


@_operation("dht", "query", group="network")
def dht_query(peer_id: str, verbose: bool = False):
    """Run a findClosestPeers query through the DHT."""
    return [_required("peer_id", peer_id)], [_bool("-v", "verbose", verbose)]


@_operation("dht", "findprovs", group="network")
def dht_findprovs(key: str, verbose: bool = False):
    """Run a FindProviders query through the DHT."""
    return [_required("key", key)], [_bool("-v", "verbose", verbose)]


@_operation("dht", "findpeer", group="network")
def dht_findpeer(peer_id: Optional[str] = None):
    """Run a FindPeer query through the DHT."""
    return _positional("peer_id", peer_id), []


@_operation("ping", group="network")
def ping(peer_id: Optional[str] = None, count: int = 0):
    """Measure latency to a peer; count 0 leaves the runtime default."""
    options = []
    if _uint("count", count) != "0":
        options.append(Option("-n", "count", str(count)))
    return _positional("peer_id", peer_id), options


@_operation("diag", "net", group="network")
def diag_net(timeout: int = DEFAULT_DIAG_TIMEOUT):
    """Generate a network diagnostics report."""
    return [], [Option("-timeout", "timeout", _uint("timeout", timeout))]


# =============================================================================
# Tool commands
# =============================================================================

@_operation("config", group="tool")
def config_get(key: Optional[str] = None):
    """Get a config value."""
    return _positional("key", key), []


@_operation("config", group="tool")
def config_set(key: Optional[str] = None, value: Optional[str] = None):
    """Set a config value."""
    return _positional("key", key) + _positional("value", value), []


@_operation("config", "show", group="tool")
def config_show():
    """Output the config file (includes the private key)."""
    return [], []


@_operation("config", "edit", group="tool")
def config_edit():
    """Open the config file in $EDITOR."""
    return [], []


@_operation("config", "replace", group="tool")
def config_replace(file: Optional[str] = None):
    """Replace the config with a file."""
    return _positional("file", file), []


@_operation("version", group="tool")
def version():
    """Show version information."""
    return [], []


def raw(*args: str) -> Command:
    """Build a command from pre-split tokens, bypassing the operation table."""
    if not args:
        raise EncodingError("at least one argument is required")
    tokens = tuple(_text(f"argument {i}", a) for i, a in enumerate(args))
    return Command(operation="raw", words=tokens)
