# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/operations.py

"""
ipfs-embedded Operations

The public call surface: one typed function per operation. Each encodes its
arguments and dispatches the command once, returning an InvokeResult.

Every function takes an optional `dispatcher`; without one, a process-wide
dispatcher is built from load_config() on first use.

The "ipfs_" prefixed names and unambiguous command words are available as
module attributes too (e.g. `operations.ipfs_pin_add`).
"""

import threading
from typing import Optional

from ipfs_embedded import __version__
from ipfs_embedded import encoder
from ipfs_embedded import registry
from ipfs_embedded.config import load_config
from ipfs_embedded.dispatcher import Dispatcher, create_dispatcher
from ipfs_embedded.errors import UnknownOperationError
from ipfs_embedded.types import Command, InvokeResult


_default_dispatcher: Optional[Dispatcher] = None
_default_lock = threading.Lock()


def get_dispatcher() -> Dispatcher:
    """Return the process-wide dispatcher, creating it from config if needed."""
    global _default_dispatcher
    with _default_lock:
        if _default_dispatcher is None:
            _default_dispatcher = create_dispatcher(load_config())
        return _default_dispatcher


def set_dispatcher(dispatcher: Optional[Dispatcher]) -> None:
    """Replace the process-wide dispatcher (None resets to config on next use)."""
    global _default_dispatcher
    with _default_lock:
        _default_dispatcher = dispatcher


def _dispatch(command: Command, dispatcher: Dispatcher = None) -> InvokeResult:
    return (dispatcher or get_dispatcher()).dispatch(command)


def get_api_version() -> str:
    """Return the API version of this bridge."""
    return __version__


def run(name: str, dispatcher: Dispatcher = None, **params) -> InvokeResult:
    """Encode and dispatch an operation by canonical name or alias."""
    return _dispatch(registry.encode(name, **params), dispatcher)


def execute(*args: str, dispatcher: Dispatcher = None) -> InvokeResult:
    """Pass pre-split arguments straight through to the runtime."""
    return _dispatch(encoder.raw(*args), dispatcher)


# =============================================================================
# Basic commands
# =============================================================================

def init(
    bits: int = encoder.DEFAULT_BITS,
    passphrase: Optional[str] = None,
    force: bool = False,
    dispatcher: Dispatcher = None,
) -> InvokeResult:
    """
    Initialize local configuration and generate a new keypair.

    Args:
        bits: Number of bits in the RSA private key
        passphrase: Passphrase for encrypting the private key, or None
        force: Overwrite an existing config
    """
    return _dispatch(encoder.init(bits, passphrase, force), dispatcher)


def add(
    path: str,
    recursive: bool = False,
    quiet: bool = False,
    progress: bool = False,
    wrap_with_directory: bool = False,
    trickle: bool = False,
    dispatcher: Dispatcher = None,
) -> InvokeResult:
    """
    Add the contents of a path.

    Args:
        path: File or directory to add
        recursive: Add directory paths recursively
        quiet: Write minimal output
        progress: Stream progress data
        wrap_with_directory: Wrap files with a directory object
        trickle: Use the trickle-DAG format
    """
    command = encoder.add(path, recursive, quiet, progress, wrap_with_directory, trickle)
    return _dispatch(command, dispatcher)


def cat(ipfs_path: str, dispatcher: Dispatcher = None) -> InvokeResult:
    """Output the data of the object named by ipfs_path."""
    return _dispatch(encoder.cat(ipfs_path), dispatcher)


def get(
    ipfs_path: str,
    output: Optional[str] = None,
    archive: bool = False,
    compress: bool = False,
    compression_level: int = 0,
    dispatcher: Dispatcher = None,
) -> InvokeResult:
    """
    Download the object named by ipfs_path.

    Args:
        ipfs_path: Object to download
        output: Where to store it (default ./<ipfs_path>)
        archive: Output a TAR archive
        compress: GZIP the output
        compression_level: 1-9, only sent when compress is True
    """
    command = encoder.get(ipfs_path, output, archive, compress, compression_level)
    return _dispatch(command, dispatcher)


def ls(ipfs_path: str, dispatcher: Dispatcher = None) -> InvokeResult:
    """List the links of an object."""
    return _dispatch(encoder.ls(ipfs_path), dispatcher)


def refs(
    ipfs_path: str,
    format: Optional[str] = None,
    edges: bool = False,
    unique: bool = False,
    recursive: bool = False,
    dispatcher: Dispatcher = None,
) -> InvokeResult:
    """
    List the link hashes of an object.

    Args:
        ipfs_path: Object to list refs from
        format: Edge format, tokens <src> <dst> <linkname>
        edges: Emit edges as `<from> -> <to>`
        unique: Omit duplicate refs
        recursive: Recurse into child nodes
    """
    return _dispatch(encoder.refs(ipfs_path, format, edges, unique, recursive), dispatcher)


def refs_local(dispatcher: Dispatcher = None) -> InvokeResult:
    """List the hashes of all local objects."""
    return _dispatch(encoder.refs_local(), dispatcher)


# =============================================================================
# Data structure commands
# =============================================================================

def block_put(data: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.block_put(data), dispatcher)


def block_stat(key: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.block_stat(key), dispatcher)


def block_get(key: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.block_get(key), dispatcher)


def object_data(key: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.object_data(key), dispatcher)


def object_links(key: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.object_links(key), dispatcher)


def object_get(key: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.object_get(key), dispatcher)


def object_put(data: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.object_put(data), dispatcher)


def object_stat(key: str, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.object_stat(key), dispatcher)


# =============================================================================
# Advanced commands
# =============================================================================

def daemon(
    init: bool = False,
    routing: Optional[str] = None,
    mount: bool = False,
    writable: bool = False,
    mount_ipfs: Optional[str] = None,
    mount_ipns: Optional[str] = None,
    dispatcher: Dispatcher = None,
) -> InvokeResult:
    """
    Run the daemon. Blocks for as long as the runtime keeps it running.

    Args:
        init: Initialize with default settings if needed
        routing: Routing option override (dht, supernode)
        mount: Mount IPFS to the filesystem
        writable: Allow POST, PUT and DELETE
        mount_ipfs: IPFS mountpoint (with mount)
        mount_ipns: IPNS mountpoint (with mount)
    """
    command = encoder.daemon(init, routing, mount, writable, mount_ipfs, mount_ipns)
    return _dispatch(command, dispatcher)


def mount(f: Optional[str] = None, n: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    """Mount read-only at f (IPFS) and n (IPNS); runtime defaults are /ipfs and /ipns."""
    return _dispatch(encoder.mount(f, n), dispatcher)


def name_publish(name: str, ipfs_path: str, dispatcher: Dispatcher = None) -> InvokeResult:
    """Publish ipfs_path under the IPNS name."""
    return _dispatch(encoder.name_publish(name, ipfs_path), dispatcher)


def name_resolve(name: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.name_resolve(name), dispatcher)


def pin_rm(ipfs_path: str, recursive: bool = False, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.pin_rm(ipfs_path, recursive), dispatcher)


def pin_ls(type: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    """List pinned objects. type: direct (runtime default), indirect, recursive or all."""
    return _dispatch(encoder.pin_ls(type), dispatcher)


def pin_add(ipfs_path: str, recursive: bool = False, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.pin_add(ipfs_path, recursive), dispatcher)


def repo_gc(quiet: bool = False, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.repo_gc(quiet), dispatcher)


# =============================================================================
# Network commands
# =============================================================================

def network_id(peer_id: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    """Show info for peer_id, or for the local node when None."""
    return _dispatch(encoder.network_id(peer_id), dispatcher)


def bootstrap_list(dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.bootstrap_list(), dispatcher)


def bootstrap_add(peer: Optional[str] = None, default_nodes: bool = False, dispatcher: Dispatcher = None) -> InvokeResult:
    """Add '<multiaddr>/<peerID>' to the trusted bootstrap list."""
    return _dispatch(encoder.bootstrap_add(peer, default_nodes), dispatcher)


def bootstrap_rm(peer: Optional[str] = None, all: bool = False, dispatcher: Dispatcher = None) -> InvokeResult:
    """Remove a peer (or all peers) from the bootstrap list."""
    return _dispatch(encoder.bootstrap_rm(peer, all), dispatcher)


def swarm_peers(dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.swarm_peers(), dispatcher)


def swarm_addrs(dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.swarm_addrs(), dispatcher)


def swarm_connect(address: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.swarm_connect(address), dispatcher)


def swarm_disconnect(address: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.swarm_disconnect(address), dispatcher)


def dht_query(peer_id: str, verbose: bool = False, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.dht_query(peer_id, verbose), dispatcher)


def dht_findprovs(key: str, verbose: bool = False, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.dht_findprovs(key, verbose), dispatcher)


def dht_findpeer(peer_id: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.dht_findpeer(peer_id), dispatcher)


def ping(peer_id: Optional[str] = None, count: int = 0, dispatcher: Dispatcher = None) -> InvokeResult:
    """Ping a peer; count 0 uses the runtime's default number of pings."""
    return _dispatch(encoder.ping(peer_id, count), dispatcher)


def diag_net(timeout: int = encoder.DEFAULT_DIAG_TIMEOUT, dispatcher: Dispatcher = None) -> InvokeResult:
    """
    Network diagnostics report.

    The timeout (seconds) is decremented 2s at every hop; too small a value
    means some peers are not reached.
    """
    return _dispatch(encoder.diag_net(timeout), dispatcher)


# =============================================================================
# Tool commands
# =============================================================================

def config_get(key: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.config_get(key), dispatcher)


def config_set(key: Optional[str] = None, value: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.config_set(key, value), dispatcher)


def config_show(dispatcher: Dispatcher = None) -> InvokeResult:
    """Output the config file. The private key is part of the output."""
    return _dispatch(encoder.config_show(), dispatcher)


def config_edit(dispatcher: Dispatcher = None) -> InvokeResult:
    """Open the config in $EDITOR (needs a terminal on the runtime side)."""
    return _dispatch(encoder.config_edit(), dispatcher)


def config_replace(file: Optional[str] = None, dispatcher: Dispatcher = None) -> InvokeResult:
    """Replace the config with file. Cannot be undone."""
    return _dispatch(encoder.config_replace(file), dispatcher)


def version(dispatcher: Dispatcher = None) -> InvokeResult:
    return _dispatch(encoder.version(), dispatcher)


def __getattr__(name: str):
    # Alias names resolve to the canonical function
    if name.startswith("__"):
        raise AttributeError(name)
    try:
        canonical = registry.resolve(name)
    except UnknownOperationError:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return globals()[canonical]
