# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/registry.py

"""
Operation registry.

One canonical entry per operation, plus an alias table for the other names
callers use: the "ipfs_" prefixed names of the C bindings, and the command
words themselves ("pin add", "id") where they are unambiguous.
"""

from typing import Optional

from ipfs_embedded import encoder
from ipfs_embedded.errors import EncodingError, UnknownOperationError
from ipfs_embedded.types import Command, Operation


ALIAS_PREFIX = "ipfs_"

GROUPS = ("basic", "data", "advanced", "network", "tool")

OPERATIONS: dict[str, Operation] = encoder.OPERATIONS


def _build_aliases(operations: dict[str, Operation]) -> dict[str, str]:
    aliases = {}
    for name in operations:
        aliases[f"{ALIAS_PREFIX}{name}"] = name

    # Command words are only aliases when exactly one operation uses them
    by_command: dict[str, list[str]] = {}
    for name, op in operations.items():
        by_command.setdefault(op.command, []).append(name)
    for command, names in by_command.items():
        if len(names) == 1 and command != names[0]:
            aliases[command] = names[0]

    return aliases


ALIASES: dict[str, str] = _build_aliases(OPERATIONS)


def resolve(name: str) -> str:
    """Return the canonical operation name for a name or alias."""
    if name in OPERATIONS:
        return name
    if name in ALIASES:
        return ALIASES[name]
    normalized = name.replace("-", "_")
    if normalized in OPERATIONS:
        return normalized
    if normalized in ALIASES:
        return ALIASES[normalized]
    raise UnknownOperationError(f"Unknown operation: {name}")


def get_operation(name: str) -> Operation:
    return OPERATIONS[resolve(name)]


def list_operations(group: Optional[str] = None) -> list[Operation]:
    """List operations in declaration order, optionally filtered by group."""
    if group is not None and group not in GROUPS:
        raise ValueError(f"Unknown group '{group}' (expected one of {', '.join(GROUPS)})")
    return [op for op in OPERATIONS.values() if group is None or op.group == group]


def encode(name: str, **params) -> Command:
    """
    Encode an operation by name or alias.

    Raises:
        UnknownOperationError: If the name is not known
        EncodingError: If a parameter is unknown or a required one is missing
    """
    op = get_operation(name)

    known = {p.name for p in op.params}
    unknown = sorted(set(params) - known)
    if unknown:
        raise EncodingError(f"{op.name}: unknown parameter(s): {', '.join(unknown)}")

    missing = [p.name for p in op.params if p.required and p.name not in params]
    if missing:
        raise EncodingError(f"{op.name}: missing required parameter(s): {', '.join(missing)}")

    return op.encode(**params)
