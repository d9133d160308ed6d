# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/types.py

"""
ipfs-embedded Type Definitions

Dataclasses for commands, boundary payloads and invocation results.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional
import json
import shlex

from ipfs_embedded.errors import CommandFailedError


# Return codes for InvokeResult
RC_SUCCESS = 0          # Runtime finished the command
RC_FAILED = 1           # Runtime reported an error
RC_TIMEOUT = 124        # Runtime did not finish before the configured timeout

# Parameter kinds, derived from encoder annotations
KIND_STR = "str"                # required string
KIND_OPTIONAL_STR = "str?"      # string, omitted when None or empty
KIND_BOOL = "bool"
KIND_UINT = "uint"


@dataclass(frozen=True)
class Option:
    """One flag/value pair of a command."""
    flag: str                       # Command line flag, e.g. "-r"
    name: str                       # Long option name, e.g. "recursive"
    value: str                      # Already-rendered value token

    def to_dict(self) -> dict:
        return {"flag": self.flag, "name": self.name, "value": self.value}


@dataclass(frozen=True)
class Command:
    """
    The encoded form of one operation call.

    Arguments are kept as discrete tokens; `line` is the flat command string
    handed to boundaries that only accept a single string.
    """
    operation: str                          # Canonical operation name
    words: tuple[str, ...]                  # Command words, e.g. ("pin", "add")
    arguments: tuple[str, ...] = ()         # Positional arguments, in order
    options: tuple[Option, ...] = ()        # Flag/value pairs, in order

    @property
    def tokens(self) -> tuple[str, ...]:
        tokens = list(self.words) + list(self.arguments)
        for option in self.options:
            tokens.extend((option.flag, option.value))
        return tuple(tokens)

    @property
    def line(self) -> str:
        """Tokens joined with POSIX shell quoting (plain tokens stay unquoted)."""
        return shlex.join(self.tokens)

    def has_flag(self, flag: str) -> bool:
        return any(option.flag == flag for option in self.options)

    def option(self, flag: str) -> Optional[Option]:
        for option in self.options:
            if option.flag == flag:
                return option
        return None

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "words": list(self.words),
            "arguments": list(self.arguments),
            "options": [o.to_dict() for o in self.options],
            "line": self.line,
        }

    def __str__(self) -> str:
        return self.line


@dataclass(frozen=True)
class Param:
    """One parameter of an operation."""
    name: str
    kind: str                       # KIND_STR, KIND_OPTIONAL_STR, KIND_BOOL, KIND_UINT
    required: bool = False
    default: object = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": self.kind,
            "required": self.required,
            "default": self.default,
        }


@dataclass(frozen=True)
class Operation:
    """Descriptor for one supported operation."""
    name: str                               # Canonical name, e.g. "pin_add"
    words: tuple[str, ...]                  # Command words, e.g. ("pin", "add")
    group: str                              # "basic", "data", "advanced", "network", "tool"
    params: tuple[Param, ...]
    encode: Callable[..., Command] = field(compare=False, repr=False)
    upload: Optional[str] = None            # "path" or "data" for HTTP multipart bodies
    summary: str = ""

    @property
    def command(self) -> str:
        return " ".join(self.words)

    def param(self, name: str) -> Optional[Param]:
        for p in self.params:
            if p.name == name:
                return p
        return None

    def __call__(self, *args, **kwargs) -> Command:
        return self.encode(*args, **kwargs)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "command": self.command,
            "group": self.group,
            "params": [p.to_dict() for p in self.params],
            "upload": self.upload,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class Payload:
    """
    What crosses the boundary for one call: the command, its bytes, and the
    byte length. Boundaries must use `length` rather than a terminator.
    """
    command: Command
    data: bytes
    length: int

    @classmethod
    def from_command(cls, command: Command) -> "Payload":
        data = command.line.encode("utf-8")
        return cls(command=command, data=data, length=len(data))

    def view(self) -> memoryview:
        """Non-owning view of the payload bytes, valid while the payload lives."""
        return memoryview(self.data)[: self.length]


@dataclass
class InvokeResult:
    """Result of one boundary call."""
    command: str                            # The command line that was dispatched
    backend: str                            # Runtime that executed it
    returncode: int                         # 0=success, 1=failed, 124=timeout
    stdout: str = ""
    stderr: str = ""
    started_at: Optional[datetime] = None
    duration: Optional[float] = None        # Seconds spent inside the boundary

    @property
    def ok(self) -> bool:
        """True if the runtime reported success."""
        return self.returncode == RC_SUCCESS

    def check(self) -> "InvokeResult":
        """Return self, or raise CommandFailedError if the call failed."""
        if not self.ok:
            detail = self.stderr.strip() or f"returncode {self.returncode}"
            raise CommandFailedError(f"'{self.command}' failed: {detail}", result=self)
        return self

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "backend": self.backend,
            "returncode": self.returncode,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "duration": self.duration,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> "InvokeResult":
        started_at = data.get("started_at")
        if started_at and isinstance(started_at, str):
            if started_at.endswith("Z"):
                started_at = started_at[:-1] + "+00:00"
            started_at = datetime.fromisoformat(started_at)

        return cls(
            command=data["command"],
            backend=data.get("backend", ""),
            returncode=data["returncode"],
            stdout=data.get("stdout", ""),
            stderr=data.get("stderr", ""),
            started_at=started_at,
            duration=data.get("duration"),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "InvokeResult":
        return cls.from_dict(json.loads(json_str))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
