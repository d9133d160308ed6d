# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/config.py

"""
ipfs-embedded Configuration Management

Reads a two-layer toml convention:
  /etc/ipfs-embedded/common.toml  -- shared base (optional)
  /etc/ipfs-embedded/config.toml  -- bridge config (optional unless given explicitly)

An explicit config path (argument or IPFS_EMBEDDED_CONFIG) must exist.
Deep merge: common.toml is base, config.toml overrides at section level.
HTTP auth credentials live in a separate file referenced by [http].auth_file.
"""

import os
import shutil
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ipfs_embedded.errors import ConfigError


DEFAULT_COMMON = Path("/etc/ipfs-embedded/common.toml")
DEFAULT_CONFIG = Path("/etc/ipfs-embedded/config.toml")
CONFIG_ENV = "IPFS_EMBEDDED_CONFIG"

BACKENDS = ("subprocess", "library", "http")


@dataclass
class SubprocessConfig:
    """How to run the runtime as a child process."""
    executable: str = "ipfs"
    repo_path: Optional[str] = None         # Exported as IPFS_PATH
    env: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"executable": self.executable, "repo_path": self.repo_path, "env": dict(self.env)}

    @classmethod
    def from_dict(cls, data: dict) -> "SubprocessConfig":
        return cls(
            executable=data.get("executable", "ipfs"),
            repo_path=data.get("repo_path"),
            env={k: str(v) for k, v in data.get("env", {}).items()},
        )


@dataclass
class LibraryConfig:
    """Where to find the shared library exposing the entry point."""
    path: Optional[str] = None
    entry_point: str = "runMain"

    def to_dict(self) -> dict:
        return {"path": self.path, "entry_point": self.entry_point}

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryConfig":
        return cls(
            path=data.get("path"),
            entry_point=data.get("entry_point", "runMain"),
        )


@dataclass
class HttpAuth:
    """Basic auth credentials for the daemon API."""
    user: str
    password: str

    def to_auth_string(self) -> str:
        return f"{self.user}:{self.password}"

    def to_tuple(self) -> tuple:
        return (self.user, self.password)


@dataclass
class HttpConfig:
    """Address of a running daemon's HTTP API."""
    host: str = "127.0.0.1"
    port: int = 5001
    auth: Optional[HttpAuth] = None

    def to_dict(self) -> dict:
        # Secrets never leave the process
        return {"host": self.host, "port": self.port, "has_auth": self.auth is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "HttpConfig":
        auth = None
        if "auth_file" in data:
            auth = _load_auth(Path(data["auth_file"]))
        return cls(
            host=data.get("host", "127.0.0.1"),
            port=data.get("port", 5001),
            auth=auth,
        )


@dataclass
class EmbeddedConfig:
    """Complete ipfs-embedded configuration."""
    backend: str = "subprocess"
    serialize: bool = True                  # Hold a lock around every boundary call
    timeout: Optional[float] = None         # Seconds; None waits forever
    subprocess: SubprocessConfig = field(default_factory=SubprocessConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    source: Optional[Path] = None           # File the config was read from

    def validate(self) -> tuple[list[str], list[str]]:
        """
        Validate configuration, return (errors, warnings).
        Empty errors list means config is usable for dispatch.
        """
        errors = []
        warnings = []

        if self.backend not in BACKENDS:
            errors.append(
                f"unknown backend '{self.backend}' (expected one of {', '.join(BACKENDS)})"
            )

        if self.timeout is not None and self.timeout <= 0:
            errors.append(f"timeout must be positive, got {self.timeout}")

        if self.backend == "library":
            if not self.library.path:
                errors.append("library backend selected but [library].path is not set")
            elif not Path(self.library.path).exists():
                warnings.append(f"library not found: {self.library.path}")
            if not self.serialize:
                warnings.append("library backend is not thread-safe; calls are serialized anyway")
            if self.timeout is not None:
                warnings.append("timeout is ignored by the library backend")

        if self.backend == "subprocess" and shutil.which(self.subprocess.executable) is None:
            warnings.append(f"executable '{self.subprocess.executable}' not found on PATH")

        if self.backend == "http":
            if not (0 < self.http.port < 65536):
                errors.append(f"http port out of range: {self.http.port}")
            if not self.http.auth:
                warnings.append("no http auth configured")

        return errors, warnings

    def to_dict(self) -> dict:
        return {
            "config_path": str(self.source) if self.source else None,
            "backend": self.backend,
            "serialize": self.serialize,
            "timeout": self.timeout,
            "subprocess": self.subprocess.to_dict(),
            "library": self.library.to_dict(),
            "http": self.http.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict, source: Path = None) -> "EmbeddedConfig":
        runtime = data.get("runtime", {})
        return cls(
            backend=runtime.get("backend", "subprocess"),
            serialize=runtime.get("serialize", True),
            timeout=runtime.get("timeout"),
            subprocess=SubprocessConfig.from_dict(data.get("subprocess", {})),
            library=LibraryConfig.from_dict(data.get("library", {})),
            http=HttpConfig.from_dict(data.get("http", {})),
            source=source,
        )


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base at section level.

    For top-level keys that are both dicts (TOML sections), merge their
    contents with override winning on key conflict.
    For non-dict values, override replaces base.
    """
    merged = dict(base)
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = {**merged[key], **val}
        else:
            merged[key] = val
    return merged


def _load_auth(auth_file: Path) -> HttpAuth:
    """Read auth file containing 'user:password'.

    Raises:
        FileNotFoundError: If auth file doesn't exist
        ConfigError: If auth file format is invalid
    """
    if not auth_file.exists():
        raise FileNotFoundError(f"Auth file not found: {auth_file}")

    text = auth_file.read_text().strip()
    if ":" not in text:
        raise ConfigError(f"Invalid auth file format (expected 'user:password'): {auth_file}")

    user, password = text.split(":", 1)
    return HttpAuth(user=user, password=password)


def _read_toml(path: Path) -> dict:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e


def load_config(config_path: Path = None, common_path: Path = None) -> EmbeddedConfig:
    """Load config from common.toml + config.toml. Returns EmbeddedConfig.

    Args:
        config_path: Path to config.toml. Default: $IPFS_EMBEDDED_CONFIG, then
            /etc/ipfs-embedded/config.toml
        common_path: Path to common.toml. Default: /etc/ipfs-embedded/common.toml

    Returns:
        EmbeddedConfig object (all defaults when no file exists)

    Raises:
        FileNotFoundError: If an explicitly requested config or auth file doesn't exist
        ConfigError: If a config file is not valid toml
    """
    explicit = config_path or os.environ.get(CONFIG_ENV)
    config_file = Path(explicit) if explicit else DEFAULT_CONFIG
    common_file = common_path or DEFAULT_COMMON

    # Load common.toml (optional)
    common = {}
    if common_file.exists():
        common = _read_toml(common_file)

    # Load config.toml (required only when named explicitly)
    specific = {}
    if config_file.exists():
        specific = _read_toml(config_file)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {config_file}")

    config = _deep_merge(common, specific)
    source = config_file if config_file.exists() else None
    return EmbeddedConfig.from_dict(config, source=source)
