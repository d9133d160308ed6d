# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/runtime.py

"""
Boundary implementations for the embedded IPFS runtime.

Every runtime exposes one operation: execute(payload) -> InvokeResult.
The call blocks until the runtime has finished with the command.

    SubprocessRuntime  -- runs the `ipfs` executable with the command tokens
    LibraryRuntime     -- calls runMain(GoString) in a shared library via ctypes
    HttpRuntime        -- posts the command to a running daemon's /api/v0

Debug logging:
    Enable with: IPFS_EMBEDDED_DEBUG=1 or by setting log level to DEBUG
"""

import abc
import ctypes
import logging
import os
import subprocess
import sys
import tempfile
import time
from pathlib import Path

import requests
from requests_toolbelt import MultipartEncoder

from ipfs_embedded import registry
from ipfs_embedded.config import EmbeddedConfig, HttpConfig, LibraryConfig, SubprocessConfig
from ipfs_embedded.errors import ConfigError, RuntimeUnavailableError, UnsafeArgumentError
from ipfs_embedded.types import InvokeResult, Payload, RC_FAILED, RC_SUCCESS, RC_TIMEOUT, utcnow

# Configure logger for this module
logger = logging.getLogger(__name__)

# Enable debug logging via environment variable
if os.environ.get("IPFS_EMBEDDED_DEBUG"):
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    logger.setLevel(logging.DEBUG)


class Runtime(abc.ABC):
    """A single entry point into the embedded runtime."""

    name: str = "runtime"
    thread_safe: bool = True

    @abc.abstractmethod
    def execute(self, payload: Payload) -> InvokeResult:
        """Hand one payload to the runtime and block until it returns."""
        pass


class SubprocessRuntime(Runtime):
    """Runs the runtime's executable once per command, argv-style (no shell)."""

    name = "subprocess"
    thread_safe = True

    def __init__(
        self,
        executable: str = "ipfs",
        repo_path: str = None,
        env: dict = None,
        timeout: float = None,
    ):
        self.executable = executable
        self.repo_path = repo_path
        self.env = dict(env or {})
        self.timeout = timeout

    def _environment(self) -> dict:
        env = dict(os.environ)
        env.update(self.env)
        if self.repo_path:
            env["IPFS_PATH"] = self.repo_path
        return env

    def execute(self, payload: Payload) -> InvokeResult:
        argv = [self.executable, *payload.command.tokens]
        logger.debug(f"SubprocessRuntime: argv = {argv}")

        started_at = utcnow()
        start = time.monotonic()
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                timeout=self.timeout,
                env=self._environment(),
            )
        except FileNotFoundError:
            raise RuntimeUnavailableError(
                f"Executable not found: {self.executable}", backend=self.name
            )
        except subprocess.TimeoutExpired as e:
            logger.debug(f"SubprocessRuntime: timeout after {self.timeout}s")
            return InvokeResult(
                command=payload.command.line,
                backend=self.name,
                returncode=RC_TIMEOUT,
                stdout=_as_text(e.stdout),
                stderr=f"timed out after {self.timeout}s",
                started_at=started_at,
                duration=time.monotonic() - start,
            )

        stdout = _as_text(proc.stdout)
        stderr = _as_text(proc.stderr)
        logger.debug(f"SubprocessRuntime: returncode = {proc.returncode}")
        logger.debug(f"SubprocessRuntime: stderr = {stderr[:200] if stderr else '(empty)'}")

        return InvokeResult(
            command=payload.command.line,
            backend=self.name,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            started_at=started_at,
            duration=time.monotonic() - start,
        )


def _as_text(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class GoString(ctypes.Structure):
    """Go's string header: pointer plus explicit length, no terminator."""
    _fields_ = [("p", ctypes.c_char_p), ("n", ctypes.c_int64)]


class LibraryRuntime(Runtime):
    """
    Calls the entry point of a shared library built from the Go runtime.

    The entry point takes a GoString and returns nothing; output goes to the
    process's stdout/stderr, so both file descriptors are redirected into
    temporary files for the duration of the call. If the runtime calls
    os.Exit, the whole process exits with it.
    """

    name = "library"
    thread_safe = False

    def __init__(self, path: str, entry_point: str = "runMain"):
        self.path = path
        self.entry_point = entry_point
        self._entry = None

    def _load(self):
        if self._entry is None:
            try:
                lib = ctypes.CDLL(self.path)
                entry = getattr(lib, self.entry_point)
            except (OSError, AttributeError) as e:
                raise RuntimeUnavailableError(
                    f"Could not load {self.entry_point} from {self.path}: {e}",
                    backend=self.name,
                )
            entry.argtypes = [GoString]
            entry.restype = None
            self._entry = entry
        return self._entry

    @staticmethod
    def _plain_bytes(payload: Payload) -> bytes:
        # The far side splits on whitespace and does not strip quotes
        for token in payload.command.tokens:
            if not token or any(c.isspace() for c in token):
                raise UnsafeArgumentError(
                    f"Argument {token!r} cannot be passed to the library runtime "
                    "(empty or contains whitespace)",
                    token=token,
                )
        return " ".join(payload.command.tokens).encode("utf-8")

    def execute(self, payload: Payload) -> InvokeResult:
        data = self._plain_bytes(payload)
        entry = self._load()

        go_string = GoString(data, len(data))
        logger.debug(f"LibraryRuntime: {self.entry_point}(n={len(data)})")

        started_at = utcnow()
        start = time.monotonic()
        with tempfile.TemporaryFile() as out, tempfile.TemporaryFile() as err:
            sys.stdout.flush()
            sys.stderr.flush()
            saved_out, saved_err = os.dup(1), os.dup(2)
            try:
                os.dup2(out.fileno(), 1)
                os.dup2(err.fileno(), 2)
                entry(go_string)
            finally:
                os.dup2(saved_out, 1)
                os.dup2(saved_err, 2)
                os.close(saved_out)
                os.close(saved_err)
            duration = time.monotonic() - start

            out.seek(0)
            err.seek(0)
            stdout = out.read().decode("utf-8", errors="replace")
            stderr = err.read().decode("utf-8", errors="replace")

        return InvokeResult(
            command=payload.command.line,
            backend=self.name,
            returncode=RC_SUCCESS,
            stdout=stdout,
            stderr=stderr,
            started_at=started_at,
            duration=duration,
        )


class HttpRuntime(Runtime):
    """Posts commands to the HTTP API of a running daemon."""

    name = "http"
    thread_safe = True

    def __init__(self, host: str = "127.0.0.1", port: int = 5001, basic_auth: tuple = None, timeout: float = None):
        """
        Initialize HTTP runtime.

        Args:
            host: Hostname or IP of the daemon
            port: API port (default 5001)
            basic_auth: Tuple of (username, password) or None
            timeout: Request timeout in seconds, or None
        """
        self.base_url = f"http://{host}:{port}/api/v0"
        self.timeout = timeout
        self.session = requests.Session()
        if basic_auth:
            self.session.auth = basic_auth

    def _request_parts(self, payload: Payload) -> tuple[str, list, list]:
        """Split a command into (endpoint, query params, multipart fields)."""
        command = payload.command
        endpoint = "/" + "/".join(command.words)

        upload = None
        if command.operation in registry.OPERATIONS:
            upload = registry.OPERATIONS[command.operation].upload

        arguments = list(command.arguments)
        fields = []
        if upload == "data" and arguments:
            data = arguments.pop(0)
            fields.append(("data", ("data", data.encode("utf-8"), "application/octet-stream")))
        elif upload == "path" and arguments:
            fields.extend(_path_fields(Path(arguments.pop(0))))

        params = [("arg", a) for a in arguments]
        params.extend((o.name, o.value) for o in command.options)
        return endpoint, params, fields

    def execute(self, payload: Payload) -> InvokeResult:
        started_at = utcnow()
        start = time.monotonic()
        try:
            endpoint, params, fields = self._request_parts(payload)
        except OSError as e:
            return InvokeResult(
                command=payload.command.line,
                backend=self.name,
                returncode=RC_FAILED,
                stderr=str(e),
                started_at=started_at,
                duration=time.monotonic() - start,
            )

        url = f"{self.base_url}{endpoint}"
        logger.debug(f"HttpRuntime: POST {url} params={params} files={len(fields)}")

        file_handles = [f[1][1] for f in fields if hasattr(f[1][1], "close")]
        try:
            if fields:
                encoder = MultipartEncoder(fields=fields)
                response = self.session.post(
                    url,
                    params=params,
                    data=encoder,
                    headers={"Content-Type": encoder.content_type},
                    timeout=self.timeout,
                )
            else:
                response = self.session.post(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout:
            return InvokeResult(
                command=payload.command.line,
                backend=self.name,
                returncode=RC_TIMEOUT,
                stderr=f"timed out after {self.timeout}s",
                started_at=started_at,
                duration=time.monotonic() - start,
            )
        except requests.exceptions.ConnectionError as e:
            raise RuntimeUnavailableError(f"Could not connect to {self.base_url}: {e}", backend=self.name)
        finally:
            for fh in file_handles:
                fh.close()

        duration = time.monotonic() - start
        logger.debug(f"HttpRuntime: response status = {response.status_code}")

        if response.status_code >= 400:
            try:
                msg = response.json().get("Message", response.text)
            except ValueError:
                msg = response.text
            return InvokeResult(
                command=payload.command.line,
                backend=self.name,
                returncode=RC_FAILED,
                stderr=msg,
                started_at=started_at,
                duration=duration,
            )

        return InvokeResult(
            command=payload.command.line,
            backend=self.name,
            returncode=RC_SUCCESS,
            stdout=response.text,
            started_at=started_at,
            duration=duration,
        )


def _path_fields(path: Path) -> list:
    """Multipart fields for a file, or every file under a directory."""
    if path.is_file():
        files = [(path.name, path)]
    elif path.is_dir():
        base_path = path.parent
        files = [
            (str(file_path.relative_to(base_path)), file_path)
            for file_path in sorted(path.rglob("*"))
            if file_path.is_file()
        ]
    else:
        raise FileNotFoundError(f"Path {path} is not a file or directory")

    fields = []
    try:
        for name, file_path in files:
            fields.append(("file", (name, file_path.open("rb"), "application/octet-stream")))
    except OSError:
        for _, (_, fh, _) in fields:
            fh.close()
        raise
    return fields


def create_runtime(config: EmbeddedConfig) -> Runtime:
    """Build the runtime selected by config.backend."""
    if config.backend == "subprocess":
        sub: SubprocessConfig = config.subprocess
        return SubprocessRuntime(
            executable=sub.executable,
            repo_path=sub.repo_path,
            env=sub.env,
            timeout=config.timeout,
        )
    if config.backend == "library":
        lib: LibraryConfig = config.library
        if not lib.path:
            raise ConfigError("library backend selected but [library].path is not set")
        return LibraryRuntime(path=lib.path, entry_point=lib.entry_point)
    if config.backend == "http":
        http: HttpConfig = config.http
        return HttpRuntime(
            host=http.host,
            port=http.port,
            basic_auth=http.auth.to_tuple() if http.auth else None,
            timeout=config.timeout,
        )
    raise ConfigError(f"Unknown backend: {config.backend}")
