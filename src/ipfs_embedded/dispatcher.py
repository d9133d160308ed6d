# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/ipfs_embedded/dispatcher.py

"""
Dispatcher: the single crossing from encoded commands into the runtime.

Each dispatch builds one Payload and calls runtime.execute exactly once,
on the calling thread, and blocks until it returns. No retries, no queue.
"""

import contextlib
import logging
import threading

from ipfs_embedded.config import EmbeddedConfig
from ipfs_embedded.runtime import Runtime, create_runtime
from ipfs_embedded.types import Command, InvokeResult, Payload

logger = logging.getLogger(__name__)


class Dispatcher:
    """Owns one runtime and serializes calls into it when required."""

    def __init__(self, runtime: Runtime, serialize: bool = True):
        """
        Args:
            runtime: The boundary to call
            serialize: Hold a lock around every call. Forced on for runtimes
                that are not thread-safe.
        """
        self.runtime = runtime
        self.serialize = serialize or not runtime.thread_safe
        self._lock = threading.Lock() if self.serialize else None
        self._active = 0
        self._active_lock = threading.Lock()

    @property
    def busy(self) -> bool:
        """True while a call is inside the runtime (Dispatching state)."""
        return self._active > 0

    def _guard(self):
        return self._lock if self._lock is not None else contextlib.nullcontext()

    def dispatch(self, command: Command) -> InvokeResult:
        """Send one command through the boundary and return its result."""
        payload = Payload.from_command(command)
        logger.debug(f"dispatch: {payload.command.line!r} (length={payload.length}, backend={self.runtime.name})")

        with self._guard():
            with self._active_lock:
                self._active += 1
            try:
                result = self.runtime.execute(payload)
            finally:
                with self._active_lock:
                    self._active -= 1

        logger.debug(f"dispatch: returncode={result.returncode} duration={result.duration}")
        if not result.ok:
            logger.info(f"'{result.command}' returned {result.returncode}")
        return result


def create_dispatcher(config: EmbeddedConfig) -> Dispatcher:
    """Build a dispatcher for the backend named in config."""
    return Dispatcher(create_runtime(config), serialize=config.serialize)
