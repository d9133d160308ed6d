# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# test/test_operations.py

"""Tests for the public operations module."""

import inspect
from unittest.mock import MagicMock, patch

import pytest

from ipfs_embedded import __version__, encoder, operations, registry
from ipfs_embedded.dispatcher import Dispatcher
from ipfs_embedded.errors import CommandFailedError, EncodingError
from ipfs_embedded.runtime import Runtime
from ipfs_embedded.types import InvokeResult, RC_FAILED, RC_SUCCESS


class FakeRuntime(Runtime):
    name = "fake"

    def __init__(self, returncode=RC_SUCCESS, stdout="", stderr=""):
        self.lines = []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def execute(self, payload):
        self.lines.append(payload.command.line)
        return InvokeResult(
            command=payload.command.line,
            backend=self.name,
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
        )


@pytest.fixture
def runtime():
    return FakeRuntime()


@pytest.fixture
def dispatcher(runtime):
    return Dispatcher(runtime)


@pytest.fixture
def default_dispatcher(dispatcher):
    operations.set_dispatcher(dispatcher)
    yield dispatcher
    operations.set_dispatcher(None)


class TestSurface:
    def test_every_operation_has_a_function(self):
        for name in registry.OPERATIONS:
            fn = getattr(operations, name)
            assert callable(fn)
            assert "dispatcher" in inspect.signature(fn).parameters

    def test_signatures_match_encoder(self):
        for name, op in registry.OPERATIONS.items():
            params = list(inspect.signature(getattr(operations, name)).parameters)
            assert params[:-1] == [p.name for p in op.params], name

    def test_defaults_and_annotations_match_encoder(self):
        for name in registry.OPERATIONS:
            public = inspect.signature(getattr(operations, name)).parameters
            encoded = inspect.signature(getattr(encoder, name)).parameters
            for param_name, param in encoded.items():
                assert public[param_name].default == param.default, (name, param_name)
                assert public[param_name].annotation == param.annotation, (name, param_name)

    def test_prefixed_alias_attribute(self):
        assert operations.ipfs_pin_add is operations.pin_add
        assert operations.ipfs_network_id is operations.network_id

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            operations.ipfs_teleport

    def test_api_version(self):
        assert operations.get_api_version() == __version__


class TestDispatching:
    def test_pin_add(self, runtime, dispatcher):
        result = operations.pin_add("/ipfs/QmX", True, dispatcher=dispatcher)
        assert runtime.lines == ["pin add /ipfs/QmX -r true"]
        assert result.ok

    def test_ping_defaults(self, runtime, dispatcher):
        operations.ping(dispatcher=dispatcher)
        assert runtime.lines == ["ping"]

    def test_get_with_compression(self, runtime, dispatcher):
        operations.get("QmX", compress=True, compression_level=9, dispatcher=dispatcher)
        assert runtime.lines == ["get QmX -a false -C true -l 9"]

    def test_daemon(self, runtime, dispatcher):
        operations.daemon(init=True, routing="dht", dispatcher=dispatcher)
        assert runtime.lines == ["daemon -init true -routing dht -mount false -writable false"]

    def test_encoding_error_never_reaches_runtime(self, runtime, dispatcher):
        with pytest.raises(EncodingError):
            operations.cat(None, dispatcher=dispatcher)
        assert runtime.lines == []

    def test_failure_is_observable(self, dispatcher, runtime):
        runtime.returncode = RC_FAILED
        runtime.stderr = "Error: merkledag: not found\n"
        result = operations.cat("QmMissing", dispatcher=dispatcher)
        assert not result.ok
        with pytest.raises(CommandFailedError, match="merkledag: not found") as exc:
            result.check()
        assert exc.value.result is result

    def test_run_by_alias(self, runtime, dispatcher):
        operations.run("ipfs_dht_findprovs", key="QmK", verbose=True, dispatcher=dispatcher)
        assert runtime.lines == ["dht findprovs QmK -v true"]

    def test_execute_raw(self, runtime, dispatcher):
        operations.execute("swarm", "peers", dispatcher=dispatcher)
        assert runtime.lines == ["swarm peers"]


class TestDefaultDispatcher:
    def test_uses_configured_default(self, default_dispatcher, runtime):
        operations.version()
        operations.refs_local()
        assert runtime.lines == ["version", "refs local"]

    def test_built_from_config_once(self):
        operations.set_dispatcher(None)
        try:
            with patch("ipfs_embedded.operations.load_config") as mock_load, \
                 patch("ipfs_embedded.operations.create_dispatcher") as mock_create:
                mock_create.return_value = MagicMock()
                first = operations.get_dispatcher()
                second = operations.get_dispatcher()
                assert first is second
                assert mock_load.call_count == 1
                mock_create.assert_called_once_with(mock_load.return_value)
        finally:
            operations.set_dispatcher(None)
