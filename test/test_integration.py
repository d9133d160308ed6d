# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# test/test_integration.py

"""Integration tests requiring a real ipfs runtime (run with -m integration)."""

import tempfile
from pathlib import Path

import pytest

from ipfs_embedded import operations
from ipfs_embedded.config import load_config
from ipfs_embedded.dispatcher import create_dispatcher


@pytest.fixture
def dispatcher():
    return create_dispatcher(load_config())


@pytest.mark.integration
def test_version(dispatcher):
    result = operations.version(dispatcher=dispatcher).check()
    assert "version" in result.stdout.lower()


@pytest.mark.integration
def test_add_pin_and_cat(dispatcher):
    """End-to-end: add a file quietly, pin the hash, read it back."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False) as f:
        f.write("test content for cat operation")
        test_file = Path(f.name)

    try:
        added = operations.add(str(test_file), quiet=True, dispatcher=dispatcher).check()
        cid = added.stdout.strip().splitlines()[-1]

        operations.pin_add(cid, recursive=True, dispatcher=dispatcher).check()
        result = operations.cat(cid, dispatcher=dispatcher).check()
        assert result.stdout == "test content for cat operation"
    finally:
        test_file.unlink()
