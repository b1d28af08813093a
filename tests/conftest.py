"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture
def eth2_header() -> bytes:
    """Destination, source and type fields of the sample Ethernet II frame."""
    return bytes([1, 2, 3, 4, 5, 6, 6, 5, 4, 3, 2, 1, 0x08, 0x00])


@pytest.fixture
def sample_payload() -> bytes:
    """Sample frame payload for testing."""
    return b"Hello, wire!"
