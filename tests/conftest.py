"""Pytest configuration and fixtures."""

import fakeredis
import pytest

from redisbitmap import Bitmap


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--fast",
        action="store_true",
        default=False,
        help="Skip slow tests (wide popcount sweeps)",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests when --fast flag is used."""
    if config.getoption("--fast"):
        skip_slow = pytest.mark.skip(reason="skipped with --fast flag")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


@pytest.fixture
def client():
    """In-memory Redis client returning raw bytes, isolated per test."""
    return fakeredis.FakeRedis(server=fakeredis.FakeServer())


@pytest.fixture
def bitmap(client):
    """Bitmap facade over the per-test client."""
    return Bitmap(client)


@pytest.fixture
def foo_bar(bitmap):
    """Bits {0, 2, 4} on foo and {1, 2, 7} on bar."""
    for offset in (0, 2, 4):
        bitmap.set("foo", offset, 1)
    for offset in (1, 2, 7):
        bitmap.set("bar", offset, 1)
    return bitmap
