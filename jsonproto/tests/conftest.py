"""Unit tests configuration file."""

import os

import pytest

from jsonproto.schema.pool import DescriptorPool, load_pool

TESTS_DIR = os.path.dirname(os.path.realpath(__file__))
EXAMPLE_SCHEMA = os.path.join(TESTS_DIR, "example.jps")


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def pool() -> DescriptorPool:
    """Descriptor pool for the shared example schema."""
    with open(EXAMPLE_SCHEMA, encoding="utf-8") as f:
        return load_pool(f.read())


@pytest.fixture
def decoder(pool):
    """Building decoder for Sample, with the schema's extensions."""
    return pool.decoder("Sample")
