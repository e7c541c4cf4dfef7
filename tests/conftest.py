"""
Pytest configuration and fixtures for Plugin Manager tests.
"""

import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

import click
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from plugin_manager.plugins.manager import PluginManager, set_plugin_manager  # noqa: E402


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def default_manager() -> Generator[PluginManager, None, None]:
    """Give every test its own process-wide plugin manager."""
    manager = PluginManager()
    previous = set_plugin_manager(manager)
    yield manager
    set_plugin_manager(previous)


@pytest.fixture
def manager() -> PluginManager:
    """Create an empty plugin manager for explicit registration."""
    return PluginManager()


@pytest.fixture
def command() -> click.Command:
    """Create an empty click command to bind plugin options to."""
    return click.Command("test")


@pytest.fixture
def parse() -> Callable[[click.Command, list[str]], click.Context]:
    """Parse args with a command, running all option callbacks."""

    def _parse(command: click.Command, args: list[str]) -> click.Context:
        return command.make_context("test", list(args))

    return _parse


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
