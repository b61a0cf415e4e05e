"""Shared test fixtures for the Forge Chat test suite."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import pytest_asyncio

from forgechat.conversation import EphemeralAdapter, SessionStore
from tests.factories import FlakyAdapter


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from forgechat.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def ephemeral_adapter() -> EphemeralAdapter:
    return EphemeralAdapter()


@pytest.fixture
def flaky_adapter() -> FlakyAdapter:
    """In-memory adapter whose calls can be made to fail like a remote store."""
    return FlakyAdapter()


@pytest_asyncio.fixture
async def store(ephemeral_adapter: EphemeralAdapter) -> SessionStore:
    """A seeded store in ephemeral mode."""
    store = SessionStore(ephemeral_adapter)
    await store.initialize()
    return store


@pytest_asyncio.fixture
async def remote_store(flaky_adapter: FlakyAdapter) -> SessionStore:
    """A seeded store over an adapter that can simulate backend failures."""
    store = SessionStore(flaky_adapter)
    await store.initialize()
    return store
