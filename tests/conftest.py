"""Shared test fixtures."""

import pytest

from mdpreview.config import Config, SearchConfig, ServerConfig


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration with default sections."""
    return Config(server=ServerConfig(), search=SearchConfig())
