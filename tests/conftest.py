"""Shared fixtures for the microscope test suite."""

import pytest

from microscope.analyzer.orchestrator import parse_html
from microscope.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the environment."""
    return Settings()


@pytest.fixture
def extract(settings):
    """Parse an HTML string against http://example.com unless told otherwise."""

    def _extract(html, base_url="http://example.com", **overrides):
        run_settings = Settings(**overrides) if overrides else settings
        return parse_html(html, base_url=base_url, settings=run_settings)

    return _extract
