"""Shared fixtures for dataknobs_schema tests."""

import pytest

from dataknobs_schema import reset_config


@pytest.fixture(autouse=True)
def clean_config():
    """Every test starts and ends without configured message providers."""
    reset_config()
    yield
    reset_config()
