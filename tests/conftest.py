"""
Combine Test Configuration

Shared fixtures for all tests.
"""

import os
import sys

# Add project root to path FIRST
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from unittest.mock import AsyncMock

from combine import RequestContext, reset_config


# Isolate every test from the developer's environment and .env file
@pytest.fixture(autouse=True)
def clean_combine_env(tmp_path):
    saved = {k: v for k, v in os.environ.items() if k.startswith("COMBINE_")}
    for key in saved:
        del os.environ[key]
    os.environ["COMBINE_ENV_FILE"] = str(tmp_path / "missing.env")
    reset_config()

    yield

    reset_config()
    for key in [k for k in os.environ if k.startswith("COMBINE_")]:
        del os.environ[key]
    os.environ.update(saved)


@pytest.fixture
def ctx():
    return RequestContext()


# Stand-in for the rest of the pipeline
@pytest.fixture
def next_():
    return AsyncMock(return_value=None)


@pytest.fixture
def calls():
    """Ordered record of which units ran."""
    return []


@pytest.fixture
def recorder(calls):
    """Factory for units that record their name and then advance or answer."""

    def make(name, result=None, advance=True):
        async def unit(ctx, next):
            calls.append(name)
            if advance:
                await next()
            return result

        unit.__name__ = name
        return unit

    return make
