"""Pytest hooks and fixtures."""

import os

import pytest

from rpcwire.config import access


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep host RPCWIRE_* variables out of Config() and reset the config cache."""
    for key in list(os.environ):
        if key.startswith("RPCWIRE_"):
            monkeypatch.delenv(key, raising=False)
    access.clear_config_cache()
    yield
    access.clear_config_cache()
