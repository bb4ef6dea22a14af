"""Pytest configuration for all tests."""

import os
import sys

import pytest

# Make the repository root importable so tests can import ``src.*``
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)


@pytest.fixture
def gateway_env(monkeypatch):
    """Minimal environment for GatewaySettings."""
    monkeypatch.setenv("GATEWAY_WEBHOOK_SECRET", "s3cr3t")
    monkeypatch.delenv("GATEWAY_GITCODE_TOKEN", raising=False)
    monkeypatch.delenv("GATEWAY_PORT", raising=False)
    monkeypatch.delenv("GATEWAY_LOG_LEVEL", raising=False)
    return {"GATEWAY_WEBHOOK_SECRET": "s3cr3t"}
