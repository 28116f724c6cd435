"""
Pytest plugin for azdo-panel testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["azdo_panel.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from azdo_panel.testing.fixtures import (
    credential_store,
    memory_clipboard,
    memory_store,
    mock_devops_client,
    sample_credentials,
    sample_project,
    sample_repository,
)

__all__ = [
    "credential_store",
    "memory_clipboard",
    "memory_store",
    "mock_devops_client",
    "sample_credentials",
    "sample_project",
    "sample_repository",
]
