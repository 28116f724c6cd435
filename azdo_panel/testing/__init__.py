"""azdo-panel testing utilities.

Provides a mock DevOps client and fixtures for testing code built on the panel.
"""

from azdo_panel.testing.fixtures import create_mock_project, create_mock_repository
from azdo_panel.testing.mock import MockCall, MockDevOpsClient

__all__ = [
    "MockDevOpsClient",
    "MockCall",
    "create_mock_project",
    "create_mock_repository",
]
