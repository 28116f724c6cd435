"""
Pytest fixtures for azdo-panel testing.

Provides common fixtures and factories for tests of the panel and of
applications embedding it.
"""

from collections.abc import Generator
from typing import Any

import pytest

from azdo_panel.clipboard import MemoryClipboard
from azdo_panel.credentials import CredentialStore, MemoryStore
from azdo_panel.testing.mock import MockDevOpsClient
from azdo_panel.types import Credentials, Project, Repository

# ============================================================================
# Factories
# ============================================================================


def create_mock_project(
    project_id: str = "test-project-id",
    name: str = "test-project",
    **kwargs: Any,
) -> Project:
    """Create a Project with customizable fields."""
    return Project(id=project_id, name=name, **kwargs)


def create_mock_repository(
    repo_id: str = "test-repo-id",
    name: str = "test-repo",
    project_id: str = "test-project-id",
    **kwargs: Any,
) -> Repository:
    """
    Create a Repository with customizable fields.

    Args:
        repo_id: Repository ID
        name: Repository name
        project_id: Owning project ID
        **kwargs: Additional fields to override

    Returns:
        Repository object
    """
    defaults: dict[str, Any] = {
        "description": None,
        "default_branch": "refs/heads/main",
        "size_bytes": 0,
    }
    defaults.update(kwargs)
    return Repository(id=repo_id, name=name, project_id=project_id, **defaults)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_devops_client() -> Generator[MockDevOpsClient, None, None]:
    """Provide a MockDevOpsClient with nothing configured."""
    client = MockDevOpsClient()
    yield client
    client.reset()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def credential_store(memory_store: MemoryStore) -> CredentialStore:
    return CredentialStore(memory_store)


@pytest.fixture
def memory_clipboard() -> MemoryClipboard:
    return MemoryClipboard()


@pytest.fixture
def sample_credentials() -> Credentials:
    return Credentials(
        organization_url="https://dev.azure.com/acme",
        access_token="test-personal-access-token",
    )


@pytest.fixture
def sample_project() -> Project:
    return create_mock_project("p-1", "Platform", description="Shared platform services")


@pytest.fixture
def sample_repository(sample_project: Project) -> Repository:
    return create_mock_repository("r-1", "api-gateway", sample_project.id)


__all__ = [
    "create_mock_project",
    "create_mock_repository",
    "mock_devops_client",
    "memory_store",
    "credential_store",
    "memory_clipboard",
    "sample_credentials",
    "sample_project",
    "sample_repository",
]
