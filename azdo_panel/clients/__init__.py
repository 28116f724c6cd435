"""azdo-panel async resource clients."""

from azdo_panel.clients.projects import AsyncProjectsClient
from azdo_panel.clients.repos import AsyncRepositoriesClient

__all__ = [
    "AsyncProjectsClient",
    "AsyncRepositoriesClient",
]
