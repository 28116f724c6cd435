"""Async Projects resource client."""

from typing import TYPE_CHECKING

from azdo_panel.types.projects import Project

if TYPE_CHECKING:
    from azdo_panel.transport import AsyncHTTPTransport


class AsyncProjectsClient:
    """Async client for team project operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the async projects client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def list(self) -> list[Project]:
        """
        List the organization's team projects.

        Returns:
            Project objects in API response order
        """
        response = await self.transport.get("/_apis/projects")

        return [Project.from_api(item) for item in response.get("value", [])]
