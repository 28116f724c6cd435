"""Async Git repositories resource client."""

from typing import TYPE_CHECKING
from urllib.parse import quote

from azdo_panel.types.repos import Repository

if TYPE_CHECKING:
    from azdo_panel.transport import AsyncHTTPTransport


class AsyncRepositoriesClient:
    """Async client for project-scoped Git repository operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the async repositories client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def list(self, project_id: str, project_name: str) -> list[Repository]:
        """
        List the Git repositories of one project.

        The project name is taken as the API returned it and only
        percent-encoded for the path.

        Args:
            project_id: Identifier recorded as each repository's owner
            project_name: Name used in the request path

        Returns:
            Repository objects in API response order
        """
        response = await self.transport.get(
            f"/{quote(project_name, safe='')}/_apis/git/repositories"
        )

        return [
            Repository.from_api(item, project_id)
            for item in response.get("value", [])
        ]
