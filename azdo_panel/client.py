"""
Azure DevOps client for the panel.

Wraps the async resource clients and reports every failure as an ``Err``
value instead of raising, so one failed request never aborts the caller.
"""

import asyncio
from typing import Any

import httpx
from result import Err, Ok, Result

from azdo_panel.clients import AsyncProjectsClient, AsyncRepositoriesClient
from azdo_panel.exceptions import AzureDevOpsError, ServerError, ValidationError
from azdo_panel.logging import get_logger
from azdo_panel.transport import DEFAULT_API_VERSION, AsyncHTTPTransport, RetryConfig
from azdo_panel.types import Credentials, Project, Repository

logger = get_logger("client")


class DevOpsClient:
    """
    Async client for listing an organization's projects and repositories.

    One transport is kept for the credentials last used and replaced when
    different credentials come in.

    Example:
        ```python
        import asyncio
        from azdo_panel import Credentials, DevOpsClient

        async def main():
            creds = Credentials("https://dev.azure.com/acme", "my-pat")
            async with DevOpsClient() as client:
                projects = (await client.list_projects(creds)).unwrap_or([])
                for project in projects:
                    repos = await client.list_repositories(creds, project.id, project.name)
                    print(project.name, repos.unwrap_or([]))

        asyncio.run(main())
        ```
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_version = api_version
        self.timeout = timeout
        self.retry_config = retry_config
        self.http_transport = http_transport
        self._transport: AsyncHTTPTransport | None = None
        self._transport_credentials: Credentials | None = None
        self._closing: set[asyncio.Task[None]] = set()

    async def _transport_for(self, credentials: Credentials) -> AsyncHTTPTransport:
        if self._transport is not None and self._transport_credentials == credentials:
            return self._transport

        if self._transport is not None:
            stale, self._transport = self._transport, None
            self._transport_credentials = None
            await stale.close()

        self._transport = self._create_transport(credentials)
        self._transport_credentials = credentials
        return self._transport

    def _create_transport(self, credentials: Credentials) -> AsyncHTTPTransport:
        return AsyncHTTPTransport(
            organization_url=credentials.organization_url,
            access_token=credentials.access_token,
            api_version=self.api_version,
            timeout=self.timeout,
            retry_config=self.retry_config,
            http_transport=self.http_transport,
        )

    async def list_projects(
        self, credentials: Credentials
    ) -> Result[list[Project], AzureDevOpsError]:
        """
        List the organization's projects.

        Returns:
            ``Ok`` with projects in API order, or ``Err`` with the failure
        """
        try:
            transport = await self._transport_for(credentials)
            projects = await AsyncProjectsClient(transport).list()
        except httpx.InvalidURL as e:
            return Err(_invalid_url(credentials, e))
        except AzureDevOpsError as e:
            logger.warning(
                "Listing projects for %s failed: %s", credentials.organization_url, e
            )
            return Err(e)
        except (KeyError, TypeError, ValueError) as e:
            return Err(_malformed("projects", e))

        logger.debug("Fetched %d projects from %s", len(projects), credentials.organization_url)
        return Ok(projects)

    async def list_repositories(
        self, credentials: Credentials, project_id: str, project_name: str
    ) -> Result[list[Repository], AzureDevOpsError]:
        """
        List one project's Git repositories.

        A failure here only concerns this project; the caller records it and
        moves on to the next one.

        Returns:
            ``Ok`` with repositories in API order, or ``Err`` with the failure
        """
        try:
            transport = await self._transport_for(credentials)
            repositories = await AsyncRepositoriesClient(transport).list(
                project_id, project_name
            )
        except httpx.InvalidURL as e:
            return Err(_invalid_url(credentials, e))
        except AzureDevOpsError as e:
            logger.warning("Listing repositories for project %r failed: %s", project_name, e)
            return Err(e)
        except (KeyError, TypeError, ValueError) as e:
            return Err(_malformed(f"repositories of {project_name!r}", e))

        logger.debug("Fetched %d repositories for project %r", len(repositories), project_name)
        return Ok(repositories)

    def discard_transport(self) -> None:
        """
        Drop the cached transport so its token is no longer held.

        The transport is closed in the background when an event loop is
        running; ``close()`` waits for that to finish.
        """
        stale, self._transport = self._transport, None
        self._transport_credentials = None
        if stale is None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; dropping transport without closing it")
            return

        task = loop.create_task(stale.close())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def close(self) -> None:
        """Close the underlying transport, if any."""
        if self._transport is not None:
            transport, self._transport = self._transport, None
            self._transport_credentials = None
            await transport.close()
        if self._closing:
            await asyncio.gather(*self._closing)

    async def __aenter__(self) -> "DevOpsClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


def _malformed(what: str, error: Exception) -> ServerError:
    logger.warning("Malformed response listing %s: %r", what, error)
    return ServerError("INVALID_RESPONSE", f"Malformed response listing {what}: {error!r}")


def _invalid_url(credentials: Credentials, error: Exception) -> ValidationError:
    logger.warning("Invalid organization URL %r: %s", credentials.organization_url, error)
    return ValidationError("INVALID_URL", f"Invalid organization URL: {error}")
