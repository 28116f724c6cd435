"""
Two-level project → repository fetch orchestration.

Projects are listed first; then each project's repositories are fetched and
recorded under the project id. A failed repository fetch is recorded as an
empty list for that project only.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from result import Err

from azdo_panel.client import DevOpsClient
from azdo_panel.exceptions import AzureDevOpsError
from azdo_panel.logging import get_logger
from azdo_panel.types import Credentials, Project, Repository

logger = get_logger("hierarchy")

FetchOne = Callable[[Project], Awaitable[None]]


class FetchStrategy(Protocol):
    """Decides how the per-project repository fetches are scheduled."""

    async def fetch_all(self, projects: Sequence[Project], fetch_one: FetchOne) -> None: ...


class SequentialFetchStrategy:
    """One project at a time, in project-list order.

    The next project's repositories are not requested before the previous
    request resolved, which keeps the request rate at one in flight.
    """

    async def fetch_all(self, projects: Sequence[Project], fetch_one: FetchOne) -> None:
        for project in projects:
            await fetch_one(project)


class BoundedFetchStrategy:
    """At most ``limit`` repository requests in flight."""

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit

    async def fetch_all(self, projects: Sequence[Project], fetch_one: FetchOne) -> None:
        semaphore = asyncio.Semaphore(self.limit)

        async def guarded(project: Project) -> None:
            async with semaphore:
                await fetch_one(project)

        await asyncio.gather(*(guarded(project) for project in projects))


def strategy_for(max_concurrent_fetches: int) -> FetchStrategy:
    if max_concurrent_fetches <= 1:
        return SequentialFetchStrategy()
    return BoundedFetchStrategy(max_concurrent_fetches)


class HierarchyCache:
    """
    In-memory project list plus repositories keyed by project id.

    A project id is a key of ``repositories`` once its fetch finished,
    successfully or not. Once ``loading`` turns false after a refresh, the
    mapping iterates in project-list order.

    ``reset()`` invalidates any refresh still in flight: results that
    resolve afterwards are dropped instead of written into the cleared cache.
    """

    def __init__(
        self,
        client: DevOpsClient,
        strategy: FetchStrategy | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.client = client
        self.strategy = strategy or SequentialFetchStrategy()
        self._on_change = on_change
        self._generation = 0
        self._loading = False
        self._projects: list[Project] = []
        self._repositories: dict[str, list[Repository]] = {}
        self._project_error: AzureDevOpsError | None = None
        self._repository_errors: dict[str, AzureDevOpsError] = {}

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    @property
    def repositories(self) -> dict[str, list[Repository]]:
        return {project_id: list(repos) for project_id, repos in self._repositories.items()}

    @property
    def project_error(self) -> AzureDevOpsError | None:
        """Why the last project listing came back empty, if it failed."""
        return self._project_error

    @property
    def repository_errors(self) -> dict[str, AzureDevOpsError]:
        """Failed repository fetches of the last refresh, by project id."""
        return dict(self._repository_errors)

    def repositories_for(self, project_id: str) -> list[Repository]:
        return list(self._repositories.get(project_id, []))

    def has_attempted(self, project_id: str) -> bool:
        return project_id in self._repositories

    def reset(self) -> None:
        """Drop all data and invalidate in-flight refreshes."""
        self._generation += 1
        self._loading = False
        self._projects = []
        self._repositories = {}
        self._project_error = None
        self._repository_errors = {}
        self._changed()

    async def refresh(self, credentials: Credentials) -> None:
        """
        Fetch the project list, then every project's repositories.

        Never raises for remote failures; they show up as empty lists plus
        ``project_error`` / ``repository_errors``.
        """
        self._generation += 1
        generation = self._generation
        self._loading = True
        self._projects = []
        self._repositories = {}
        self._project_error = None
        self._repository_errors = {}
        self._changed()

        try:
            result = await self.client.list_projects(credentials)
            if generation != self._generation:
                logger.debug("Dropping stale project list")
                return

            if isinstance(result, Err):
                self._project_error = result.err_value
                return

            projects = result.ok_value
            self._projects = list(projects)
            self._changed()
            if not projects:
                return

            async def fetch_one(project: Project) -> None:
                if generation != self._generation:
                    return
                repos = await self.client.list_repositories(
                    credentials, project.id, project.name
                )
                if generation != self._generation:
                    return
                if isinstance(repos, Err):
                    self._repository_errors[project.id] = repos.err_value
                    self._repositories[project.id] = []
                else:
                    self._repositories[project.id] = list(repos.ok_value)
                self._changed()

            await self.strategy.fetch_all(projects, fetch_one)

            if generation == self._generation:
                self._repositories = {
                    project.id: self._repositories[project.id]
                    for project in projects
                    if project.id in self._repositories
                }
                logger.info(
                    "Loaded %d projects, %d repositories (%d failed)",
                    len(projects),
                    sum(len(repos) for repos in self._repositories.values()),
                    len(self._repository_errors),
                )
        finally:
            if generation == self._generation:
                self._loading = False
                self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
