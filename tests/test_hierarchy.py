"""
Tests for the two-level fetch orchestration.

Feature: hierarchy
"""

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from azdo_panel.exceptions import NotFoundError, ServerError
from azdo_panel.hierarchy import (
    BoundedFetchStrategy,
    HierarchyCache,
    SequentialFetchStrategy,
    strategy_for,
)
from azdo_panel.testing import MockDevOpsClient, create_mock_project, create_mock_repository
from azdo_panel.types import Credentials

CREDENTIALS = Credentials("https://dev.azure.com/acme", "pat")


def configured_client(project_count: int) -> MockDevOpsClient:
    client = MockDevOpsClient()
    projects = [create_mock_project(f"p{i}", f"Project {i}") for i in range(project_count)]
    client.configure_projects(projects)
    for project in projects:
        client.configure_repositories(
            project.id, [create_mock_repository(f"{project.id}-r", "repo", project.id)]
        )
    return client


def test_failed_project_is_isolated() -> None:
    client = MockDevOpsClient()
    client.configure_projects([create_mock_project("a", "A"), create_mock_project("b", "B")])
    repo_a = create_mock_repository("ra", "alpha", "a")
    client.configure_repositories("a", [repo_a])
    client.configure_repositories("b", error=ServerError("HTTP_500", "boom", 500))
    cache = HierarchyCache(client)

    asyncio.run(cache.refresh(CREDENTIALS))

    assert cache.repositories == {"a": [repo_a], "b": []}
    assert isinstance(cache.repository_errors["b"], ServerError)
    assert "a" not in cache.repository_errors
    assert not cache.loading


def test_failure_in_the_middle_does_not_stop_later_projects() -> None:
    client = configured_client(3)
    client.configure_repositories("p1", error=NotFoundError("HTTP_404", "gone", 404))
    cache = HierarchyCache(client)

    asyncio.run(cache.refresh(CREDENTIALS))

    assert client.requested_project_ids() == ["p0", "p1", "p2"]
    assert [len(cache.repositories_for(p)) for p in ("p0", "p1", "p2")] == [1, 0, 1]


def test_project_failure_empties_cache() -> None:
    client = MockDevOpsClient()
    client.configure_projects(error=ServerError("HTTP_500", "down", 500))
    cache = HierarchyCache(client)

    asyncio.run(cache.refresh(CREDENTIALS))

    assert cache.projects == []
    assert cache.repositories == {}
    assert isinstance(cache.project_error, ServerError)
    assert not client.was_called("list_repositories")


def test_no_projects_ends_orchestration() -> None:
    client = MockDevOpsClient()
    cache = HierarchyCache(client)

    asyncio.run(cache.refresh(CREDENTIALS))

    assert cache.projects == []
    assert cache.project_error is None
    assert not client.was_called("list_repositories")


def test_sequential_fetch_one_request_at_a_time() -> None:
    client = configured_client(4)
    cache = HierarchyCache(client, SequentialFetchStrategy())

    asyncio.run(cache.refresh(CREDENTIALS))

    assert client.max_in_flight == 1
    assert client.requested_project_ids() == ["p0", "p1", "p2", "p3"]


def test_loading_flag_spans_whole_refresh() -> None:
    client = configured_client(2)
    cache = HierarchyCache(client)
    gate = client.gate("p1")

    async def run() -> None:
        task = asyncio.create_task(cache.refresh(CREDENTIALS))
        while "p1" not in client.requested_project_ids():
            await asyncio.sleep(0)
        # p0 is done, p1 is waiting on its gate.
        assert cache.loading
        assert cache.has_attempted("p0")
        assert not cache.has_attempted("p1")
        gate.set()
        await task
        assert not cache.loading
        assert cache.has_attempted("p1")

    asyncio.run(run())


def test_bounded_strategy_limits_concurrency_and_keeps_order() -> None:
    client = configured_client(3)
    gate_p0 = client.gate("p0")
    gate_p1 = client.gate("p1")
    cache = HierarchyCache(client, BoundedFetchStrategy(2))

    async def run() -> None:
        task = asyncio.create_task(cache.refresh(CREDENTIALS))
        while len(client.requested_project_ids()) < 2:
            await asyncio.sleep(0)
        assert client.in_flight == 2
        assert client.requested_project_ids() == ["p0", "p1"]

        # p1 finishes first, which frees a slot for p2.
        gate_p1.set()
        while not cache.has_attempted("p2"):
            await asyncio.sleep(0)
        assert not cache.has_attempted("p0")

        gate_p0.set()
        await task

    asyncio.run(run())

    assert client.max_in_flight == 2
    assert list(cache.repositories) == ["p0", "p1", "p2"]


def test_reset_discards_results_of_in_flight_refresh() -> None:
    client = configured_client(2)
    gate = client.gate("p0")
    changes: list[bool] = []
    cache = HierarchyCache(client, on_change=lambda: changes.append(True))

    async def run() -> None:
        task = asyncio.create_task(cache.refresh(CREDENTIALS))
        while client.in_flight == 0:
            await asyncio.sleep(0)
        cache.reset()
        gate.set()
        await task

    asyncio.run(run())

    assert cache.projects == []
    assert cache.repositories == {}
    assert not cache.loading
    # p1 is never requested once the refresh went stale.
    assert client.requested_project_ids() == ["p0"]
    assert changes


def test_newer_refresh_wins() -> None:
    client = configured_client(1)
    gate = client.gate("p0")
    cache = HierarchyCache(client)

    async def run() -> None:
        first = asyncio.create_task(cache.refresh(CREDENTIALS))
        while client.in_flight == 0:
            await asyncio.sleep(0)
        client.configure_projects([create_mock_project("fresh", "Fresh")])
        second = asyncio.create_task(cache.refresh(CREDENTIALS))
        await second
        gate.set()
        await first

    asyncio.run(run())

    assert [p.id for p in cache.projects] == ["fresh"]
    assert list(cache.repositories) == ["fresh"]


@given(
    outcomes=st.lists(st.booleans(), min_size=1, max_size=8),
    limit=st.integers(min_value=1, max_value=4),
)
@settings(max_examples=50)
def test_every_project_attempted_in_order(outcomes: list[bool], limit: int) -> None:
    """
    Whatever fails, every project gets a key, failed ones map to [], and the
    mapping follows project order.
    """
    client = configured_client(len(outcomes))
    for i, ok in enumerate(outcomes):
        if not ok:
            client.configure_repositories(f"p{i}", error=ServerError("HTTP_500", "boom", 500))
    cache = HierarchyCache(client, strategy_for(limit))

    asyncio.run(cache.refresh(CREDENTIALS))

    assert list(cache.repositories) == [f"p{i}" for i in range(len(outcomes))]
    for i, ok in enumerate(outcomes):
        assert len(cache.repositories_for(f"p{i}")) == (1 if ok else 0)
        assert (f"p{i}" in cache.repository_errors) is (not ok)


def test_strategy_for() -> None:
    assert isinstance(strategy_for(1), SequentialFetchStrategy)
    bounded = strategy_for(3)
    assert isinstance(bounded, BoundedFetchStrategy)
    assert bounded.limit == 3
    with pytest.raises(ValueError):
        BoundedFetchStrategy(0)


def test_refresh_with_plugin_fixtures(
    mock_devops_client: MockDevOpsClient,
    sample_project,
    sample_repository,
    sample_credentials: Credentials,
) -> None:
    mock_devops_client.configure_projects([sample_project])
    mock_devops_client.configure_repositories(sample_project.id, [sample_repository])
    cache = HierarchyCache(mock_devops_client)

    asyncio.run(cache.refresh(sample_credentials))

    assert cache.projects == [sample_project]
    assert cache.repositories_for(sample_project.id) == [sample_repository]
    assert cache.repository_errors == {}
    call = mock_devops_client.get_calls("list_repositories")[0]
    assert call.args == (sample_credentials, "p-1", "Platform")
