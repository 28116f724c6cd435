"""Hierarchy-aware search over projects and their repositories."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from azdo_panel.types import Project, Repository


@dataclass(frozen=True)
class FilteredView:
    """Visible projects and, per shown project, its visible repositories."""

    query: str
    projects: list[Project] = field(default_factory=list)
    repositories: dict[str, list[Repository]] = field(default_factory=dict)

    @property
    def no_results(self) -> bool:
        return bool(self.query) and not self.projects

    def repositories_for(self, project_id: str) -> list[Repository]:
        return self.repositories.get(project_id, [])


def normalize_query(query: str) -> str:
    return query.strip().lower()


def _matches(needle: str, *haystacks: str | None) -> bool:
    return any(needle in text.lower() for text in haystacks if text)


def compute_filtered_view(
    query: str,
    projects: Sequence[Project],
    repo_map: Mapping[str, Sequence[Repository]],
) -> FilteredView:
    """
    Compute the visible subset of the project/repository hierarchy.

    A project is shown when its own name or description matches, or when
    any of its repositories does. The repository list of a shown project is
    filtered on its own, so a project matched only by its description shows
    no repositories.

    Args:
        query: Raw search text; blank means no filter
        projects: Projects in display order
        repo_map: Repositories keyed by project id

    Returns:
        The filtered view; ``view.query`` holds the normalized query
    """
    needle = normalize_query(query)

    if not needle:
        return FilteredView(
            query="",
            projects=list(projects),
            repositories={p.id: list(repo_map.get(p.id, ())) for p in projects},
        )

    shown: list[Project] = []
    visible: dict[str, list[Repository]] = {}
    for project in projects:
        matching_repos = [
            repo
            for repo in repo_map.get(project.id, ())
            if _matches(needle, repo.name, repo.description)
        ]
        if matching_repos or _matches(needle, project.name, project.description):
            shown.append(project)
            visible[project.id] = matching_repos

    return FilteredView(query=needle, projects=shown, repositories=visible)
