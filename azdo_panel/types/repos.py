"""Repository-related data models."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Repository:
    """Git repository information."""

    id: str
    name: str
    project_id: str
    description: str | None = None
    default_branch: str | None = None
    size_bytes: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], project_id: str) -> "Repository":
        size = data.get("size")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            project_id=project_id,
            description=data.get("description"),
            default_branch=data.get("defaultBranch"),
            size_bytes=int(size) if size is not None else None,
        )
