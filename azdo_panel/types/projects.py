"""Project-related data models."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Project:
    """Team project information."""

    id: str
    name: str
    description: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Project":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            description=data.get("description"),
        )
