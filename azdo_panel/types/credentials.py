"""Credential pair for an attached organization."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """Organization URL plus personal access token."""

    organization_url: str
    access_token: str

    @property
    def is_valid(self) -> bool:
        return bool(self.organization_url.strip() and self.access_token.strip())

    def __repr__(self) -> str:
        # Token stays out of reprs and tracebacks.
        return f"Credentials(organization_url={self.organization_url!r}, access_token='***')"
