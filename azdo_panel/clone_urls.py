"""
Clone URL helpers for Azure DevOps repositories.

Organization URLs come in three shapes:

- multi-tenant: ``https://dev.azure.com/<slug>``
- single-tenant (legacy): ``https://<slug>.visualstudio.com``
- anything else (on-prem collections, proxies): the first path segment is
  taken as the slug

Every helper here always produces a URL; malformed organization URLs fall
back to the multi-tenant templates with whatever slug can be salvaged.
"""

import re
from enum import Enum
from urllib.parse import SplitResult, quote, unquote, urlsplit

from azdo_panel.exceptions import ValidationError
from azdo_panel.logging import get_logger

logger = get_logger("clone_urls")

MULTI_TENANT_HOST = "dev.azure.com"
SSH_HOST = f"ssh.{MULTI_TENANT_HOST}"

_SINGLE_TENANT_HOST = re.compile(r"^([a-z0-9][a-z0-9-]*)\.visualstudio\.com$", re.IGNORECASE)
_SALVAGE_MULTI_TENANT = re.compile(r"dev\.azure\.com/+([^/?#\s]+)", re.IGNORECASE)
_SALVAGE_SINGLE_TENANT = re.compile(
    r"(?:^|//|@)([a-z0-9][a-z0-9-]*)\.visualstudio\.com", re.IGNORECASE
)
_SCHEME_PREFIX = re.compile(r"^[a-z][a-z0-9+.-]*:/*", re.IGNORECASE)

# Same unescaped set as JavaScript's encodeURIComponent.
_SEGMENT_SAFE = "!*'()"


class CloneKind(str, Enum):
    """Clone URL flavor."""

    HTTPS = "https"
    SSH = "ssh"

    @classmethod
    def coerce(cls, kind: "CloneKind | str") -> "CloneKind":
        try:
            return cls(kind)
        except ValueError:
            raise ValidationError(
                "INVALID_CLONE_KIND", f"Unknown clone kind {kind!r}; expected 'https' or 'ssh'"
            ) from None


def encode_path_segment(value: str) -> str:
    """Percent-encode a project or repository name for use in a URL path."""
    return quote(value, safe=_SEGMENT_SAFE)


def _parse(organization_url: str) -> SplitResult:
    parts = urlsplit(organization_url.strip())
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Not an absolute URL: {organization_url!r}")
    # Raises ValueError on a non-numeric port.
    parts.port
    return parts


def _first_segment(path: str) -> str:
    segments = [segment for segment in path.split("/") if segment]
    return unquote(segments[0]) if segments else ""


def _slug_from_parts(parts: SplitResult) -> str:
    host = (parts.hostname or "").lower()
    if host == MULTI_TENANT_HOST:
        return _first_segment(parts.path)

    match = _SINGLE_TENANT_HOST.match(host)
    if match:
        return match.group(1)

    return _first_segment(parts.path)


def slug_of(organization_url: str) -> str:
    """
    Derive the organization slug from an organization URL.

    Returns:
        The slug, or ``""`` when none can be found or the URL does not parse
    """
    try:
        return _slug_from_parts(_parse(organization_url))
    except ValueError:
        return ""


def _salvage_slug(organization_url: str) -> str:
    """Best-effort slug for URLs that do not parse as absolute URLs."""
    text = organization_url.strip()

    match = _SALVAGE_MULTI_TENANT.search(text)
    if match:
        return unquote(match.group(1))

    match = _SALVAGE_SINGLE_TENANT.search(text)
    if match:
        return match.group(1)

    segments = [segment for segment in _SCHEME_PREFIX.sub("", text).split("/") if segment]
    if len(segments) >= 2:
        return unquote(segments[1])
    if len(segments) == 1 and "." not in segments[0]:
        # A bare organization name.
        return unquote(segments[0])
    return ""


def _multi_tenant_https(slug: str, project: str, repo: str) -> str:
    slug = encode_path_segment(slug)
    return f"https://{slug}@{MULTI_TENANT_HOST}/{slug}/{project}/_git/{repo}"


def _ssh(slug: str, project: str, repo: str) -> str:
    return f"git@{SSH_HOST}:v3/{encode_path_segment(slug)}/{project}/{repo}"


def build_clone_url(
    kind: CloneKind | str,
    organization_url: str,
    project_name: str,
    repo_name: str,
) -> str:
    """
    Build a canonical clone URL for a repository.

    Args:
        kind: ``"https"`` or ``"ssh"``
        organization_url: The organization URL the credentials were saved with
        project_name: Project name as returned by the API
        repo_name: Repository name as returned by the API

    Returns:
        The clone URL; never raises for malformed organization URLs

    Raises:
        ValidationError: If ``kind`` is not a known clone kind
    """
    kind = CloneKind.coerce(kind)
    project = encode_path_segment(project_name)
    repo = encode_path_segment(repo_name)

    try:
        parts = _parse(organization_url)
        host = (parts.hostname or "").lower()
        slug = _slug_from_parts(parts)
        if kind is CloneKind.SSH:
            return _ssh(slug, project, repo)
        if _SINGLE_TENANT_HOST.match(host):
            return f"https://{host}/{project}/_git/{repo}"
        return _multi_tenant_https(slug, project, repo)
    except ValueError as e:
        logger.debug("Falling back to default clone URL templates: %s", e)

    slug = _salvage_slug(organization_url)
    if kind is CloneKind.SSH:
        return _ssh(slug, project, repo)
    return _multi_tenant_https(slug, project, repo)


def build_clone_command(
    kind: CloneKind | str,
    organization_url: str,
    project_name: str,
    repo_name: str,
) -> str:
    """Build the ``git clone <url>`` command placed on the clipboard."""
    return f"git clone {build_clone_url(kind, organization_url, project_name, repo_name)}"
