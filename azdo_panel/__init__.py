"""azdo-panel - Azure DevOps organization browser core."""

from azdo_panel.client import DevOpsClient
from azdo_panel.clipboard import Clipboard, MemoryClipboard, SystemClipboard
from azdo_panel.clone_urls import CloneKind, build_clone_command, build_clone_url, slug_of
from azdo_panel.config import PanelConfig
from azdo_panel.controller import PanelController
from azdo_panel.credentials import CredentialStore, JsonFileStore, KeyValueStore, MemoryStore
from azdo_panel.exceptions import (
    AuthenticationError,
    AuthorizationError,
    AzureDevOpsError,
    ClipboardError,
    ConfigurationError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from azdo_panel.feedback import CopyFeedback
from azdo_panel.hierarchy import (
    BoundedFetchStrategy,
    FetchStrategy,
    HierarchyCache,
    SequentialFetchStrategy,
)
from azdo_panel.logging import configure_logging, get_logger
from azdo_panel.search import FilteredView, compute_filtered_view
from azdo_panel.transport import AsyncHTTPTransport, RetryConfig
from azdo_panel.types import Credentials, Project, Repository

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Controller
    "PanelController",
    "PanelConfig",
    # Client
    "DevOpsClient",
    "AsyncHTTPTransport",
    "RetryConfig",
    # Hierarchy
    "HierarchyCache",
    "FetchStrategy",
    "SequentialFetchStrategy",
    "BoundedFetchStrategy",
    # Search
    "FilteredView",
    "compute_filtered_view",
    # Clone URLs
    "CloneKind",
    "slug_of",
    "build_clone_url",
    "build_clone_command",
    "CopyFeedback",
    # Storage
    "CredentialStore",
    "KeyValueStore",
    "JsonFileStore",
    "MemoryStore",
    # Clipboard
    "Clipboard",
    "SystemClipboard",
    "MemoryClipboard",
    # Types
    "Credentials",
    "Project",
    "Repository",
    # Exceptions
    "AzureDevOpsError",
    "ConfigurationError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "ClipboardError",
    # Logging
    "configure_logging",
    "get_logger",
]
