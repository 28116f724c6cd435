"""
Panel controller.

Owns every piece of panel state (credentials, hierarchy cache, expanded
projects, search query, copy feedback) and exposes it to the presentation
layer, which subscribes for change notifications.
"""

from collections.abc import Callable
from typing import Any

from azdo_panel.client import DevOpsClient
from azdo_panel.clipboard import Clipboard, SystemClipboard
from azdo_panel.clone_urls import CloneKind, build_clone_command
from azdo_panel.config import PanelConfig
from azdo_panel.credentials import CredentialStore, JsonFileStore
from azdo_panel.exceptions import ValidationError
from azdo_panel.feedback import DEFAULT_FEEDBACK_SECONDS, CopyFeedback, CopyFeedbackSlot
from azdo_panel.hierarchy import FetchStrategy, HierarchyCache, strategy_for
from azdo_panel.logging import get_logger, redact_token
from azdo_panel.search import FilteredView, compute_filtered_view
from azdo_panel.types import Credentials, Project, Repository

logger = get_logger("controller")

Listener = Callable[["PanelController"], Any]


class PanelController:
    """
    Connect/disconnect lifecycle, browsing state and clone-command copying
    for one attached Azure DevOps organization.

    Example:
        ```python
        controller = PanelController.from_config(PanelConfig.from_env())
        controller.subscribe(lambda c: render(c.filtered_view, c.expanded))
        await controller.start()
        await controller.connect("https://dev.azure.com/acme", pat)
        controller.set_query("api")
        await controller.copy("ssh", "Platform", "api-gateway", repo_id)
        ```
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        client: DevOpsClient,
        clipboard: Clipboard,
        strategy: FetchStrategy | None = None,
        copy_feedback_seconds: float = DEFAULT_FEEDBACK_SECONDS,
    ) -> None:
        self.credential_store = credential_store
        self.client = client
        self.clipboard = clipboard
        self.cache = HierarchyCache(client, strategy, on_change=self._on_cache_change)
        self._feedback = CopyFeedbackSlot(copy_feedback_seconds, on_change=self._notify)
        self._listeners: list[Listener] = []
        self._started = False
        self._credentials: Credentials | None = None
        self._expanded: set[str] = set()
        self._query = ""
        self._view = FilteredView(query="")

    @classmethod
    def from_config(
        cls, config: PanelConfig, clipboard: Clipboard | None = None
    ) -> "PanelController":
        """Wire the default JSON file store, HTTP client and system clipboard."""
        return cls(
            credential_store=CredentialStore(JsonFileStore(config.state_path)),
            client=DevOpsClient(
                api_version=config.api_version,
                timeout=config.timeout,
                retry_config=config.retry_config,
            ),
            clipboard=clipboard or SystemClipboard(),
            strategy=strategy_for(config.max_concurrent_fetches),
            copy_feedback_seconds=config.copy_feedback_seconds,
        )

    # -- state readers -----------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._credentials is not None

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    @property
    def organization_url(self) -> str | None:
        return self._credentials.organization_url if self._credentials else None

    @property
    def loading(self) -> bool:
        return self.cache.loading

    @property
    def projects(self) -> list[Project]:
        return self.cache.projects

    @property
    def repositories(self) -> dict[str, list[Repository]]:
        return self.cache.repositories

    @property
    def expanded(self) -> frozenset[str]:
        return frozenset(self._expanded)

    @property
    def query(self) -> str:
        return self._query

    @property
    def filtered_view(self) -> FilteredView:
        return self._view

    @property
    def copy_feedback(self) -> CopyFeedback | None:
        return self._feedback.current

    # -- change notification -----------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(controller)`` after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Panel listener %r failed", listener)

    def _recompute_view(self) -> None:
        self._view = compute_filtered_view(
            self._query, self.cache.projects, self.cache.repositories
        )

    def _on_cache_change(self) -> None:
        self._recompute_view()
        self._notify()

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Restore saved credentials once and load the hierarchy if there are any."""
        if self._started:
            return
        self._started = True

        credentials = self.credential_store.load()
        if credentials is None:
            logger.debug("No saved credentials; starting disconnected")
            return

        logger.info("Restored connection to %s", credentials.organization_url)
        self._credentials = credentials
        self._notify()
        await self.cache.refresh(credentials)

    async def connect(self, organization_url: str, access_token: str) -> None:
        """
        Save the credentials and load the organization's hierarchy.

        Raises:
            ValidationError: If either field is blank
        """
        credentials = Credentials(
            organization_url=organization_url.strip(),
            access_token=access_token.strip(),
        )
        if not credentials.is_valid:
            raise ValidationError(
                "MISSING_CREDENTIALS", "Organization URL and access token are both required"
            )

        self.credential_store.save(credentials)
        self._started = True
        self._credentials = credentials
        self._expanded.clear()
        logger.info(
            "Connected to %s (token %s)",
            credentials.organization_url,
            redact_token(credentials.access_token),
        )
        self._notify()
        await self.cache.refresh(credentials)

    async def refresh(self) -> None:
        """Reload projects and repositories for the current connection."""
        if self._credentials is None:
            return
        await self.cache.refresh(self._credentials)

    def disconnect(self) -> None:
        """Forget the credentials and reset all derived state."""
        self.credential_store.clear()
        organization_url = self.organization_url
        self._credentials = None
        self._expanded.clear()
        self._query = ""
        self._feedback.clear()
        self.client.discard_transport()
        # Resets the cache, recomputes the view and notifies.
        self.cache.reset()
        logger.info("Disconnected from %s", organization_url)

    async def close(self) -> None:
        """Cancel the feedback timer and release the HTTP client."""
        self._feedback.clear()
        await self.client.close()

    async def __aenter__(self) -> "PanelController":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # -- browsing ----------------------------------------------------------

    def toggle_expanded(self, project_id: str) -> bool:
        """Expand a collapsed project or collapse an expanded one. Returns the new state."""
        if project_id in self._expanded:
            self._expanded.remove(project_id)
            expanded = False
        else:
            self._expanded.add(project_id)
            expanded = True
        self._notify()
        return expanded

    def is_expanded(self, project_id: str) -> bool:
        return project_id in self._expanded

    def set_query(self, query: str) -> None:
        self._query = query
        self._recompute_view()
        self._notify()

    # -- copying -----------------------------------------------------------

    def clone_command(self, kind: CloneKind | str, project_name: str, repo_name: str) -> str:
        return build_clone_command(kind, self.organization_url or "", project_name, repo_name)

    async def copy(
        self,
        kind: CloneKind | str,
        project_name: str,
        repo_name: str,
        repository_id: str,
    ) -> str:
        """
        Put ``git clone <url>`` on the clipboard and flag the repository as copied.

        Clipboard failures are logged and leave the copy feedback untouched.

        Returns:
            The clone command

        Raises:
            ValidationError: If disconnected or ``kind`` is unknown
        """
        kind = CloneKind.coerce(kind)
        credentials = self._credentials
        if credentials is None:
            raise ValidationError("NOT_CONNECTED", "Connect to an organization before copying")
        command = self.clone_command(kind, project_name, repo_name)

        try:
            await self.clipboard.write_text(command)
        except Exception as e:
            logger.warning("Could not copy clone command for %s: %s", repo_name, e)
            return command

        if self._credentials is not credentials:
            logger.debug("Connection changed while copying %s; not showing feedback", repo_name)
            return command

        self._feedback.show(repository_id, kind)
        return command
