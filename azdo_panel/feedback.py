"""Single-slot "copied" acknowledgment with a self-cancelling expiry timer."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from azdo_panel.clone_urls import CloneKind

DEFAULT_FEEDBACK_SECONDS = 2.0


@dataclass(frozen=True)
class CopyFeedback:
    """Which repository and URL kind was last copied, and when that expires."""

    repository_id: str
    kind: CloneKind
    expires_at: float  # event loop time


class CopyFeedbackSlot:
    """
    Holds at most one live CopyFeedback.

    Showing new feedback cancels the pending expiry of the previous one, so a
    stale expiry can never clear the newer entry.
    """

    def __init__(
        self,
        duration: float = DEFAULT_FEEDBACK_SECONDS,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.duration = duration
        self._on_change = on_change
        self._current: CopyFeedback | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def current(self) -> CopyFeedback | None:
        return self._current

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def show(self, repository_id: str, kind: CloneKind) -> CopyFeedback:
        """Replace the current feedback and schedule its expiry. Needs a running loop."""
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._current = CopyFeedback(
            repository_id=repository_id,
            kind=kind,
            expires_at=loop.time() + self.duration,
        )
        self._handle = loop.call_later(self.duration, self._expire)
        self._changed()
        return self._current

    def clear(self) -> None:
        had_feedback = self._current is not None
        self._cancel_timer()
        self._current = None
        if had_feedback:
            self._changed()

    def _expire(self) -> None:
        self._handle = None
        self._current = None
        self._changed()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
