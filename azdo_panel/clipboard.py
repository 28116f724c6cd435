"""
Clipboard access.

The panel only ever writes to the clipboard; nothing is read back.
"""

import asyncio
import shutil
from typing import Protocol

from azdo_panel.exceptions import ClipboardError
from azdo_panel.logging import get_logger

logger = get_logger("clipboard")

# Tried in order; the first one found on PATH is used.
CLIPBOARD_COMMANDS: list[list[str]] = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
]


class Clipboard(Protocol):
    """Write-only clipboard."""

    async def write_text(self, text: str) -> None: ...


class MemoryClipboard:
    """Records writes instead of touching the system clipboard."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.writes: list[str] = []
        self.fail_with = fail_with

    @property
    def text(self) -> str | None:
        return self.writes[-1] if self.writes else None

    async def write_text(self, text: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.writes.append(text)


class SystemClipboard:
    """
    Writes to the desktop clipboard by piping into a platform tool
    (pbcopy, wl-copy, xclip, xsel or clip).
    """

    def __init__(self, commands: list[list[str]] | None = None) -> None:
        self.commands = commands if commands is not None else CLIPBOARD_COMMANDS

    def _find_command(self) -> list[str]:
        for command in self.commands:
            if shutil.which(command[0]):
                return command
        raise ClipboardError(
            "No clipboard tool found (tried: "
            + ", ".join(command[0] for command in self.commands)
            + ")"
        )

    async def write_text(self, text: str) -> None:
        command = self._find_command()
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await process.communicate(text.encode())
        except OSError as e:
            raise ClipboardError(f"{command[0]} could not be started: {e}") from e

        if process.returncode != 0:
            raise ClipboardError(
                f"{command[0]} exited with {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )
        logger.debug("Wrote %d characters with %s", len(text), command[0])
