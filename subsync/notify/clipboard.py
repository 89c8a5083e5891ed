"""
Clipboard notifier.

Copies the updated subscription to the system clipboard after a
successful save. Clipboard access is best-effort: headless machines
often have no clipboard backend at all.
"""

import logging
from typing import Protocol

import pyperclip

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can be told about a freshly saved subscription."""

    def notify(self, text: str) -> bool:
        ...


class ClipboardNotifier:
    """Copy text to the clipboard via pyperclip."""

    def notify(self, text: str) -> bool:
        """
        Copy text to the clipboard.

        Args:
            text: Newline-joined entries

        Returns:
            True if copied, False if the clipboard is unavailable
        """
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            logger.warning(f"Clipboard unavailable: {e}")
            return False

        logger.debug(f"Copied {len(text)} characters to clipboard")
        return True


class NullNotifier:
    """Notifier used when clipboard output is disabled."""

    def notify(self, text: str) -> bool:
        return False
