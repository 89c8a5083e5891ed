"""Post-save notification module."""

from .clipboard import ClipboardNotifier, NullNotifier, Notifier

__all__ = ["ClipboardNotifier", "NullNotifier", "Notifier"]
