"""Persistent state storage module."""

from .state_store import StateStore, StateStoreError, artifact_name
from .models import EntrySet

__all__ = ["StateStore", "StateStoreError", "artifact_name", "EntrySet"]
