"""Subscription source (HTTP and local file) module."""

from .client import SourceClient, AcquisitionError, is_url
from .models import ErrorKind, Origin, RawPayload

__all__ = ["SourceClient", "AcquisitionError", "is_url", "ErrorKind", "Origin", "RawPayload"]
