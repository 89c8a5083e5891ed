"""Fetch-normalize-diff pipeline module."""

from .diff import DiffResult, ChangeType, compute_diff
from .encoding import decode_payload, encode_payload
from .normalize import normalize

__all__ = [
    "DiffResult",
    "ChangeType",
    "compute_diff",
    "decode_payload",
    "encode_payload",
    "normalize",
]
