"""
Acquisition data models.
"""

from dataclasses import dataclass
from enum import Enum


class Origin(Enum):
    """Where a payload came from."""
    REMOTE = "remote"
    LOCAL_FILE = "local-file"


class ErrorKind(Enum):
    """Closed set of acquisition failures."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP_STATUS = "http_status"
    INVALID_URL = "invalid_url"
    NOT_FOUND = "not_found"
    IO = "io"
    INVALID_SOURCE = "invalid_source"


@dataclass(frozen=True)
class RawPayload:
    """
    Text obtained from a source, before encoding detection.

    Attributes:
        source: URL or path the payload was read from
        origin: REMOTE or LOCAL_FILE
        text: Payload decoded as UTF-8
    """
    source: str
    origin: Origin
    text: str

    @property
    def is_remote(self) -> bool:
        return self.origin is Origin.REMOTE

    @classmethod
    def from_bytes(cls, source: str, origin: Origin, data: bytes) -> "RawPayload":
        """Decode raw bytes, dropping a UTF-8 BOM and replacing invalid bytes."""
        return cls(
            source=source,
            origin=origin,
            text=data.decode("utf-8-sig", errors="replace"),
        )

    def __repr__(self) -> str:
        return (
            f"RawPayload(source='{self.source}', origin={self.origin.value}, "
            f"length={len(self.text)})"
        )
