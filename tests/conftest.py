"""
Pytest configuration and shared fixtures.

Provides temporary storage, fake source clients and sample payloads.
"""

import pytest
import tempfile
from pathlib import Path
from typing import Generator, Optional

from subsync.source.client import AcquisitionError
from subsync.source.models import ErrorKind, Origin, RawPayload
from subsync.storage.models import EntrySet
from subsync.storage.state_store import StateStore
from subsync.sync.encoding import encode_payload


SAMPLE_URL = "https://sub.example.com/api/v1/client/subscribe?token=abc123"


# ============================================================================
# Fakes
# ============================================================================

class FakeSourceClient:
    """Source client that returns a canned payload or raises."""

    def __init__(
        self,
        text: str = "",
        origin: Origin = Origin.REMOTE,
        error: Optional[AcquisitionError] = None,
    ):
        self.text = text
        self.origin = origin
        self.error = error
        self.calls: list[str] = []

    def acquire(self, source: str) -> RawPayload:
        self.calls.append(source)
        if self.error is not None:
            raise self.error
        return RawPayload(source=source, origin=self.origin, text=self.text)


class RecordingNotifier:
    """Notifier that remembers what it was given."""

    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.messages: list[str] = []

    def notify(self, text: str) -> bool:
        self.messages.append(text)
        if self.error is not None:
            raise self.error
        return self.result


# ============================================================================
# Payload Fixtures
# ============================================================================

@pytest.fixture
def sample_url() -> str:
    """A subscription URL with query parameters."""
    return SAMPLE_URL


@pytest.fixture
def plain_payload() -> str:
    """Plain text subscription with a duplicate and blank lines."""
    return (
        "vmess://eyJhZGQiOiIxLjIuMy40In0=\n"
        "trojan://secret@host.example:443#node-1\n"
        "\n"
        "  ss://YWVzLTI1Ni1nY206cGFzcw@10.0.0.1:8388#node-2  \n"
        "trojan://secret@host.example:443#node-1\n"
    )


@pytest.fixture
def encoded_payload(plain_payload: str) -> str:
    """The plain payload wrapped in URL-safe base64 without padding."""
    return encode_payload(plain_payload).rstrip("=")


@pytest.fixture
def sample_entries() -> EntrySet:
    """A small normalized EntrySet."""
    return EntrySet(("a", "b", "c"))


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def temp_output_dir() -> Generator[Path, None, None]:
    """Create a temporary output directory."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp) / "output"


@pytest.fixture
def state_store(temp_output_dir: Path) -> StateStore:
    """Create a fresh StateStore in a temp directory."""
    return StateStore(temp_output_dir)


# ============================================================================
# Collaborator Fixtures
# ============================================================================

@pytest.fixture
def notifier() -> RecordingNotifier:
    """A notifier that always succeeds."""
    return RecordingNotifier()


@pytest.fixture
def timeout_error() -> AcquisitionError:
    """Acquisition error for a timed-out fetch."""
    return AcquisitionError(ErrorKind.TIMEOUT, "Network timeout")


@pytest.fixture
def make_client():
    """Factory for FakeSourceClient instances."""
    return FakeSourceClient


@pytest.fixture
def make_notifier():
    """Factory for RecordingNotifier instances."""
    return RecordingNotifier
