"""
Subscription source client.

Fetches subscription payloads over HTTP(S) or reads them from local
files. Library exceptions are mapped onto ErrorKind so callers never
inspect requests internals.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .models import ErrorKind, Origin, RawPayload

logger = logging.getLogger(__name__)


class AcquisitionError(Exception):
    """Raised when a source cannot be fetched or read."""

    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def is_url(source: str) -> bool:
    """Check if a source identifier looks like a URL (scheme and host)."""
    try:
        parts = urlsplit(source)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


class SourceClient:
    """
    Client for subscription sources.

    Handles:
    - User-Agent selection
    - Optional HTTP/SOCKS proxy
    - Connect/read timeouts
    - Optional retries for transient HTTP failures

    Usage:
        with SourceClient(user_agent="curl/8.5.0", timeout=(10, 15)) as client:
            payload = client.acquire("https://example.com/sub")
    """

    def __init__(
        self,
        user_agent: str,
        proxy: Optional[str] = None,
        timeout: tuple[float, float] = (10.0, 15.0),
        max_retries: int = 0,
    ):
        """
        Initialize source client.

        Args:
            user_agent: User-Agent header value
            proxy: Proxy URL applied to both http and https (never logged)
            timeout: (connect, read) timeout in seconds
            max_retries: Retry attempts for 429/5xx responses
        """
        self.timeout = timeout
        self._proxy = proxy

        self._session = requests.Session()

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

        self._session.headers.update({"User-Agent": user_agent})

        if proxy:
            self._session.proxies.update({"http": proxy, "https": proxy})
            # Explicit proxy wins over *_PROXY environment variables
            self._session.trust_env = False

        logger.debug(f"Source client initialized (proxy: {'yes' if proxy else 'no'})")

    def __repr__(self) -> str:
        return f"SourceClient(timeout={self.timeout}, proxy={'set' if self._proxy else None})"

    def fetch(self, url: str) -> RawPayload:
        """
        Fetch a remote subscription.

        Args:
            url: Subscription URL

        Returns:
            RawPayload tagged as REMOTE

        Raises:
            AcquisitionError: On timeout, connection failure, bad URL or
                non-success status
        """
        logger.debug(f"Fetching {url}")

        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            reason = e.response.reason if e.response is not None else ""
            raise AcquisitionError(
                ErrorKind.HTTP_STATUS,
                f"HTTP error: {status} {reason}".rstrip(),
                status_code=status,
            ) from e

        except (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
        ) as e:
            raise AcquisitionError(ErrorKind.INVALID_URL, f"Invalid URL: {e}") from e

        except requests.exceptions.Timeout as e:
            raise AcquisitionError(ErrorKind.TIMEOUT, "Network timeout") from e

        except requests.exceptions.ConnectionError as e:
            raise AcquisitionError(ErrorKind.CONNECTION, f"Connection error: {e}") from e

        except requests.exceptions.RequestException as e:
            raise AcquisitionError(ErrorKind.CONNECTION, f"Request failed: {e}") from e

        logger.debug(f"Fetched {len(response.content)} bytes from {url}")
        return RawPayload.from_bytes(url, Origin.REMOTE, response.content)

    def read_file(self, path: str) -> RawPayload:
        """
        Read a local subscription file.

        Args:
            path: File path

        Returns:
            RawPayload tagged as LOCAL_FILE

        Raises:
            AcquisitionError: NOT_FOUND or IO
        """
        try:
            data = Path(path).read_bytes()
        except FileNotFoundError as e:
            raise AcquisitionError(ErrorKind.NOT_FOUND, f"File not found: {path}") from e
        except OSError as e:
            raise AcquisitionError(ErrorKind.IO, f"Failed to read file: {e}") from e

        logger.debug(f"Read {len(data)} bytes from {path}")
        return RawPayload.from_bytes(path, Origin.LOCAL_FILE, data)

    def acquire(self, source: str) -> RawPayload:
        """
        Fetch or read a source depending on what it looks like.

        Args:
            source: URL or existing file path

        Returns:
            RawPayload

        Raises:
            AcquisitionError: INVALID_SOURCE if source is neither a URL nor
                an existing file, or any fetch/read error
        """
        if is_url(source):
            return self.fetch(source)
        if Path(source).is_file():
            return self.read_file(source)
        raise AcquisitionError(
            ErrorKind.INVALID_SOURCE,
            "Input is neither a valid URL nor an existing file",
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
        logger.debug("Source client session closed")

    def __enter__(self) -> "SourceClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
