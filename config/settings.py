"""
Configuration settings with environment variable loading.

Values come from (lowest to highest precedence) built-in defaults,
a .env file, the process environment and command line overrides.
Proxy credentials are never logged or exposed.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger(__name__)


USER_AGENTS: Mapping[str, str] = MappingProxyType({
    "chrome": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0.0.0 Safari/537.36",
    "firefox": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "edge": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Edg/120.0.0.0",
    "curl": "curl/8.5.0",
})

DEFAULT_USER_AGENT = "chrome"

PROXY_SCHEMES = ("http", "https", "socks5", "socks5h")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def mask_url_credentials(url: Optional[str]) -> Optional[str]:
    """Replace the password part of a URL with ***."""
    if not url:
        return url
    parts = urlsplit(url)
    if parts.password is None:
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{parts.username}:***@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


@dataclass(frozen=True)
class FetchConfig:
    """HTTP acquisition configuration."""
    user_agent: str = DEFAULT_USER_AGENT
    proxy: Optional[str] = None
    connect_timeout: float = 10.0
    read_timeout: float = 15.0
    max_retries: int = 0

    def __post_init__(self):
        if self.user_agent not in USER_AGENTS:
            choices = ", ".join(USER_AGENTS)
            raise ConfigurationError(
                f"Unknown user agent '{self.user_agent}' (expected one of: {choices})"
            )
        if self.proxy:
            parts = urlsplit(self.proxy)
            if parts.scheme not in PROXY_SCHEMES or not parts.hostname:
                raise ConfigurationError(
                    f"Invalid proxy URL: {mask_url_credentials(self.proxy)}"
                )
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("SUBSYNC_MAX_RETRIES must not be negative")

    @property
    def user_agent_string(self) -> str:
        """Resolve the selected user agent to its header value."""
        return USER_AGENTS[self.user_agent]

    @property
    def timeout(self) -> tuple[float, float]:
        """(connect, read) timeout pair as accepted by requests."""
        return (self.connect_timeout, self.read_timeout)

    def __repr__(self) -> str:
        """Never expose proxy credentials in repr."""
        return (
            f"FetchConfig(user_agent='{self.user_agent}', "
            f"proxy={mask_url_credentials(self.proxy)!r}, "
            f"timeout={self.timeout}, max_retries={self.max_retries})"
        )


@dataclass(frozen=True)
class StorageConfig:
    """Artifact storage configuration."""
    output_dir: Path = field(default_factory=lambda: Path("output"))
    extension: str = ".txt"

    def __post_init__(self):
        object.__setattr__(self, 'output_dir', Path(self.output_dir))
        if not self.extension.startswith("."):
            object.__setattr__(self, 'extension', f".{self.extension}")


@dataclass(frozen=True)
class SyncConfig:
    """Pipeline behaviour switches."""
    dry_run: bool = False
    allow_empty: bool = False
    decode_local_files: bool = False
    clipboard: bool = True


@dataclass(frozen=True)
class Settings:
    """
    Application settings container.

    Built by load_settings(); every section is immutable.
    """
    fetch: FetchConfig
    storage: StorageConfig
    sync: SyncConfig
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"Settings(\n"
            f"  fetch={self.fetch},\n"
            f"  storage={self.storage},\n"
            f"  sync={self.sync}\n"
            f")"
        )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(
    env_file: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Settings:
    """
    Load settings from environment variables.

    Optionally loads from a .env file first. Keys in ``overrides`` that are
    not None replace the environment value; recognised keys are
    user_agent, proxy, output_dir, dry_run, allow_empty and clipboard.

    Args:
        env_file: Optional path to .env file
        overrides: Values taken from the command line

    Returns:
        Configured Settings instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    # Load .env file if provided
    if env_file and env_file.exists():
        _load_env_file(env_file)
    elif env_file:
        raise ConfigurationError(f"Env file not found: {env_file}")
    elif Path(".env").exists():
        _load_env_file(Path(".env"))

    cli = {k: v for k, v in (overrides or {}).items() if v is not None}

    try:
        fetch = FetchConfig(
            user_agent=cli.get(
                "user_agent", os.getenv("SUBSYNC_USER_AGENT", DEFAULT_USER_AGENT)
            ).lower(),
            proxy=cli.get("proxy", os.getenv("SUBSYNC_PROXY")) or None,
            connect_timeout=float(os.getenv("SUBSYNC_CONNECT_TIMEOUT", "10")),
            read_timeout=float(os.getenv("SUBSYNC_READ_TIMEOUT", "15")),
            max_retries=int(os.getenv("SUBSYNC_MAX_RETRIES", "0")),
        )

        storage = StorageConfig(
            output_dir=Path(cli.get("output_dir", os.getenv("SUBSYNC_OUTPUT_DIR", "output"))),
            extension=os.getenv("SUBSYNC_EXTENSION", ".txt"),
        )

        sync = SyncConfig(
            dry_run=cli.get("dry_run") or _env_bool("SUBSYNC_DRY_RUN", False),
            allow_empty=cli.get("allow_empty") or _env_bool("SUBSYNC_ALLOW_EMPTY", False),
            decode_local_files=_env_bool("SUBSYNC_DECODE_LOCAL", False),
            clipboard=cli.get("clipboard", _env_bool("SUBSYNC_CLIPBOARD", True)),
        )

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        settings = Settings(
            fetch=fetch,
            storage=storage,
            sync=sync,
            log_level=log_level,
        )

        logger.debug(f"Settings: {settings}")

        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e


ENV_PREFIX = "SUBSYNC_"

_EXTRA_ENV_KEYS = frozenset({"LOG_LEVEL"})


def _parse_env_line(line: str) -> Optional[tuple[str, str]]:
    """Split one .env line into (key, value); None if there is no assignment."""
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    elif " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


def _load_env_file(path: Path) -> None:
    """
    Export SUBSYNC_* settings from a .env file.

    Accepts ``KEY=value``, ``export KEY=value``, quoted values and
    trailing `` # comments`` on unquoted values. Keys outside the
    SUBSYNC_ namespace (other than LOG_LEVEL) are skipped with a
    warning so a stray .env from another tool cannot leak into the
    process environment. Variables already set in the environment win.
    """
    logger.debug(f"Loading environment from {path}")

    text = path.read_text(encoding="utf-8-sig")
    for line_num, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parsed = _parse_env_line(line)
        if parsed is None:
            logger.warning(f"{path}:{line_num}: expected SUBSYNC_NAME=value, skipped")
            continue

        key, value = parsed
        if not key.startswith(ENV_PREFIX) and key not in _EXTRA_ENV_KEYS:
            logger.warning(f"{path}:{line_num}: ignoring unknown setting {key}")
            continue

        os.environ.setdefault(key, value)
