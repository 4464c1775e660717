"""Service configuration for PumaGPT."""

from dataclasses import dataclass
from urllib.parse import urlparse


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class ServerConfig:
    """Immutable configuration shared by the indexer, the query path and the server.

    Build it once with ``ServerConfig.from_env()`` at startup and pass it to every
    component. ``validate()`` runs on construction, so a ``ServerConfig`` that
    exists is always complete.
    """

    # Required
    QDRANT_URL: str
    QDRANT_API_KEY: str
    OPENAI_SECRET_KEY: str
    CONTACT_EMAIL: str

    # Model provider
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    CHAT_MODEL: str = "gpt-3.5-turbo"
    EMBEDDING_MODEL: str = "text-embedding-ada-002"

    # Server configuration
    DEFAULT_HOST: str = "127.0.0.1"  # Use 0.0.0.0 to listen on all interfaces
    DEFAULT_PORT: int = 8000

    # Backend timeout settings (in seconds)
    BACKEND_CONNECT_TIMEOUT: int = 10
    BACKEND_READ_TIMEOUT: int = 300

    # Debug logging
    DEBUG_LOG: bool = False
    DEBUG_LOG_FILE: str = "pumagpt_debug.log"
    DEBUG_LOG_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB
    DEBUG_LOG_BACKUP_COUNT: int = 5

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check required values, raising a single ConfigError listing every problem."""
        problems = []

        for name in ("QDRANT_URL", "QDRANT_API_KEY", "OPENAI_SECRET_KEY", "CONTACT_EMAIL"):
            if not getattr(self, name):
                problems.append(f"Must set {name} environment variable")

        for name in ("QDRANT_URL", "OPENAI_BASE_URL"):
            value = getattr(self, name)
            if value:
                parsed = urlparse(value)
                if parsed.scheme not in ("http", "https") or not parsed.netloc:
                    problems.append(f"{name} must be an http(s) URL, got {value!r}")

        if self.CONTACT_EMAIL and "@" not in self.CONTACT_EMAIL:
            problems.append(f"CONTACT_EMAIL must be an email address, got {self.CONTACT_EMAIL!r}")

        if problems:
            raise ConfigError("; ".join(problems))

    @property
    def backend_timeout(self) -> tuple[int, int]:
        """(connect, read) timeout tuple for requests."""
        return (self.BACKEND_CONNECT_TIMEOUT, self.BACKEND_READ_TIMEOUT)

    @property
    def qdrant_base_url(self) -> str:
        return self.QDRANT_URL.rstrip("/")

    @property
    def openai_base_url(self) -> str:
        return self.OPENAI_BASE_URL.rstrip("/")

    @classmethod
    def from_env(cls, env_prefix: str = ""):
        """Create config from environment variables with optional prefix.

        Args:
            env_prefix: Prefix for environment variables (e.g., "PUMA_")

        Returns:
            ServerConfig instance populated from environment

        Raises:
            ConfigError: If a required variable is missing or invalid
        """
        import os

        from dotenv import load_dotenv

        load_dotenv()

        # Helper to get env var with prefix
        def get_env(name: str, default):
            # Try with prefix first, then without
            prefixed = os.getenv(f"{env_prefix}{name}", None)
            if prefixed is not None:
                return prefixed
            return os.getenv(name, default)

        try:
            return cls(
                QDRANT_URL=get_env("QDRANT_URL", ""),
                QDRANT_API_KEY=get_env("QDRANT_API_KEY", ""),
                OPENAI_SECRET_KEY=get_env("OPENAI_SECRET_KEY", ""),
                CONTACT_EMAIL=get_env("CONTACT_EMAIL", None) or get_env("NEXT_PUBLIC_CONTACT_EMAIL", ""),
                OPENAI_BASE_URL=get_env("OPENAI_BASE_URL", cls.OPENAI_BASE_URL),
                CHAT_MODEL=get_env("CHAT_MODEL", cls.CHAT_MODEL),
                EMBEDDING_MODEL=get_env("EMBEDDING_MODEL", cls.EMBEDDING_MODEL),
                DEFAULT_HOST=get_env("HOST", cls.DEFAULT_HOST),
                DEFAULT_PORT=int(get_env("PORT", str(cls.DEFAULT_PORT))),
                BACKEND_CONNECT_TIMEOUT=int(get_env("BACKEND_CONNECT_TIMEOUT", str(cls.BACKEND_CONNECT_TIMEOUT))),
                BACKEND_READ_TIMEOUT=int(get_env("BACKEND_READ_TIMEOUT", str(cls.BACKEND_READ_TIMEOUT))),
                DEBUG_LOG=get_env("DEBUG_LOG", "").lower() in ("true", "1", "yes"),
                DEBUG_LOG_FILE=get_env("DEBUG_LOG_FILE", cls.DEBUG_LOG_FILE),
                DEBUG_LOG_MAX_BYTES=int(get_env("DEBUG_LOG_MAX_BYTES", str(cls.DEBUG_LOG_MAX_BYTES))),
                DEBUG_LOG_BACKUP_COUNT=int(get_env("DEBUG_LOG_BACKUP_COUNT", str(cls.DEBUG_LOG_BACKUP_COUNT))),
            )
        except ValueError as e:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(f"Invalid numeric configuration value: {e}") from e
