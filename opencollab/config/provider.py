"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

from dotenv import load_dotenv

# 30 days in seconds
DEFAULT_SESSION_TTL = 30 * 24 * 60 * 60


@dataclass
class RedisConfig:
    """Redis connection configuration."""
    host: str
    port: int
    db: int
    password: Optional[str]
    socket_timeout: float

    @property
    def url(self) -> str:
        """Redis URL without credentials (password is passed separately)."""
        return f"redis://{self.host}:{self.port}/{self.db}"


@dataclass
class SessionConfig:
    """Session lifecycle configuration."""
    ttl_seconds: int
    token_header: str


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_redis_config(self) -> RedisConfig:
        """Get Redis configuration."""
        ...

    def get_session_config(self) -> SessionConfig:
        """Get session configuration."""
        ...

    def get_log_config(self) -> LogConfig:
        """Get logging configuration."""
        ...


def _parse_port(value: str) -> int:
    # Kubernetes service links inject REDIS_PORT as tcp://host:port
    if value.startswith("tcp://"):
        value = value.split(":")[-1]
    return int(value)


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def __init__(self, env_file: Optional[str] = None):
        """
        Args:
            env_file: Optional .env file loaded before reading the environment.
                Variables already set in the environment take precedence.
        """
        if env_file:
            load_dotenv(env_file, override=False)

    def get_redis_config(self) -> RedisConfig:
        """Get Redis configuration from environment variables."""
        return RedisConfig(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=_parse_port(os.getenv("REDIS_PORT", "6379")),
            db=int(os.getenv("REDIS_DB", "0")),
            password=os.getenv("REDIS_PASSWORD") or None,
            socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0")),
        )

    def get_session_config(self) -> SessionConfig:
        """Get session configuration from environment variables."""
        ttl_seconds = int(os.getenv("SESSION_TTL", str(DEFAULT_SESSION_TTL)))
        if ttl_seconds <= 0:
            raise ValueError(f"SESSION_TTL must be a positive number of seconds, got {ttl_seconds}")

        return SessionConfig(
            ttl_seconds=ttl_seconds,
            token_header=os.getenv("SESSION_TOKEN_HEADER", "X-Session-Token"),
        )

    def get_log_config(self) -> LogConfig:
        """Get logging configuration from environment variables."""
        return LogConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
