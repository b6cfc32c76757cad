"""SMTP session configuration."""

from dataclasses import dataclass, field
from functools import lru_cache
from os import environ
from ssl import SSLContext, create_default_context
from typing import Any, Mapping

from .exceptions import ConfigurationError
from .utils import validate_smtp_config

ENV_PREFIX = "SIMPLEMAIL_SMTP_"


@lru_cache(maxsize=None)
def default_ssl_context() -> SSLContext:
    """Returns the process-wide SSL context used for implicit-TLS sessions.

    Created once on first use and shared by every composer afterwards.
    """
    return create_default_context()


@dataclass(frozen=True)
class SmtpConfig:
    """Immutable connection settings for one SMTP server.

    Credentials switch the session to an authenticated implicit-TLS
    connection (`SMTP_SSL`) on `port`. Without a username the session is a
    plain, unauthenticated SMTP connection.

    Example:
        config = SmtpConfig("smtp.gmail.com", 465, "me@gmail.com", "secret")
        config.auth_enabled  # True
    """

    host: str
    port: int
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    timeout: float | None = None

    def __post_init__(self):
        validate_smtp_config(self.host, self.port, self.timeout)

    @property
    def auth_enabled(self) -> bool:
        return bool(self.username)

    @property
    def ssl_enabled(self) -> bool:
        return self.auth_enabled

    @classmethod
    def from_dict(cls, smtp: Mapping[str, Any]) -> "SmtpConfig":
        """Builds a configuration from a mapping.

        Args:
            smtp (Mapping): SMTP settings with keys:
                - `host` or `server` (str): SMTP server hostname or IP.
                - `port` (int): Port used for the connection.
                - `username` (str, optional): Login name.
                - `password` (str, optional): Login password.
                - `timeout` (float, optional): Socket timeout in seconds.

        Raises:
            ConfigurationError: If the host or port is missing or invalid.
        """
        host = smtp.get("host", smtp.get("server"))
        if host is None or "port" not in smtp:
            raise ConfigurationError("SMTP config requires `host` (or `server`) and `port`.")
        return cls(
            host=host,
            port=smtp["port"],
            username=smtp.get("username"),
            password=smtp.get("password"),
            timeout=smtp.get("timeout"),
        )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX) -> "SmtpConfig":
        """Builds a configuration from `SIMPLEMAIL_SMTP_*` environment variables.

        Reads `HOST`, `PORT`, `USERNAME`, `PASSWORD` and `TIMEOUT` under
        `prefix`. Only host and port are required.

        Raises:
            ConfigurationError: If a required variable is missing or a
                numeric variable cannot be parsed.
        """
        env = environ if env is None else env
        missing = [key for key in ("HOST", "PORT") if not env.get(prefix + key)]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(prefix + key for key in missing)}")

        try:
            port = int(env[prefix + "PORT"])
            timeout = env.get(prefix + "TIMEOUT")
            timeout = float(timeout) if timeout else None
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric SMTP setting: {e}") from e

        return cls(
            host=env[prefix + "HOST"],
            port=port,
            username=env.get(prefix + "USERNAME") or None,
            password=env.get(prefix + "PASSWORD") or None,
            timeout=timeout,
        )
