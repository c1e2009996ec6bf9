import logging
import os
import sys
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DatabaseSettings(BaseSettings):
    """Connection options for the MySQL server."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DATABASE_", extra="ignore"
    )

    host: str = Field("localhost", description="MySQL server host")
    port: int = Field(3306, description="MySQL server port")
    user: str = Field("root", description="Login user")
    password: str = Field("", description="Login password")
    name: Optional[str] = Field(None, description="Default schema selected on connect")
    charset: str = Field("utf8mb4", description="Connection character set")
    timezone: Optional[str] = Field(None, description="Session time zone, e.g. '+00:00' or 'Europe/Berlin'")
    autocommit: bool = Field(True, description="Commit every statement on its own")
    connect_timeout: float = Field(10.0, description="Seconds to wait for the TCP handshake")

    def connect_kwargs(self) -> Dict[str, Any]:
        """Return keyword arguments for ``aiomysql.connect``."""
        kwargs: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "charset": self.charset,
            "autocommit": self.autocommit,
            "connect_timeout": self.connect_timeout,
        }
        if self.name:
            kwargs["db"] = self.name
        return kwargs


class AppSettings(BaseSettings):
    """Top-level settings: log verbosity plus the nested MySQL options."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = Field(False, description="Log every statement the wrapper sends")
    log_level: str = Field("INFO", description="Name of the root log level, e.g. DEBUG or WARNING")

    db: DatabaseSettings = DatabaseSettings()

    @property
    def log_level_value(self) -> int:
        """``log_level`` as a ``logging`` constant; DEBUG whenever ``debug`` is on."""
        if self.debug:
            return logging.DEBUG
        return logging.getLevelName(self.log_level.upper())


def _local_test_server() -> DatabaseSettings:
    # throwaway schema on a local server, sessions pinned to UTC
    return DatabaseSettings(
        host="127.0.0.1",
        user="root",
        password="",
        name="sqlwrap_test",
        timezone="+00:00",
    )


@lru_cache
def get_settings() -> AppSettings:
    """
    Return the process-wide settings, read once from the environment and ``.env``.

    With TEST_MODE set, connection options from the environment are ignored and
    the wrapper targets the ``sqlwrap_test`` schema on 127.0.0.1 with UTC
    sessions and DEBUG statement logging.
    """
    if os.getenv("TEST_MODE"):
        return AppSettings(debug=True, log_level="DEBUG", db=_local_test_server())
    return AppSettings()


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """Route log records to stdout at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level_value,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
