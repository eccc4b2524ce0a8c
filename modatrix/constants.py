"""
Loads filter configuration from environment variables and `.env` files.

By default, the values defined in the classes are used, these can be overridden by an env var with the same name.

`.env` and `.env.server` files are used to populate env vars, if present.
"""
from pydantic_settings import BaseSettings


class EnvConfig(
    BaseSettings,
    env_file=(".env.server", ".env"),
    env_file_encoding = "utf-8",
    env_nested_delimiter = "__",
    extra="ignore",
):
    """Our default configuration for models that should load from .env files."""


class _Miscellaneous(EnvConfig):
    debug: bool = False
    file_logs: bool = False
    log_dir: str = "logs"


Miscellaneous = _Miscellaneous()


FILE_LOGS = Miscellaneous.file_logs
DEBUG_MODE = Miscellaneous.debug


class _App(EnvConfig, env_prefix="app_"):

    sentry_dsn: str = ""
    trace_loggers: str = ""


App = _App()


class _Filter(EnvConfig, env_prefix="filter_"):

    # Seconds a user has to wait between two accepted messages.
    per_user_window: float = 2.0
    # Seconds the same normalized content stays suppressed.
    dedup_ttl: float = 180.0
    config_path: str = "chat-filter-cfg.json"


Filter = _Filter()


class _Replay(EnvConfig, env_prefix="replay_"):

    path: str = "test-data.txt"


Replay = _Replay()
