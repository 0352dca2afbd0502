"""Environment-driven configuration for storage cleanup.

All deployment-specific values (endpoints, working directory, staging database
and the deployment identity used to recognise our own columnar tables) are read
from `STORAGEGC_*` environment variables into a frozen CleanupConfig, which is
then passed explicitly to the cleanup passes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from storagegc.core.errors import ConfigError

ENV_PREFIX = "STORAGEGC_"

DEFAULT_METADATA_URL_PREFIX = "kylin_metadata"
DEFAULT_WORKING_DIR = "/kylin/kylin_metadata"
DEFAULT_STAGING_DATABASE = "hive_metastore.default"
DEFAULT_DELETE_TIMEOUT_MINUTES = 10
DEFAULT_HTTP_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class CleanupConfig:
    """Resolved settings for one cleanup invocation."""

    kylin_api_url: str | None = None
    kylin_user: str = "ADMIN"
    kylin_password: str = "KYLIN"
    hbase_rest_url: str | None = None
    metadata_url_prefix: str = DEFAULT_METADATA_URL_PREFIX
    working_dir: str = DEFAULT_WORKING_DIR
    staging_database: str = DEFAULT_STAGING_DATABASE
    warehouse_id: str | None = None
    delete_timeout_minutes: int = DEFAULT_DELETE_TIMEOUT_MINUTES
    http_timeout_seconds: int = DEFAULT_HTTP_TIMEOUT_SECONDS

    @property
    def delete_timeout_seconds(self) -> float:
        """Per-table deletion ceiling in seconds."""
        return float(self.delete_timeout_minutes * 60)

    def require(self, *names: str) -> None:
        """Raise ConfigError if any of the named settings is empty."""
        missing = [n for n in names if not getattr(self, n)]
        if missing:
            env_names = ", ".join(f"{ENV_PREFIX}{n.upper()}" for n in missing)
            raise ConfigError(f"Missing required configuration: {env_names}")


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    """Return a positive integer env value, falling back to the default."""
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _str_env(env: Mapping[str, str], name: str, default: str | None) -> str | None:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def sanitize_url(url: str | None) -> str | None:
    """Drop query strings and trailing slashes from a base URL."""
    if not url:
        return url
    url = url.split("?", 1)[0]
    return url.rstrip("/")


def load_config(env: Mapping[str, str] | None = None) -> CleanupConfig:
    """Build a CleanupConfig from the environment (or a given mapping)."""
    env = os.environ if env is None else env
    return CleanupConfig(
        kylin_api_url=sanitize_url(_str_env(env, "KYLIN_API_URL", None)),
        kylin_user=_str_env(env, "KYLIN_USER", "ADMIN") or "ADMIN",
        kylin_password=_str_env(env, "KYLIN_PASSWORD", "KYLIN") or "KYLIN",
        hbase_rest_url=sanitize_url(_str_env(env, "HBASE_REST_URL", None)),
        metadata_url_prefix=_str_env(
            env, "METADATA_URL_PREFIX", DEFAULT_METADATA_URL_PREFIX
        )
        or DEFAULT_METADATA_URL_PREFIX,
        working_dir=_str_env(env, "WORKING_DIR", DEFAULT_WORKING_DIR)
        or DEFAULT_WORKING_DIR,
        staging_database=_str_env(env, "STAGING_DATABASE", DEFAULT_STAGING_DATABASE)
        or DEFAULT_STAGING_DATABASE,
        warehouse_id=_str_env(env, "WAREHOUSE_ID", None),
        delete_timeout_minutes=_int_env(
            env, "DELETE_TIMEOUT_MINUTES", DEFAULT_DELETE_TIMEOUT_MINUTES
        ),
        http_timeout_seconds=_int_env(
            env, "HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
    )
