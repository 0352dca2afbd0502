"""Application context management for the CLI."""

from dataclasses import dataclass
from typing import Sequence

from storagegc.cli.common.exits import die
from storagegc.core.adapters.dbfs import DbfsFileStore
from storagegc.core.adapters.hbaserest import HBaseRestAdapter
from storagegc.core.adapters.kylinrest import KylinRestMetadataStore
from storagegc.core.adapters.sqlwarehouse import SqlWarehouseStagingClient
from storagegc.core.auth import AuthError, get_workspace_client
from storagegc.core.config import CleanupConfig, load_config
from storagegc.core.columnar import DOMAIN as COLUMNAR
from storagegc.core.errors import ConfigError
from storagegc.core.paths import DOMAIN as FILESYSTEM
from storagegc.core.reconcile import DOMAINS
from storagegc.core.staging import DOMAIN as STAGING


@dataclass
class CleanupAppContext:
    """Configuration plus one adapter per storage backend."""

    profile: str | None
    config: CleanupConfig
    metadata: KylinRestMetadataStore
    columnar_store: HBaseRestAdapter | None = None
    file_store: DbfsFileStore | None = None
    staging_db: SqlWarehouseStagingClient | None = None


def _load_config_or_exit(*required: str) -> CleanupConfig:
    config = load_config()
    try:
        config.require(*required)
    except ConfigError as exc:
        die(str(exc), code=2)
    return config


def _metadata_store(config: CleanupConfig) -> KylinRestMetadataStore:
    return KylinRestMetadataStore(
        config.kylin_api_url,
        user=config.kylin_user,
        password=config.kylin_password,
        timeout_seconds=config.http_timeout_seconds,
    )


def build_snapshot_context(profile: str | None) -> CleanupAppContext:
    """Build a context that can only read metadata."""
    config = _load_config_or_exit("kylin_api_url")
    return CleanupAppContext(
        profile=profile, config=config, metadata=_metadata_store(config)
    )


def build_cleanup_context(
    profile: str | None,
    *,
    delete: bool = False,
    domains: Sequence[str] = DOMAINS,
) -> CleanupAppContext:
    """Build the metadata store plus the adapters the selected domains need.

    Args:
        profile: Optional Databricks profile name for DBFS and SQL access.
        delete: Whether the run will delete (a SQL warehouse is then required
            for the staging domain).
        domains: Domains the run will process. Databricks is only contacted
            for staging or filesystem; HBase only for columnar.

    Returns:
        CleanupAppContext: Context with configured adapters.
    """
    uses_databricks = STAGING in domains or FILESYSTEM in domains
    required = ["kylin_api_url"]
    if COLUMNAR in domains:
        required.append("hbase_rest_url")
    if delete and STAGING in domains:
        required.append("warehouse_id")
    config = _load_config_or_exit(*required)

    appctx = CleanupAppContext(
        profile=profile, config=config, metadata=_metadata_store(config)
    )
    if COLUMNAR in domains:
        appctx.columnar_store = HBaseRestAdapter(
            config.hbase_rest_url, timeout_seconds=config.http_timeout_seconds
        )
    if not uses_databricks:
        return appctx

    try:
        client = get_workspace_client(profile)
    except AuthError as exc:
        die(str(exc), code=1)

    appctx.file_store = DbfsFileStore(client)
    if STAGING in domains:
        try:
            appctx.staging_db = SqlWarehouseStagingClient(
                client, config.staging_database, warehouse_id=config.warehouse_id
            )
        except ValueError as exc:
            die(str(exc), code=2)
    return appctx
