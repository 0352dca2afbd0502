"""Databricks authentication for the filesystem and staging adapters.

The workspace client is resolved through the Databricks unified configuration
(a profile in ~/.databrickscfg or DATABRICKS_* environment variables).
"""

import re

from databricks.sdk import WorkspaceClient
from databricks.sdk.core import Config

from storagegc.core.config import sanitize_url


class AuthError(RuntimeError):
    """Raised when the Databricks workspace client cannot be configured."""


def _format_auth_error(message: str, profile: str | None) -> str:
    """Return an actionable message for a failed authentication."""
    if re.search(r"databricks auth login", message):
        cmd = "databricks auth login"
        if profile:
            cmd = f"{cmd} --profile {profile}"
        return (
            "Databricks authentication failed. Your refresh token is invalid.\n"
            f"Re-authenticate with:\n  $ {cmd}"
        )
    return f"Databricks authentication failed: {message}"


def get_workspace_client(profile: str | None = None) -> WorkspaceClient:
    """
    Create a WorkspaceClient for DBFS and SQL warehouse access.

    The host URL is stripped of query strings (e.g. `?o=123`) and trailing
    slashes before the client is built.
    """
    try:
        cfg = Config(profile=profile) if profile else Config()
    except ValueError as exc:
        raise AuthError(_format_auth_error(str(exc), profile)) from exc
    cfg.host = sanitize_url(cfg.host)
    return WorkspaceClient(config=cfg)
