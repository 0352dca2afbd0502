from __future__ import annotations

from databricks.sdk import WorkspaceClient
from databricks.sdk.errors import NotFound


def _api_path(path: str) -> str:
    """Strip the `dbfs:` scheme; the DBFS API takes absolute paths."""
    if path.startswith("dbfs:"):
        path = path[len("dbfs:") :]
    return path or "/"


class DbfsFileStore:
    """Adapter around the Databricks SDK DBFS APIs (job working directories)."""

    def __init__(self, client: WorkspaceClient) -> None:
        self.client = client

    def list_children(self, root: str) -> list[str]:
        """Return the names of the immediate children of root."""
        names: list[str] = []
        try:
            entries = list(self.client.dbfs.list(_api_path(root)))
        except NotFound:
            # working dir is created lazily by the first build job
            return names
        for f in entries:
            path = getattr(f, "path", None)
            if not path:
                continue
            names.append(path.rstrip("/").rsplit("/", 1)[-1])
        return names

    def exists(self, path: str) -> bool:
        try:
            self.client.dbfs.get_status(_api_path(path))
        except NotFound:
            return False
        return True

    def delete(self, path: str, recursive: bool = True) -> None:
        """Delete a file or directory."""
        self.client.dbfs.delete(_api_path(path), recursive=recursive)
