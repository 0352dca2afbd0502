from __future__ import annotations

from urllib.parse import quote

import requests

# table descriptor attribute holding the metadata url prefix of the creator
HTABLE_TAG = "KYLIN_HOST"


class HBaseRestAdapter:
    """
    Adapter around the HBase REST gateway for listing and dropping tables.

    The gateway has no enable/disable endpoint: `DELETE /<table>/schema`
    disables the table server-side before deleting it. `is_enabled` therefore
    reports False so callers go straight to `drop`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def _schema_url(self, name: str) -> str:
        return f"{self.base_url}/{quote(name, safe='')}/schema"

    def _get_schema(self, name: str) -> dict | None:
        """Return the table descriptor, or None if the table does not exist."""
        response = self._session.get(
            self._schema_url(name),
            headers={"Accept": "application/json"},
            timeout=self.timeout_seconds,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def list_tables(self, prefix: str) -> list[tuple[str, str | None]]:
        """Return (name, owner tag) for every table whose name starts with prefix."""
        response = self._session.get(
            f"{self.base_url}/",
            headers={"Accept": "application/json"},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        out: list[tuple[str, str | None]] = []
        for t in response.json().get("table") or []:
            name = t.get("name")
            if not name or not name.startswith(prefix):
                continue
            schema = self._get_schema(name)
            if schema is None:
                continue
            # attributes are rendered either bare or with an "@" marker
            owner = schema.get(HTABLE_TAG, schema.get(f"@{HTABLE_TAG}"))
            out.append((name, owner))
        return out

    def table_exists(self, name: str) -> bool:
        return self._get_schema(name) is not None

    def is_enabled(self, name: str) -> bool:
        return False

    def disable(self, name: str) -> None:
        """No-op; see the class docstring."""

    def drop(self, name: str) -> None:
        """Disable and delete a table through the gateway."""
        response = self._session.delete(
            self._schema_url(name), timeout=self.timeout_seconds
        )
        if response.status_code == 404:
            return
        response.raise_for_status()
