from __future__ import annotations

import time

from databricks.sdk import WorkspaceClient
from databricks.sdk.errors import DatabricksError
from databricks.sdk.service.sql import StatementState

from storagegc.core.errors import StagingStatementError

_TERMINAL_STATES = {
    StatementState.SUCCEEDED,
    StatementState.FAILED,
    StatementState.CANCELED,
    StatementState.CLOSED,
}


def parse_database(database: str) -> tuple[str, str]:
    """Split `catalog.schema` into (catalog, schema)."""
    parts = database.strip().split(".")
    if len(parts) != 2:
        raise ValueError("Staging database must be in the form `catalog.schema`.")
    catalog, schema = parts
    if not catalog or not schema:
        raise ValueError("Staging database must be in the form `catalog.schema`.")
    return catalog, schema


class SqlWarehouseStagingClient:
    """Adapter around Databricks SDK table listing and SQL statement execution."""

    def __init__(
        self,
        client: WorkspaceClient,
        database: str,
        *,
        warehouse_id: str | None = None,
        poll_interval: float = 2.0,
    ) -> None:
        self.client = client
        self.catalog, self.schema = parse_database(database)
        self.warehouse_id = warehouse_id
        self.poll_interval = poll_interval

    def list_tables(self, database: str) -> list[str]:
        """List table names in `catalog.schema`."""
        catalog, schema = parse_database(database)
        out: list[str] = []
        for t in self.client.tables.list(catalog_name=catalog, schema_name=schema):
            name = getattr(t, "name", None)
            if not name and getattr(t, "full_name", None):
                name = t.full_name.split(".")[-1]
            if name:
                out.append(name)
        return out

    def _wait(self, response):
        """Poll a statement until it reaches a terminal state."""
        while response.status and response.status.state not in _TERMINAL_STATES:
            time.sleep(self.poll_interval)
            response = self.client.statement_execution.get_statement(
                response.statement_id
            )
        return response

    def execute_statement(self, statement: str) -> None:
        """Run one statement on the warehouse and wait for it to finish."""
        if not self.warehouse_id:
            raise StagingStatementError(
                "No SQL warehouse configured (STORAGEGC_WAREHOUSE_ID)."
            )
        try:
            response = self.client.statement_execution.execute_statement(
                statement=statement,
                warehouse_id=self.warehouse_id,
                catalog=self.catalog,
                schema=self.schema,
                wait_timeout="30s",
            )
            response = self._wait(response)
        except DatabricksError as exc:
            raise StagingStatementError(f"{statement!r} failed: {exc}") from exc

        state = response.status.state if response.status else None
        if state != StatementState.SUCCEEDED:
            error = getattr(response.status, "error", None)
            message = getattr(error, "message", None) or str(state)
            raise StagingStatementError(f"{statement!r} failed: {message}")

    def execute_batch(self, statements: list[str]) -> None:
        """Run statements in order, stopping at the first failure."""
        for statement in statements:
            self.execute_statement(statement)
