"""Database health check used by the API health endpoint."""

import time

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from x12_exchange.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Checks connectivity by running `SELECT 1` on a pooled connection."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the engine URL with the password masked."""

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Verify connectivity and report round-trip latency.

        Returns:
            HealthStatus: `ok` status with latency detail.

        Raises:
            ConnectionError: Raised when the query fails.
        """

        started_at = time.perf_counter()
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error
        elapsed_ms = (time.perf_counter() - started_at) * 1000
        return HealthStatus(status="ok", detail=f"database reachable in {elapsed_ms:.1f} ms")
