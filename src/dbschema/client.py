"""DB-API 2 client wrapper."""

from typing import Any


class DBAPIClient:
    """Client for executing SQL over any DB-API 2 connection."""

    def __init__(self, connection: Any):
        self.connection = connection

    def fetchall(self, sql: str) -> list[dict[str, Any]]:
        """Run a query and return results as list of dicts."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def execute(self, sql: str) -> None:
        """Execute a statement and commit."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
        finally:
            cursor.close()
        self.connection.commit()

    def execute_many(self, statements: list[str]) -> None:
        """Execute multiple SQL statements."""
        for stmt in statements:
            self.execute(stmt)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "DBAPIClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
