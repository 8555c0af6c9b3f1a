"""Synchronize a single database with a target Schema."""

import logging
from typing import Any

from dbschema.schema.comparator import Comparator
from dbschema.schema.introspect import AbstractSchemaManager, SQLClient
from dbschema.schema.schema import Schema, build_drop_sql

__all__ = ["SingleDatabaseSynchronizer"]

logger = logging.getLogger(__name__)


class SingleDatabaseSynchronizer:
    """
    Creates, updates and drops schema objects on one database.

    The ``get_*`` methods only compute SQL; the remaining methods execute it
    through the client, one statement at a time.
    """

    def __init__(self, client: SQLClient, schema_manager: AbstractSchemaManager) -> None:
        self._client = client
        self._schema_manager = schema_manager
        self._platform = schema_manager.platform

    def get_create_schema(self, create_schema: Schema) -> list[str]:
        return create_schema.to_sql(self._platform)

    def get_update_schema(self, to_schema: Schema, no_drops: bool = False) -> list[str]:
        """SQL that moves the live database to to_schema."""
        from_schema = self._schema_manager.create_schema()
        schema_diff = Comparator().compare(from_schema, to_schema)
        if no_drops:
            return schema_diff.to_save_sql(self._platform)
        return schema_diff.to_sql(self._platform)

    def get_drop_schema(self, drop_schema: Schema) -> list[str]:
        """SQL that drops the objects of drop_schema that exist in the database."""
        full_schema = self._schema_manager.create_schema()

        tables = []
        foreign_keys = []
        for table in full_schema.get_tables():
            if not drop_schema.has_table(table.name):
                continue
            tables.append(table)
            for constraint in table.get_foreign_keys().values():
                if drop_schema.has_table(constraint.foreign_table_name):
                    foreign_keys.append((table, constraint))

        sequences = []
        if self._platform.supports_sequences():
            sequences.extend(drop_schema.get_sequences())
            for table in drop_schema.get_tables():
                primary_key = table.get_primary_key()
                if primary_key is None or len(primary_key.columns) > 1:
                    continue
                sequence_name = f"{table.name}_{primary_key.columns[0]}_seq"
                if full_schema.has_sequence(sequence_name):
                    sequences.append(full_schema.get_sequence(sequence_name))

        return build_drop_sql(self._platform, tables, foreign_keys, sequences)

    def get_drop_all_schema(self) -> list[str]:
        """SQL that drops every table and sequence in the database."""
        return self._schema_manager.create_schema().to_drop_sql(self._platform)

    def create_schema(self, create_schema: Schema) -> None:
        self._process_sql(self.get_create_schema(create_schema))

    def update_schema(self, to_schema: Schema, no_drops: bool = False) -> None:
        self._process_sql(self.get_update_schema(to_schema, no_drops))

    def drop_schema(self, drop_schema: Schema) -> None:
        self._process_sql_safely(self.get_drop_schema(drop_schema))

    def drop_all_schema(self) -> None:
        self._process_sql(self.get_drop_all_schema())

    def _execute(self, sql: str) -> Any:
        logger.info(f"Executing: {sql}")
        return self._client.execute(sql)

    def _process_sql(self, statements: list[str]) -> None:
        for sql in statements:
            self._execute(sql)

    def _process_sql_safely(self, statements: list[str]) -> None:
        for sql in statements:
            try:
                self._execute(sql)
            except Exception as e:
                logger.warning(f"Statement failed, continuing: {sql} ({e})")
