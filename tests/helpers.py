"""Shared test helpers for dbschema tests."""

from typing import Optional
from unittest.mock import MagicMock

from dbschema.config import Config
from dbschema.schema.column import Column
from dbschema.schema.introspect import AbstractSchemaManager
from dbschema.schema.schema import Schema
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table


class FakeRow:
    """Mock row from a client's fetchall().

    Supports dict-like access via __getitem__, .get(), .items() and .asDict().
    """

    def __init__(self, data: dict):
        self._data = data

    def __getitem__(self, key):
        return self._data[key]

    def __contains__(self, key):
        return key in self._data

    def get(self, key, default=None):
        return self._data.get(key, default)

    def items(self):
        return self._data.items()

    def asDict(self):
        return self._data


class FakeSchemaManager(AbstractSchemaManager):
    """Schema manager reading the rows produced by build_db_state_from_schema()."""

    def _get_portable_table_column_definition(self, row) -> Column:
        comment = row.get("comment")
        type_name = self.extract_type_from_comment(comment, row.get("data_type"))
        comment = self.remove_type_from_comment(comment, type_name) or None
        return Column(
            row.get("column_name"),
            type_name,
            {
                "notnull": row.get("is_nullable") == "NO",
                "default": row.get("column_default"),
                "length": row.get("character_maximum_length"),
                "precision": row.get("numeric_precision"),
                "scale": row.get("numeric_scale"),
                "fixed": row.get("fixed", False),
                "unsigned": row.get("unsigned", False),
                "autoincrement": row.get("autoincrement", False),
                "comment": comment,
            },
        )

    def _get_portable_sequence_definition(self, row) -> Sequence:
        return Sequence(
            row.get("sequence_name"),
            row.get("allocation_size"),
            row.get("initial_value"),
            row.get("cache_size"),
        )


def make_test_config(
    platform: str = "postgresql",
    schema_name: Optional[str] = None,
) -> Config:
    """Create a Config for tests with sensible defaults."""
    return Config(platform=platform, schema_name=schema_name)


def make_users_table() -> Table:
    """A users table with an autoincrement key and a unique email index."""
    table = Table("users")
    table.add_column("id", "integer", autoincrement=True)
    table.add_column("email", "string", length=180)
    table.add_column("display_name", "string", notnull=False)
    table.set_primary_key(["id"])
    table.add_unique_index(["email"], "uniq_users_email")
    return table


def make_orders_table() -> Table:
    """An orders table referencing users."""
    table = Table("orders")
    table.add_column("id", "bigint", autoincrement=True)
    table.add_column("user_id", "integer")
    table.add_column("status", "string", length=20, default="pending")
    table.set_primary_key(["id"])
    table.add_foreign_key_constraint(
        "users", ["user_id"], ["id"], {"onDelete": "CASCADE"}, "fk_orders_user"
    )
    return table


def make_sample_schema() -> Schema:
    """Schema with users and orders."""
    return Schema([make_users_table(), make_orders_table()])


def _table_key(sql_lower: str, data: dict[str, list[dict]]) -> Optional[str]:
    for table_name in data:
        if f"'{table_name.lower()}'" in sql_lower:
            return table_name
    return None


def make_mock_client(
    tables_data: Optional[list[dict]] = None,
    columns_data: Optional[dict[str, list[dict]]] = None,
    indexes_data: Optional[dict[str, list[dict]]] = None,
    foreign_keys_data: Optional[dict[str, list[dict]]] = None,
    sequences_data: Optional[list[dict]] = None,
    namespaces_data: Optional[list[dict]] = None,
) -> MagicMock:
    """Create a mock client answering the PostgreSQL platform's introspection queries.

    Args:
        tables_data: List of {"table_name": ...} rows
        columns_data: Dict mapping table_name -> list of column rows
        indexes_data: Dict mapping table_name -> list of index rows
        foreign_keys_data: Dict mapping table_name -> list of foreign key rows
        sequences_data: List of sequence rows
        namespaces_data: List of {"schema_name": ...} rows
    """
    client = MagicMock()
    columns_data = columns_data or {}
    indexes_data = indexes_data or {}
    foreign_keys_data = foreign_keys_data or {}

    def rows_for_table(sql_lower: str, data: dict[str, list[dict]]) -> list[FakeRow]:
        table_name = _table_key(sql_lower, data)
        if table_name is None:
            return []
        return [FakeRow(row) for row in data[table_name]]

    def fetchall_side_effect(sql: str):
        sql_lower = sql.lower()

        if "referential_constraints" in sql_lower:
            return rows_for_table(sql_lower, foreign_keys_data)

        if "pg_index" in sql_lower:
            return rows_for_table(sql_lower, indexes_data)

        if "information_schema.columns" in sql_lower:
            return rows_for_table(sql_lower, columns_data)

        if "information_schema.tables" in sql_lower:
            return [FakeRow(t) for t in (tables_data or [])]

        if "information_schema.sequences" in sql_lower:
            return [FakeRow(s) for s in (sequences_data or [])]

        if "information_schema.schemata" in sql_lower:
            return [FakeRow(n) for n in (namespaces_data or [])]

        return []

    client.fetchall.side_effect = fetchall_side_effect
    return client


def build_db_state_from_schema(schema: Schema) -> dict:
    """Build mock DB state data from a Schema object.

    Returns keyword arguments for make_mock_client().
    """
    tables_data = []
    columns_data = {}
    indexes_data = {}
    foreign_keys_data = {}

    for table in schema.get_tables():
        tables_data.append({"table_name": table.name})

        columns_data[table.name] = [
            {
                "column_name": col.name,
                "data_type": col.type.name,
                "is_nullable": "NO" if col.notnull else "YES",
                "column_default": col.default,
                "character_maximum_length": col.length,
                "numeric_precision": col.precision,
                "numeric_scale": col.scale,
                "fixed": col.fixed,
                "unsigned": col.unsigned,
                "autoincrement": col.autoincrement,
                "comment": col.comment,
            }
            for col in table.get_columns()
        ]

        indexes_data[table.name] = [
            {
                "key_name": index.name,
                "column_name": column,
                "non_unique": not index.is_unique,
                "primary": index.is_primary,
                "where": index.options.get("where"),
            }
            for index in table.get_indexes().values()
            for column in index.columns
        ]

        foreign_keys_data[table.name] = [
            {
                "constraint_name": fk.name,
                "local_column": local,
                "foreign_table": fk.foreign_table_name,
                "foreign_column": foreign,
                "on_update": fk.options.get("onUpdate") or "NO ACTION",
                "on_delete": fk.options.get("onDelete") or "NO ACTION",
            }
            for fk in table.get_foreign_keys().values()
            for local, foreign in zip(fk.local_columns, fk.foreign_columns)
        ]

    sequences_data = [
        {
            "sequence_name": sequence.name,
            "allocation_size": sequence.allocation_size,
            "initial_value": sequence.initial_value,
            "cache_size": sequence.cache_size,
        }
        for sequence in schema.get_sequences()
    ]

    return {
        "tables_data": tables_data,
        "columns_data": columns_data,
        "indexes_data": indexes_data,
        "foreign_keys_data": foreign_keys_data,
        "sequences_data": sequences_data,
    }
