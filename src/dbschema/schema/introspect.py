"""Schema introspection: base class for reading a live database into a Schema.

Vendor managers subclass :class:`AbstractSchemaManager` and implement
``_get_portable_table_column_definition``; everything else works off the
rows returned by the platform's ``get_list_*_sql`` queries.
"""

import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, Union

from dbschema.exceptions import NotSupportedError
from dbschema.schema.asset import AbstractAsset
from dbschema.schema.column import Column
from dbschema.schema.diff import TableDiff
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.index import Index
from dbschema.schema.schema import Schema, SchemaConfig
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table
from dbschema.schema.view import View

if TYPE_CHECKING:
    from dbschema.platforms.base import AbstractPlatform

logger = logging.getLogger(__name__)

_TYPE_COMMENT = re.compile(r"\(DbType:([a-zA-Z0-9_]+)\)")


class SQLClient(Protocol):
    """Protocol for SQL client used by the schema manager."""

    def fetchall(self, sql: str) -> list: ...

    def execute(self, sql: str) -> Any: ...


def _row_get(row: Any, key: str, default: Any = None) -> Any:
    """Get a value from a row by case-insensitive key."""
    if hasattr(row, "asDict"):
        row = row.asDict()
    if hasattr(row, "get"):
        if key in row:
            return row[key]
        for row_key, value in row.items():
            if str(row_key).lower() == key:
                return value
    return default


class AbstractSchemaManager:
    """Read schema objects from a database and run DDL against it."""

    def __init__(
        self,
        client: SQLClient,
        platform: "AbstractPlatform",
        asset_filter: Optional[str] = None,
    ) -> None:
        self._client = client
        self._platform = platform
        self._asset_filter = re.compile(asset_filter) if asset_filter else None

    @property
    def platform(self) -> "AbstractPlatform":
        return self._platform

    def try_method(self, method: Callable[..., Any], *args: Any) -> bool:
        """Call method and report success instead of raising."""
        try:
            method(*args)
        except Exception as e:
            logger.warning(f"{getattr(method, '__name__', method)} failed: {e}")
            return False
        return True

    def filter_asset_names(self, names: list[Union[str, AbstractAsset]]) -> list:
        """Keep the names matching the configured asset filter."""
        if self._asset_filter is None:
            return list(names)
        return [
            name
            for name in names
            if self._asset_filter.search(
                name.name if isinstance(name, AbstractAsset) else name
            )
        ]

    # Listing

    def list_namespace_names(self) -> list[str]:
        rows = self._client.fetchall(self._platform.get_list_namespaces_sql())
        return [self._get_portable_namespace_definition(row) for row in rows]

    def list_table_names(self) -> list[str]:
        rows = self._client.fetchall(self._platform.get_list_tables_sql())
        names = [self._get_portable_table_definition(row) for row in rows]
        return self.filter_asset_names(names)

    def tables_exist(self, table_names: Union[str, list[str]]) -> bool:
        if isinstance(table_names, str):
            table_names = [table_names]
        existing = {name.lower() for name in self.list_table_names()}
        return all(name.lower() in existing for name in table_names)

    def list_tables(self) -> list[Table]:
        return [self.list_table_details(name) for name in self.list_table_names()]

    def list_table_details(self, table_name: str) -> Table:
        """Build a Table with its columns, indexes and foreign keys."""
        columns = self.list_table_columns(table_name)
        foreign_keys = []
        if self._platform.supports_foreign_key_constraints():
            foreign_keys = self.list_table_foreign_keys(table_name)
        indexes = self.list_table_indexes(table_name)
        return Table(table_name, columns.values(), indexes.values(), foreign_keys)

    def list_table_columns(self, table_name: str) -> dict[str, Column]:
        rows = self._client.fetchall(self._platform.get_list_table_columns_sql(table_name))
        columns: dict[str, Column] = {}
        for row in rows:
            column = self._get_portable_table_column_definition(row)
            if column is not None:
                columns[column.get_quoted_name(self._platform).lower()] = column
        return columns

    def list_table_indexes(self, table_name: str) -> dict[str, Index]:
        rows = self._client.fetchall(self._platform.get_list_table_indexes_sql(table_name))
        return self._get_portable_table_indexes_list(rows, table_name)

    def list_table_foreign_keys(self, table_name: str) -> list[ForeignKeyConstraint]:
        rows = self._client.fetchall(
            self._platform.get_list_table_foreign_keys_sql(table_name)
        )
        return self._get_portable_table_foreign_keys_list(rows)

    def list_sequences(self) -> list[Sequence]:
        rows = self._client.fetchall(self._platform.get_list_sequences_sql())
        sequences = [self._get_portable_sequence_definition(row) for row in rows]
        return self.filter_asset_names(sequences)

    def list_views(self) -> dict[str, View]:
        rows = self._client.fetchall(self._platform.get_list_views_sql())
        views: dict[str, View] = {}
        for row in rows:
            view = self._get_portable_view_definition(row)
            if view is not None:
                views[view.name.lower()] = view
        return views

    # Schema building

    def create_schema_config(self) -> SchemaConfig:
        config = SchemaConfig(
            max_identifier_length=self._platform.get_max_identifier_length()
        )
        search_paths = self.get_schema_search_paths()
        if search_paths:
            config.name = search_paths[0]
        return config

    def get_schema_search_paths(self) -> list[str]:
        return []

    def create_schema(self) -> Schema:
        """Read the whole database into a Schema."""
        namespaces = []
        if self._platform.supports_schemas():
            namespaces = self.list_namespace_names()
        sequences = []
        if self._platform.supports_sequences():
            sequences = self.list_sequences()
        tables = self.list_tables()
        return Schema(tables, sequences, self.create_schema_config(), namespaces)

    # DDL

    def _exec_sql(self, sql: Union[str, list[str]]) -> None:
        for statement in [sql] if isinstance(sql, str) else sql:
            self._client.execute(statement)

    def create_table(self, table: Table) -> None:
        self._exec_sql(self._platform.render_create_table(table, create_foreign_keys=True))

    def drop_table(self, table: Union[Table, str]) -> None:
        self._exec_sql(self._platform.render_drop_table(table))

    def create_sequence(self, sequence: Sequence) -> None:
        self._exec_sql(self._platform.render_create_sequence(sequence))

    def drop_sequence(self, sequence: Union[Sequence, str]) -> None:
        self._exec_sql(self._platform.render_drop_sequence(sequence))

    def create_index(self, index: Index, table: Union[Table, str]) -> None:
        self._exec_sql(self._platform.render_create_index(index, table))

    def drop_index(self, index: Index, table: Union[Table, str]) -> None:
        self._exec_sql(self._platform.render_drop_index(index, table))

    def create_foreign_key(
        self, constraint: ForeignKeyConstraint, table: Union[Table, str]
    ) -> None:
        self._exec_sql(self._platform.render_create_foreign_key(constraint, table))

    def drop_foreign_key(
        self, constraint: ForeignKeyConstraint, table: Union[Table, str]
    ) -> None:
        self._exec_sql(self._platform.render_drop_foreign_key(constraint, table))

    def alter_table(self, table_diff: TableDiff) -> None:
        self._exec_sql(self._platform.render_alter_table(table_diff))

    def rename_table(self, name: str, new_name: str) -> None:
        self.alter_table(TableDiff(name, new_name=new_name))

    # Portable definitions

    def _get_portable_namespace_definition(self, row: Any) -> str:
        return _row_get(row, "schema_name")

    def _get_portable_table_definition(self, row: Any) -> str:
        return _row_get(row, "table_name")

    def _get_portable_table_column_definition(self, row: Any) -> Optional[Column]:
        raise NotSupportedError("Portable column definitions", self._platform.name)

    def _get_portable_table_indexes_list(
        self, rows: list, table_name: Optional[str] = None
    ) -> dict[str, Index]:
        """Group one-row-per-column index rows into Index objects."""
        grouped: dict[str, dict[str, Any]] = {}
        for row in rows:
            index_name = _row_get(row, "key_name")
            primary = bool(_row_get(row, "primary"))
            key = "primary" if primary else str(index_name).lower()
            if key not in grouped:
                options = {}
                if _row_get(row, "where") is not None:
                    options["where"] = _row_get(row, "where")
                grouped[key] = {
                    "name": index_name,
                    "columns": [],
                    "unique": not _row_get(row, "non_unique"),
                    "primary": primary,
                    "flags": _row_get(row, "flags") or [],
                    "options": options,
                    "lengths": [],
                }
            grouped[key]["columns"].append(_row_get(row, "column_name"))
            grouped[key]["lengths"].append(_row_get(row, "sub_part"))

        indexes: dict[str, Index] = {}
        for key, data in grouped.items():
            if any(length is not None for length in data["lengths"]):
                data["options"]["lengths"] = data["lengths"]
            indexes[key] = Index(
                data["name"],
                data["columns"],
                data["unique"],
                data["primary"],
                data["flags"],
                data["options"],
            )
        return indexes

    def _get_portable_table_foreign_keys_list(
        self, rows: list
    ) -> list[ForeignKeyConstraint]:
        """Group one-row-per-column foreign key rows into constraints."""
        grouped: dict[str, dict[str, Any]] = {}
        for row in rows:
            name = _row_get(row, "constraint_name")
            if name not in grouped:
                grouped[name] = {
                    "local": [],
                    "foreign_table": _row_get(row, "foreign_table"),
                    "foreign": [],
                    "options": {
                        "onUpdate": _row_get(row, "on_update"),
                        "onDelete": _row_get(row, "on_delete"),
                    },
                }
            grouped[name]["local"].append(_row_get(row, "local_column"))
            grouped[name]["foreign"].append(_row_get(row, "foreign_column"))

        return [
            ForeignKeyConstraint(
                data["local"], data["foreign_table"], data["foreign"], name, data["options"]
            )
            for name, data in grouped.items()
        ]

    def _get_portable_sequence_definition(self, row: Any) -> Sequence:
        raise NotSupportedError("Sequences", self._platform.name)

    def _get_portable_view_definition(self, row: Any) -> Optional[View]:
        return None

    # Type comments

    def extract_type_from_comment(
        self, comment: Optional[str], current_type: str
    ) -> str:
        """Return the type named by a ``(DbType:name)`` marker, else current_type."""
        if comment:
            match = _TYPE_COMMENT.search(comment)
            if match:
                return match.group(1)
        return current_type

    def remove_type_from_comment(
        self, comment: Optional[str], type_name: str
    ) -> Optional[str]:
        if comment is None:
            return None
        return comment.replace(f"(DbType:{type_name})", "")
