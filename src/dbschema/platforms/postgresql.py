"""PostgreSQL dialect."""

from typing import TYPE_CHECKING, Any, Union

from dbschema.platforms.base import AbstractPlatform, TableRef
from dbschema.schema.asset import trim_quotes

if TYPE_CHECKING:
    from dbschema.schema.index import Index
    from dbschema.schema.sequence import Sequence


class PostgreSQLPlatform(AbstractPlatform):
    name = "postgresql"
    max_identifier_length = 63

    def supports_partial_indexes(self) -> bool:
        return True

    def supports_comment_on_statement(self) -> bool:
        return True

    def get_current_schema_sql(self) -> str:
        return "current_schema()"

    def get_integer_type_declaration_sql(self, column: dict[str, Any]) -> str:
        if column.get("autoincrement"):
            return "SERIAL"
        return "INT"

    def get_smallint_type_declaration_sql(self, column: dict[str, Any]) -> str:
        if column.get("autoincrement"):
            return "SMALLSERIAL"
        return "SMALLINT"

    def get_bigint_type_declaration_sql(self, column: dict[str, Any]) -> str:
        if column.get("autoincrement"):
            return "BIGSERIAL"
        return "BIGINT"

    def get_guid_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "UUID"

    def get_binary_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "BYTEA"

    def get_blob_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "BYTEA"

    def get_datetime_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "TIMESTAMP(0) WITHOUT TIME ZONE"

    def get_time_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "TIME(0) WITHOUT TIME ZONE"

    def get_json_type_declaration_sql(self, column: dict[str, Any]) -> str:
        if column.get("jsonb"):
            return "JSONB"
        return "JSON"

    def render_drop_index(self, index: "Index", table: TableRef) -> str:
        if index.is_primary:
            table_name = self._table_name(table)
            constraint = trim_quotes(table_name).split(".")[-1] + "_pkey"
            return f"ALTER TABLE {table_name} DROP CONSTRAINT {constraint}"
        return f"DROP INDEX {index.get_quoted_name(self)}"

    def get_rename_index_sql(
        self, old_name: str, index: "Index", table_name: str
    ) -> list[str]:
        return [f"ALTER INDEX {old_name} RENAME TO {index.get_quoted_name(self)}"]

    def render_drop_sequence(self, sequence: Union["Sequence", str]) -> str:
        return super().render_drop_sequence(sequence) + " CASCADE"

    def get_list_table_indexes_sql(self, table: str) -> str:
        return (
            "SELECT i.relname AS key_name, a.attname AS column_name, "
            "NOT ix.indisunique AS non_unique, ix.indisprimary AS \"primary\", "
            "pg_get_expr(ix.indpred, ix.indrelid) AS \"where\" "
            "FROM pg_index ix "
            "JOIN pg_class t ON t.oid = ix.indrelid "
            "JOIN pg_class i ON i.oid = ix.indexrelid "
            "JOIN pg_namespace n ON n.oid = t.relnamespace "
            "JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey) "
            f"WHERE n.nspname = current_schema() AND t.relname = {self.quote_string_literal(table)} "
            "ORDER BY i.relname, array_position(ix.indkey, a.attnum)"
        )
