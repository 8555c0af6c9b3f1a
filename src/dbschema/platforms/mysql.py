"""MySQL dialect."""

from dataclasses import replace
from typing import TYPE_CHECKING, Any

from dbschema.exceptions import NotSupportedError
from dbschema.platforms.base import AbstractPlatform, TableRef

if TYPE_CHECKING:
    from dbschema.schema.diff import TableDiff
    from dbschema.schema.foreign_key import ForeignKeyConstraint
    from dbschema.schema.index import Index
    from dbschema.schema.table import Table


class MySQLPlatform(AbstractPlatform):
    """MySQL renderer: backtick quoting, no sequences, one ALTER per table."""

    name = "mysql"
    identifier_quote_character = "`"
    max_identifier_length = 64

    def supports_sequences(self) -> bool:
        return False

    def supports_schemas(self) -> bool:
        return False

    def supports_inline_index_declarations(self) -> bool:
        return True

    def supports_inline_column_comments(self) -> bool:
        return True

    def get_current_schema_sql(self) -> str:
        return "DATABASE()"

    def _common_integer_type_declaration_sql(self, column: dict[str, Any]) -> str:
        sql = ""
        if column.get("unsigned"):
            sql += " UNSIGNED"
        if column.get("autoincrement"):
            sql += " AUTO_INCREMENT"
        return sql

    def get_boolean_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "TINYINT(1)"

    def get_decimal_type_declaration_sql(self, column: dict[str, Any]) -> str:
        sql = super().get_decimal_type_declaration_sql(column)
        return sql + " UNSIGNED" if column.get("unsigned") else sql

    def get_clob_type_declaration_sql(self, column: dict[str, Any]) -> str:
        length = column.get("length")
        if length:
            if length <= 255:
                return "TINYTEXT"
            if length <= 65535:
                return "TEXT"
            if length <= 16777215:
                return "MEDIUMTEXT"
        return "LONGTEXT"

    def get_blob_type_declaration_sql(self, column: dict[str, Any]) -> str:
        length = column.get("length")
        if length:
            if length <= 255:
                return "TINYBLOB"
            if length <= 65535:
                return "BLOB"
            if length <= 16777215:
                return "MEDIUMBLOB"
        return "LONGBLOB"

    def get_datetime_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "DATETIME"

    def get_json_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "JSON"

    def convert_boolean(self, value: Any) -> str:
        return "1" if value else "0"

    def get_table_options_sql(self, table: "Table") -> str:
        options = table.options
        sql = f" ENGINE = {options.get('engine', 'InnoDB')}"
        if options.get("charset"):
            sql = f" DEFAULT CHARACTER SET {options['charset']}" + sql
        if table.comment:
            sql += f" COMMENT = {self.quote_string_literal(table.comment)}"
        return sql

    def render_alter_table(self, diff: "TableDiff") -> list[str]:
        """One ALTER TABLE with every column change, wrapped by index and key changes."""
        table_name = diff.get_name(self).get_quoted_name(self)
        parts: list[str] = []

        new_name = diff.get_new_name()
        if new_name is not None:
            parts.append(f"RENAME TO {new_name.get_quoted_name(self)}")

        for column in diff.added_columns.values():
            parts.append(
                "ADD "
                + self.get_column_declaration_sql(
                    column.get_quoted_name(self), column.to_dict()
                )
            )

        for column in diff.removed_columns.values():
            parts.append(f"DROP {column.get_quoted_name(self)}")

        for column_diff in diff.changed_columns.values():
            column = column_diff.column
            parts.append(
                f"CHANGE {column_diff.get_old_column_name().get_quoted_name(self)} "
                + self.get_column_declaration_sql(
                    column.get_quoted_name(self), column.to_dict()
                )
            )

        for old_name, column in diff.renamed_columns.items():
            old = diff.get_renamed_column_old_name(old_name).get_quoted_name(self)
            parts.append(
                f"CHANGE {old} "
                + self.get_column_declaration_sql(
                    column.get_quoted_name(self), column.to_dict()
                )
            )

        added_indexes = dict(diff.added_indexes)
        primary = next(
            (key for key, index in added_indexes.items() if index.is_primary), None
        )
        if primary is not None:
            columns = self.get_index_columns_sql(added_indexes.pop(primary))
            parts.append(f"ADD PRIMARY KEY ({columns})")

        sql = []
        if parts:
            sql.append(f"ALTER TABLE {table_name} {', '.join(parts)}")

        post_diff = diff
        if primary is not None:
            post_diff = replace(diff, added_indexes=added_indexes)

        return (
            self._pre_alter_table_index_foreign_key_sql(diff)
            + sql
            + self._post_alter_table_index_foreign_key_sql(post_diff)
        )

    def render_drop_index(self, index: "Index", table: TableRef) -> str:
        table_name = self._table_name(table)
        if index.is_primary:
            return f"ALTER TABLE {table_name} DROP PRIMARY KEY"
        return f"DROP INDEX {index.get_quoted_name(self)} ON {table_name}"

    def get_rename_index_sql(
        self, old_name: str, index: "Index", table_name: str
    ) -> list[str]:
        return [
            f"ALTER TABLE {table_name} RENAME INDEX {old_name} TO {index.get_quoted_name(self)}"
        ]

    def render_drop_foreign_key(
        self, constraint: "ForeignKeyConstraint", table: TableRef
    ) -> str:
        sql = super().render_drop_foreign_key(constraint, table)
        return sql.replace(" DROP CONSTRAINT ", " DROP FOREIGN KEY ", 1)

    def get_list_table_indexes_sql(self, table: str) -> str:
        return (
            "SELECT INDEX_NAME AS key_name, COLUMN_NAME AS column_name, "
            "NON_UNIQUE AS non_unique, INDEX_NAME = 'PRIMARY' AS `primary`, "
            "SUB_PART AS sub_part, INDEX_TYPE AS index_type "
            "FROM information_schema.STATISTICS "
            f"WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = {self.quote_string_literal(table)} "
            "ORDER BY INDEX_NAME, SEQ_IN_INDEX"
        )

    def get_list_table_foreign_keys_sql(self, table: str) -> str:
        return (
            "SELECT k.CONSTRAINT_NAME AS constraint_name, k.COLUMN_NAME AS local_column, "
            "k.REFERENCED_TABLE_NAME AS foreign_table, "
            "k.REFERENCED_COLUMN_NAME AS foreign_column, "
            "c.UPDATE_RULE AS on_update, c.DELETE_RULE AS on_delete "
            "FROM information_schema.KEY_COLUMN_USAGE k "
            "JOIN information_schema.REFERENTIAL_CONSTRAINTS c "
            "ON c.CONSTRAINT_SCHEMA = k.CONSTRAINT_SCHEMA "
            "AND c.CONSTRAINT_NAME = k.CONSTRAINT_NAME "
            f"WHERE k.TABLE_SCHEMA = DATABASE() AND k.TABLE_NAME = {self.quote_string_literal(table)} "
            "AND k.REFERENCED_TABLE_NAME IS NOT NULL "
            "ORDER BY k.CONSTRAINT_NAME, k.ORDINAL_POSITION"
        )

    def get_list_sequences_sql(self) -> str:
        raise NotSupportedError("list sequences", self.name)

    def get_list_namespaces_sql(self) -> str:
        raise NotSupportedError("list namespaces", self.name)
