"""Platform protocol and the ANSI SQL renderer the concrete platforms extend."""

from typing import TYPE_CHECKING, Any, Optional, Protocol, Union

from dbschema.exceptions import NamedForeignKeyRequired, NotSupportedError
from dbschema.schema.asset import Identifier
from dbschema.types import (
    BigIntType,
    BooleanType,
    DateTimeType,
    IntegerType,
    SmallIntType,
)

if TYPE_CHECKING:
    from dbschema.schema.diff import ColumnDiff, SchemaDiff, TableDiff
    from dbschema.schema.foreign_key import ForeignKeyConstraint
    from dbschema.schema.index import Index, UniqueConstraint
    from dbschema.schema.sequence import Sequence
    from dbschema.schema.table import Table

TableRef = Union["Table", str]


class Platform(Protocol):
    """What the schema diff needs from a SQL dialect."""

    def quote_identifier(self, name: str) -> str: ...

    def supports_foreign_key_constraints(self) -> bool: ...

    def supports_create_drop_foreign_key_constraints(self) -> bool: ...

    def supports_sequences(self) -> bool: ...

    def supports_schemas(self) -> bool: ...

    def get_max_identifier_length(self) -> int: ...

    def render_create_table(
        self, table: "Table", create_foreign_keys: bool = False
    ) -> list[str]: ...

    def render_drop_table(self, table: TableRef) -> str: ...

    def render_alter_table(self, diff: "TableDiff") -> list[str]: ...

    def render_create_sequence(self, sequence: "Sequence") -> str: ...

    def render_drop_sequence(self, sequence: Union["Sequence", str]) -> str: ...

    def render_alter_sequence(self, sequence: "Sequence") -> str: ...

    def render_create_foreign_key(
        self, constraint: "ForeignKeyConstraint", table: TableRef
    ) -> str: ...

    def render_drop_foreign_key(
        self, constraint: "ForeignKeyConstraint", table: TableRef
    ) -> str: ...

    def render_create_index(self, index: "Index", table: TableRef) -> str: ...

    def render_drop_index(self, index: "Index", table: TableRef) -> str: ...

    def render_create_namespace(self, name: str) -> str: ...

    def render_diff(self, diff: "SchemaDiff") -> list[str]: ...


def _escape_sql_string(value: str) -> str:
    """Escape single quotes for SQL string literals."""
    return value.replace("'", "''")


class AbstractPlatform:
    """ANSI-flavoured SQL renderer driven by the logical column types.

    Subclasses adjust quoting, capabilities, type declarations and the shape
    of ``ALTER TABLE``; the order of statements is owned by ``SchemaDiff``.
    """

    name = "ansi"
    identifier_quote_character = '"'
    max_identifier_length = 63
    default_varchar_length = 255

    # Capabilities

    def supports_foreign_key_constraints(self) -> bool:
        return True

    def supports_create_drop_foreign_key_constraints(self) -> bool:
        return True

    def supports_sequences(self) -> bool:
        return True

    def supports_schemas(self) -> bool:
        return True

    def supports_partial_indexes(self) -> bool:
        return False

    def supports_comment_on_statement(self) -> bool:
        return False

    def supports_inline_column_comments(self) -> bool:
        return False

    def get_max_identifier_length(self) -> int:
        return self.max_identifier_length

    # Quoting

    def quote_identifier(self, name: str) -> str:
        return ".".join(self.quote_single_identifier(part) for part in name.split("."))

    def quote_single_identifier(self, name: str) -> str:
        char = self.identifier_quote_character
        return f"{char}{name.replace(char, char + char)}{char}"

    def quote_string_literal(self, value: str) -> str:
        return f"'{_escape_sql_string(value)}'"

    def _table_name(self, table: TableRef) -> str:
        if isinstance(table, str):
            return table
        return table.get_quoted_name(self)

    # Type declarations

    def get_integer_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "INT" + self._common_integer_type_declaration_sql(column)

    def get_smallint_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "SMALLINT" + self._common_integer_type_declaration_sql(column)

    def get_bigint_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "BIGINT" + self._common_integer_type_declaration_sql(column)

    def _common_integer_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return ""

    def get_boolean_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "BOOLEAN"

    def get_decimal_type_declaration_sql(self, column: dict[str, Any]) -> str:
        precision = column.get("precision") or 10
        scale = column.get("scale") or 0
        return f"NUMERIC({precision}, {scale})"

    def get_float_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "DOUBLE PRECISION"

    def get_varchar_type_declaration_sql(self, column: dict[str, Any]) -> str:
        length = column.get("length") or self.default_varchar_length
        if column.get("fixed"):
            return f"CHAR({length})"
        return f"VARCHAR({length})"

    def get_guid_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return self.get_varchar_type_declaration_sql(
            {**column, "length": 36, "fixed": True}
        )

    def get_clob_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "TEXT"

    def get_binary_type_declaration_sql(self, column: dict[str, Any]) -> str:
        length = column.get("length") or self.default_varchar_length
        if column.get("fixed"):
            return f"BINARY({length})"
        return f"VARBINARY({length})"

    def get_blob_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "BLOB"

    def get_date_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "DATE"

    def get_datetime_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "TIMESTAMP"

    def get_time_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return "TIME"

    def get_json_type_declaration_sql(self, column: dict[str, Any]) -> str:
        return self.get_clob_type_declaration_sql(column)

    def get_current_timestamp_sql(self) -> str:
        return "CURRENT_TIMESTAMP"

    def convert_boolean(self, value: Any) -> str:
        return "true" if value else "false"

    # Column declarations

    def get_default_value_declaration_sql(self, column: dict[str, Any]) -> str:
        default = column.get("default")
        if default is None:
            return "" if column.get("notnull") else " DEFAULT NULL"
        column_type = column.get("type")
        if isinstance(column_type, (IntegerType, SmallIntType, BigIntType)):
            return f" DEFAULT {default}"
        if (
            isinstance(column_type, DateTimeType)
            and default == self.get_current_timestamp_sql()
        ):
            return f" DEFAULT {default}"
        if isinstance(column_type, BooleanType):
            return f" DEFAULT {self.convert_boolean(default)}"
        return f" DEFAULT {self.quote_string_literal(str(default))}"

    def get_column_declaration_sql(self, name: str, column: dict[str, Any]) -> str:
        if column.get("column_definition"):
            return f"{name} {column['column_definition']}"
        declaration = column["type"].get_sql_declaration(column, self)
        default = self.get_default_value_declaration_sql(column)
        notnull = " NOT NULL" if column.get("notnull") else ""
        sql = f"{name} {declaration}{default}{notnull}"
        if self.supports_inline_column_comments() and column.get("comment"):
            sql += f" COMMENT {self.quote_string_literal(column['comment'])}"
        return sql

    def get_column_comment_sql(self, table_name: str, column_name: str, comment: Optional[str]) -> str:
        value = self.quote_string_literal(comment) if comment else "NULL"
        return f"COMMENT ON COLUMN {table_name}.{column_name} IS {value}"

    def get_table_comment_sql(self, table_name: str, comment: Optional[str]) -> str:
        value = self.quote_string_literal(comment) if comment else "NULL"
        return f"COMMENT ON TABLE {table_name} IS {value}"

    # Constraint declarations

    def get_index_columns_sql(self, index: Union["Index", "UniqueConstraint"]) -> str:
        return ", ".join(index.get_quoted_columns(self))

    def get_unique_constraint_declaration_sql(self, constraint: "UniqueConstraint") -> str:
        return (
            f"CONSTRAINT {constraint.get_quoted_name(self)} "
            f"UNIQUE ({self.get_index_columns_sql(constraint)})"
        )

    def get_index_declaration_sql(self, index: "Index") -> str:
        kind = "UNIQUE INDEX" if index.is_unique else "INDEX"
        return f"{kind} {index.get_quoted_name(self)} ({self.get_index_columns_sql(index)})"

    def get_foreign_key_declaration_sql(self, constraint: "ForeignKeyConstraint") -> str:
        sql = ""
        if constraint.name:
            sql += f"CONSTRAINT {constraint.get_quoted_name(self)} "
        sql += (
            f"FOREIGN KEY ({', '.join(constraint.get_quoted_local_columns(self))}) "
            f"REFERENCES {constraint.get_quoted_foreign_table_name(self)} "
            f"({', '.join(constraint.get_quoted_foreign_columns(self))})"
        )
        return sql + self.get_advanced_foreign_key_options_sql(constraint)

    def get_advanced_foreign_key_options_sql(self, constraint: "ForeignKeyConstraint") -> str:
        sql = ""
        if constraint.on_update():
            sql += f" ON UPDATE {constraint.on_update()}"
        if constraint.on_delete():
            sql += f" ON DELETE {constraint.on_delete()}"
        return sql

    # Tables

    def render_create_table(
        self, table: "Table", create_foreign_keys: bool = False
    ) -> list[str]:
        """CREATE TABLE plus the statements for its indexes and comments."""
        table_name = table.get_quoted_name(self)
        parts = [
            self.get_column_declaration_sql(column.get_quoted_name(self), column.to_dict())
            for column in table.get_columns()
        ]
        for constraint in table.get_unique_constraints().values():
            parts.append(self.get_unique_constraint_declaration_sql(constraint))

        primary_key = table.get_primary_key()
        if primary_key is not None:
            parts.append(f"PRIMARY KEY({self.get_index_columns_sql(primary_key)})")

        secondary = [
            index for index in table.get_indexes().values() if not index.is_primary
        ]
        if self.supports_inline_index_declarations():
            parts.extend(self.get_index_declaration_sql(index) for index in secondary)

        if create_foreign_keys and self.supports_foreign_key_constraints():
            for constraint in table.get_foreign_keys().values():
                parts.append(self.get_foreign_key_declaration_sql(constraint))

        sql = [f"CREATE TABLE {table_name} ({', '.join(parts)}){self.get_table_options_sql(table)}"]

        if not self.supports_inline_index_declarations():
            sql.extend(self.render_create_index(index, table) for index in secondary)

        if self.supports_comment_on_statement():
            if table.comment:
                sql.append(self.get_table_comment_sql(table_name, table.comment))
            for column in table.get_columns():
                if column.comment:
                    sql.append(
                        self.get_column_comment_sql(
                            table_name, column.get_quoted_name(self), column.comment
                        )
                    )
        return sql

    def supports_inline_index_declarations(self) -> bool:
        return False

    def get_table_options_sql(self, table: "Table") -> str:
        return ""

    def render_drop_table(self, table: TableRef) -> str:
        return f"DROP TABLE {self._table_name(table)}"

    def render_alter_table(self, diff: "TableDiff") -> list[str]:
        """ALTER TABLE statements for a table diff.

        Foreign keys and indexes that go away are dropped before the column
        changes; new ones are created after them.
        """
        table_name = diff.get_name(self).get_quoted_name(self)
        sql: list[str] = []
        comments: list[str] = []

        for column in diff.added_columns.values():
            declaration = self.get_column_declaration_sql(
                column.get_quoted_name(self), column.to_dict()
            )
            sql.append(f"ALTER TABLE {table_name} ADD {declaration}")
            if self.supports_comment_on_statement() and column.comment:
                comments.append(
                    self.get_column_comment_sql(
                        table_name, column.get_quoted_name(self), column.comment
                    )
                )

        for column in diff.removed_columns.values():
            sql.append(f"ALTER TABLE {table_name} DROP {column.get_quoted_name(self)}")

        for column_diff in diff.changed_columns.values():
            sql.extend(self._alter_column_sql(table_name, column_diff))
            if self.supports_comment_on_statement() and column_diff.has_changed("comment"):
                comments.append(
                    self.get_column_comment_sql(
                        table_name,
                        column_diff.get_old_column_name().get_quoted_name(self),
                        column_diff.column.comment,
                    )
                )

        for old_name, column in diff.renamed_columns.items():
            old = diff.get_renamed_column_old_name(old_name).get_quoted_name(self)
            sql.append(
                f"ALTER TABLE {table_name} RENAME COLUMN {old} TO {column.get_quoted_name(self)}"
            )

        new_name = diff.get_new_name()
        if new_name is not None:
            sql.append(f"ALTER TABLE {table_name} RENAME TO {new_name.get_quoted_name(self)}")

        return (
            self._pre_alter_table_index_foreign_key_sql(diff)
            + sql
            + self._post_alter_table_index_foreign_key_sql(diff)
            + comments
        )

    def _alter_column_sql(self, table_name: str, column_diff: "ColumnDiff") -> list[str]:
        old_name = column_diff.get_old_column_name().get_quoted_name(self)
        column = column_diff.column
        definition = column.to_dict()
        sql = []
        if any(
            column_diff.has_changed(name)
            for name in ("type", "precision", "scale", "fixed", "length", "unsigned")
        ):
            declaration = column.type.get_sql_declaration(
                {**definition, "autoincrement": False}, self
            )
            sql.append(f"ALTER TABLE {table_name} ALTER {old_name} TYPE {declaration}")
        if column_diff.has_changed("default"):
            if column.default is None:
                clause = " DROP DEFAULT"
            else:
                clause = " SET" + self.get_default_value_declaration_sql(definition)
            sql.append(f"ALTER TABLE {table_name} ALTER {old_name}{clause}")
        if column_diff.has_changed("notnull"):
            action = "SET" if column.notnull else "DROP"
            sql.append(f"ALTER TABLE {table_name} ALTER {old_name} {action} NOT NULL")
        return sql

    def _pre_alter_table_index_foreign_key_sql(self, diff: "TableDiff") -> list[str]:
        table_name = diff.get_name(self).get_quoted_name(self)
        sql = []
        if self.supports_foreign_key_constraints():
            for constraint in [*diff.removed_foreign_keys, *diff.changed_foreign_keys]:
                sql.append(self.render_drop_foreign_key(constraint, table_name))
        for index in [*diff.removed_indexes.values(), *diff.changed_indexes.values()]:
            sql.append(self.render_drop_index(index, table_name))
        return sql

    def _post_alter_table_index_foreign_key_sql(self, diff: "TableDiff") -> list[str]:
        new_name = diff.get_new_name()
        target = new_name if new_name is not None else diff.get_name(self)
        table_name = target.get_quoted_name(self)
        sql = []
        if self.supports_foreign_key_constraints():
            for constraint in [*diff.added_foreign_keys, *diff.changed_foreign_keys]:
                sql.append(self.render_create_foreign_key(constraint, table_name))
        for index in [*diff.added_indexes.values(), *diff.changed_indexes.values()]:
            sql.append(self.render_create_index(index, table_name))
        for old_name, index in diff.renamed_indexes.items():
            sql.extend(
                self.get_rename_index_sql(
                    Identifier(old_name).get_quoted_name(self), index, table_name
                )
            )
        return sql

    # Indexes and foreign keys

    def render_create_index(self, index: "Index", table: TableRef) -> str:
        table_name = self._table_name(table)
        columns = self.get_index_columns_sql(index)
        if index.is_primary:
            return f"ALTER TABLE {table_name} ADD PRIMARY KEY ({columns})"
        unique = "UNIQUE " if index.is_unique else ""
        sql = f"CREATE {unique}INDEX {index.get_quoted_name(self)} ON {table_name} ({columns})"
        if self.supports_partial_indexes() and index.has_option("where"):
            sql += f" WHERE {index.get_option('where')}"
        return sql

    def render_drop_index(self, index: "Index", table: TableRef) -> str:
        if index.is_primary:
            return f"ALTER TABLE {self._table_name(table)} DROP PRIMARY KEY"
        return f"DROP INDEX {index.get_quoted_name(self)}"

    def get_rename_index_sql(self, old_name: str, index: "Index", table_name: str) -> list[str]:
        return [f"DROP INDEX {old_name}", self.render_create_index(index, table_name)]

    def render_create_foreign_key(
        self, constraint: "ForeignKeyConstraint", table: TableRef
    ) -> str:
        return (
            f"ALTER TABLE {self._table_name(table)} "
            f"ADD {self.get_foreign_key_declaration_sql(constraint)}"
        )

    def render_drop_foreign_key(
        self, constraint: "ForeignKeyConstraint", table: TableRef
    ) -> str:
        table_name = self._table_name(table)
        if not constraint.name:
            raise NamedForeignKeyRequired(table_name, constraint.local_columns)
        return f"ALTER TABLE {table_name} DROP CONSTRAINT {constraint.get_quoted_name(self)}"

    # Sequences and namespaces

    def _sequence_cache_sql(self, sequence: "Sequence") -> str:
        if sequence.cache_size is None:
            return ""
        if sequence.cache_size == 0:
            return " NO CACHE"
        return f" CACHE {sequence.cache_size}"

    def render_create_sequence(self, sequence: "Sequence") -> str:
        return (
            f"CREATE SEQUENCE {sequence.get_quoted_name(self)} "
            f"INCREMENT BY {sequence.allocation_size} "
            f"MINVALUE {sequence.initial_value} START WITH {sequence.initial_value}"
            f"{self._sequence_cache_sql(sequence)}"
        )

    def render_alter_sequence(self, sequence: "Sequence") -> str:
        return (
            f"ALTER SEQUENCE {sequence.get_quoted_name(self)} "
            f"INCREMENT BY {sequence.allocation_size}"
            f"{self._sequence_cache_sql(sequence)}"
        )

    def render_drop_sequence(self, sequence: Union["Sequence", str]) -> str:
        name = sequence if isinstance(sequence, str) else sequence.get_quoted_name(self)
        return f"DROP SEQUENCE {name}"

    def render_create_namespace(self, name: str) -> str:
        return f"CREATE SCHEMA {name}"

    def render_diff(self, diff: "SchemaDiff") -> list[str]:
        return diff.to_sql(self)

    # Introspection queries

    def get_current_schema_sql(self) -> str:
        return "CURRENT_SCHEMA"

    def get_list_tables_sql(self) -> str:
        return (
            "SELECT table_name FROM information_schema.tables "
            f"WHERE table_schema = {self.get_current_schema_sql()} "
            "AND table_type = 'BASE TABLE' ORDER BY table_name"
        )

    def get_list_table_columns_sql(self, table: str) -> str:
        return (
            "SELECT column_name, data_type, is_nullable, column_default, "
            "character_maximum_length, numeric_precision, numeric_scale "
            "FROM information_schema.columns "
            f"WHERE table_schema = {self.get_current_schema_sql()} "
            f"AND table_name = {self.quote_string_literal(table)} "
            "ORDER BY ordinal_position"
        )

    def get_list_table_indexes_sql(self, table: str) -> str:
        raise NotSupportedError("list table indexes", self.name)

    def get_list_table_foreign_keys_sql(self, table: str) -> str:
        return (
            "SELECT kcu.constraint_name, kcu.column_name AS local_column, "
            "rcu.table_name AS foreign_table, rcu.column_name AS foreign_column, "
            "rc.update_rule AS on_update, rc.delete_rule AS on_delete "
            "FROM information_schema.referential_constraints rc "
            "JOIN information_schema.key_column_usage kcu "
            "ON kcu.constraint_schema = rc.constraint_schema "
            "AND kcu.constraint_name = rc.constraint_name "
            "JOIN information_schema.key_column_usage rcu "
            "ON rcu.constraint_schema = rc.unique_constraint_schema "
            "AND rcu.constraint_name = rc.unique_constraint_name "
            "AND rcu.ordinal_position = kcu.position_in_unique_constraint "
            f"WHERE kcu.table_schema = {self.get_current_schema_sql()} "
            f"AND kcu.table_name = {self.quote_string_literal(table)} "
            "ORDER BY kcu.constraint_name, kcu.ordinal_position"
        )

    def get_list_sequences_sql(self) -> str:
        return (
            "SELECT sequence_name, increment AS allocation_size, "
            "start_value AS initial_value FROM information_schema.sequences "
            f"WHERE sequence_schema = {self.get_current_schema_sql()}"
        )

    def get_list_views_sql(self) -> str:
        return (
            "SELECT table_name AS name, view_definition AS sql "
            "FROM information_schema.views "
            f"WHERE table_schema = {self.get_current_schema_sql()}"
        )

    def get_list_namespaces_sql(self) -> str:
        return "SELECT schema_name FROM information_schema.schemata"
