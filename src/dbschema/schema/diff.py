"""Change sets between two schemas and the order their SQL is emitted in."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from dbschema.schema.asset import Identifier
from dbschema.schema.column import Column
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.index import Index
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table

if TYPE_CHECKING:
    from dbschema.platforms.base import Platform
    from dbschema.schema.schema import Schema


@dataclass
class ColumnDiff:
    """A column present on both sides whose properties differ."""

    old_column_name: str
    column: Column
    changed_properties: list[str] = field(default_factory=list)
    from_column: Optional[Column] = None

    def has_changed(self, property_name: str) -> bool:
        return property_name in self.changed_properties

    def get_old_column_name(self) -> Identifier:
        quote = self.from_column is not None and self.from_column.quoted
        return Identifier(self.old_column_name, quote)


@dataclass
class TableDiff:
    """Changes to one table.

    Column and index maps are keyed by lower-cased name, except
    ``changed_columns`` which uses the column name of the original table and
    ``renamed_columns`` which maps the old lower-cased name to the new column.
    """

    name: str
    added_columns: dict[str, Column] = field(default_factory=dict)
    changed_columns: dict[str, ColumnDiff] = field(default_factory=dict)
    removed_columns: dict[str, Column] = field(default_factory=dict)
    renamed_columns: dict[str, Column] = field(default_factory=dict)
    added_indexes: dict[str, Index] = field(default_factory=dict)
    changed_indexes: dict[str, Index] = field(default_factory=dict)
    removed_indexes: dict[str, Index] = field(default_factory=dict)
    renamed_indexes: dict[str, Index] = field(default_factory=dict)
    added_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    changed_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    removed_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    new_name: Optional[str] = None
    from_table: Optional[Table] = None

    def get_name(self, platform: "Platform") -> Identifier:
        """Current table name, keeping the quoting of the original table."""
        if self.from_table is not None:
            return Identifier(self.from_table.get_quoted_name(platform))
        return Identifier(self.name)

    def get_new_name(self) -> Optional[Identifier]:
        return Identifier(self.new_name) if self.new_name else None

    def get_renamed_column_old_name(self, old_name: str) -> Identifier:
        """Name of a renamed column with the case and quoting of the original table."""
        if self.from_table is not None and self.from_table.has_column(old_name):
            column = self.from_table.get_column(old_name)
            return Identifier(column.name, column.quoted)
        return Identifier(old_name)


@dataclass
class SchemaDiff:
    """Differences between two schemas.

    ``orphaned_foreign_keys`` are foreign keys of the old schema pointing at a
    removed table. They are dropped before anything else.
    """

    new_tables: dict[str, Table] = field(default_factory=dict)
    changed_tables: dict[str, TableDiff] = field(default_factory=dict)
    removed_tables: dict[str, Table] = field(default_factory=dict)
    new_sequences: list[Sequence] = field(default_factory=list)
    changed_sequences: list[Sequence] = field(default_factory=list)
    removed_sequences: list[Sequence] = field(default_factory=list)
    orphaned_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    new_namespaces: dict[str, str] = field(default_factory=dict)
    removed_namespaces: dict[str, str] = field(default_factory=dict)
    from_schema: Optional["Schema"] = None

    def is_empty(self) -> bool:
        return not (
            self.new_tables
            or self.changed_tables
            or self.removed_tables
            or self.new_sequences
            or self.changed_sequences
            or self.removed_sequences
            or self.orphaned_foreign_keys
            or self.new_namespaces
            or self.removed_namespaces
        )

    def to_sql(self, platform: "Platform") -> list[str]:
        return self._to_sql(platform, save_mode=False)

    def to_save_sql(self, platform: "Platform") -> list[str]:
        """Like to_sql, without any statement that drops a table, sequence or orphaned key."""
        return self._to_sql(platform, save_mode=True)

    def _to_sql(self, platform: "Platform", save_mode: bool) -> list[str]:
        sql: list[str] = []

        if platform.supports_schemas():
            for namespace in self.new_namespaces.values():
                sql.append(platform.render_create_namespace(namespace))

        if platform.supports_foreign_key_constraints() and not save_mode:
            for constraint in self.orphaned_foreign_keys:
                sql.append(
                    platform.render_drop_foreign_key(
                        constraint,
                        constraint.local_table or constraint.get_local_table_name(),
                    )
                )

        if platform.supports_sequences():
            for sequence in self.changed_sequences:
                sql.append(platform.render_alter_sequence(sequence))
            if not save_mode:
                for sequence in self.removed_sequences:
                    sql.append(platform.render_drop_sequence(sequence))
            for sequence in self.new_sequences:
                sql.append(platform.render_create_sequence(sequence))

        inline_foreign_keys = not platform.supports_create_drop_foreign_key_constraints()
        foreign_key_sql: list[str] = []
        for table in order_by_dependencies(self.new_tables):
            sql.extend(
                platform.render_create_table(
                    table, create_foreign_keys=inline_foreign_keys
                )
            )
            if platform.supports_foreign_key_constraints() and not inline_foreign_keys:
                for constraint in table.get_foreign_keys().values():
                    foreign_key_sql.append(
                        platform.render_create_foreign_key(constraint, table)
                    )
        sql.extend(foreign_key_sql)

        if not save_mode:
            for table in self.removed_tables.values():
                sql.append(platform.render_drop_table(table))

        for table_diff in self.changed_tables.values():
            sql.extend(platform.render_alter_table(table_diff))

        return sql


def order_by_dependencies(tables: dict[str, Table]) -> list[Table]:
    """Order tables so that a referenced table comes before the tables referencing it."""
    ordered: list[Table] = []
    visited: set[str] = set()

    def lookup(constraint: ForeignKeyConstraint) -> Optional[str]:
        for key in (
            constraint.foreign_table_name.lower(),
            constraint.get_unqualified_foreign_table_name(),
        ):
            if key in tables:
                return key
        return None

    def visit(key: str) -> None:
        if key in visited:
            return
        visited.add(key)
        table = tables[key]
        for constraint in table.get_foreign_keys().values():
            dependency = lookup(constraint)
            if dependency is not None:
                visit(dependency)
        ordered.append(table)

    for key in tables:
        visit(key)
    return ordered
