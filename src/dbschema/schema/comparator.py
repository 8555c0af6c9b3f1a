"""Compare two schemas and compute the changes between them."""

import logging
from typing import Any, Optional

from dbschema.schema.column import Column
from dbschema.schema.diff import ColumnDiff, SchemaDiff, TableDiff
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.index import Index
from dbschema.schema.schema import Schema
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table
from dbschema.types import is_decimal_family, is_string_family

logger = logging.getLogger(__name__)

DEFAULT_STRING_LENGTH = 255


def compare_schemas(from_schema: Schema, to_schema: Schema) -> SchemaDiff:
    """Compute the changes that turn from_schema into to_schema."""
    return Comparator().compare(from_schema, to_schema)


def _defaults_differ(default1: Any, default2: Any) -> bool:
    """Compare column defaults loosely, so that ``1`` equals ``"1"``."""
    if (default1 is None) != (default2 is None):
        return True
    if default1 is None or default1 == default2:
        return False
    try:
        return float(default1) != float(default2)
    except (TypeError, ValueError):
        return str(default1) != str(default2)


class Comparator:
    """Compare schemas, tables, columns, indexes, foreign keys and sequences.

    The comparator holds no state. The ``from`` side is the current state and
    the ``to`` side the desired one.
    """

    def compare(self, from_schema: Schema, to_schema: Schema) -> SchemaDiff:
        """Compare two schemas and return their differences."""
        diff = SchemaDiff(from_schema=from_schema)
        foreign_keys_to_table: dict[str, list[ForeignKeyConstraint]] = {}

        for namespace in to_schema.get_namespaces():
            if not from_schema.has_namespace(namespace):
                diff.new_namespaces[namespace] = namespace
        for namespace in from_schema.get_namespaces():
            if not to_schema.has_namespace(namespace):
                diff.removed_namespaces[namespace] = namespace

        for table in to_schema.get_tables():
            table_name = table.get_shortest_name(to_schema.name)
            if not from_schema.has_table(table_name):
                diff.new_tables[table_name] = to_schema.get_table(table_name)
                continue
            table_diff = self.diff_table(
                from_schema.get_table(table_name), to_schema.get_table(table_name)
            )
            if table_diff is not None:
                diff.changed_tables[table_name] = table_diff

        for table in from_schema.get_tables():
            table_name = table.get_shortest_name(from_schema.name)
            if not to_schema.has_table(table_name):
                diff.removed_tables[table_name] = table
            for constraint in table.get_foreign_keys().values():
                foreign_table = constraint.foreign_table.get_shortest_name(
                    from_schema.name
                )
                foreign_keys_to_table.setdefault(foreign_table, []).append(constraint)

        for table_name in diff.removed_tables:
            for constraint in foreign_keys_to_table.get(table_name, []):
                diff.orphaned_foreign_keys.append(constraint)
                local_table = constraint.local_table
                if local_table is None:
                    continue
                local_name = local_table.get_shortest_name(from_schema.name)
                changed = diff.changed_tables.get(local_name)
                if changed is not None:
                    changed.removed_foreign_keys = [
                        removed
                        for removed in changed.removed_foreign_keys
                        if removed is not constraint
                    ]

        for sequence in to_schema.get_sequences():
            sequence_name = sequence.get_shortest_name(to_schema.name)
            if not from_schema.has_sequence(sequence_name):
                if not self._is_autoincrement_sequence_in_schema(from_schema, sequence):
                    diff.new_sequences.append(sequence)
            elif self.diff_sequence(sequence, from_schema.get_sequence(sequence_name)):
                diff.changed_sequences.append(to_schema.get_sequence(sequence_name))

        for sequence in from_schema.get_sequences():
            if self._is_autoincrement_sequence_in_schema(to_schema, sequence):
                continue
            sequence_name = sequence.get_shortest_name(from_schema.name)
            if not to_schema.has_sequence(sequence_name):
                diff.removed_sequences.append(sequence)

        logger.debug(
            f"Compared schemas: {len(diff.new_tables)} new, "
            f"{len(diff.changed_tables)} changed, {len(diff.removed_tables)} removed tables"
        )
        return diff

    def _is_autoincrement_sequence_in_schema(
        self, schema: Schema, sequence: Sequence
    ) -> bool:
        return any(sequence.is_autoincrement_for(table) for table in schema.get_tables())

    def diff_sequence(self, sequence1: Sequence, sequence2: Sequence) -> bool:
        """Check if allocation size or initial value differ."""
        return (
            sequence1.allocation_size != sequence2.allocation_size
            or sequence1.initial_value != sequence2.initial_value
        )

    def diff_table(self, table1: Table, table2: Table) -> Optional[TableDiff]:
        """Compare two tables; returns None when they are equivalent."""
        changes = 0
        diff = TableDiff(table1.name, from_table=table1)

        table1_columns = table1.get_columns()
        for column in table2.get_columns():
            if not table1.has_column(column.name):
                diff.added_columns[column.name.lower()] = column
                changes += 1

        for column in table1_columns:
            if not table2.has_column(column.name):
                diff.removed_columns[column.name.lower()] = column
                changes += 1
                continue
            other = table2.get_column(column.name)
            changed_properties = self.diff_column(column, other)
            if changed_properties:
                diff.changed_columns[column.name] = ColumnDiff(
                    column.name, other, changed_properties, column
                )
                changes += 1

        self._detect_column_renamings(diff)

        table1_indexes = table1.get_indexes()
        table2_indexes = table2.get_indexes()
        for name2, index2 in list(table2_indexes.items()):
            for name1, index1 in list(table1_indexes.items()):
                if not self.diff_index(index1, index2):
                    del table1_indexes[name1]
                    del table2_indexes[name2]
                    break
                if name1 == name2:
                    diff.changed_indexes[name2] = index2
                    del table1_indexes[name1]
                    del table2_indexes[name2]
                    changes += 1
                    break
        for name1, index1 in table1_indexes.items():
            diff.removed_indexes[name1] = index1
            changes += 1
        for name2, index2 in table2_indexes.items():
            diff.added_indexes[name2] = index2
            changes += 1

        from_keys = list(table1.get_foreign_keys().values())
        to_keys = list(table2.get_foreign_keys().values())
        for constraint1 in list(from_keys):
            for constraint2 in to_keys:
                if not self.diff_foreign_key(constraint1, constraint2):
                    from_keys.remove(constraint1)
                    to_keys.remove(constraint2)
                    break
                if constraint1.name.lower() == constraint2.name.lower():
                    diff.changed_foreign_keys.append(constraint2)
                    from_keys.remove(constraint1)
                    to_keys.remove(constraint2)
                    changes += 1
                    break
        for constraint1 in from_keys:
            diff.removed_foreign_keys.append(constraint1)
            changes += 1
        for constraint2 in to_keys:
            diff.added_foreign_keys.append(constraint2)
            changes += 1

        if not changes:
            return None
        logger.debug(f"Table {table1.name} has {changes} change(s)")
        return diff

    def _detect_column_renamings(self, diff: TableDiff) -> None:
        """Turn an added/removed pair into a rename when the match is unambiguous.

        An added column is a rename of a removed one when both columns are
        otherwise identical, the added column matches exactly one removed
        column, and that removed column matches no other added column.
        """
        candidates: dict[str, list[str]] = {}
        matched_by: dict[str, int] = {}
        for added_name, added in diff.added_columns.items():
            for removed_name, removed in diff.removed_columns.items():
                if not self.diff_column(added, removed):
                    candidates.setdefault(added_name, []).append(removed_name)
                    matched_by[removed_name] = matched_by.get(removed_name, 0) + 1

        for added_name, removed_names in candidates.items():
            if len(removed_names) != 1:
                continue
            removed_name = removed_names[0]
            if matched_by[removed_name] != 1 or removed_name in diff.renamed_columns:
                continue
            logger.debug(f"Detected rename of column {removed_name} to {added_name}")
            diff.renamed_columns[removed_name] = diff.added_columns.pop(added_name)
            del diff.removed_columns[removed_name]

    def diff_column(self, column1: Column, column2: Column) -> list[str]:
        """Return the names of the properties that differ between two columns."""
        changed: list[str] = []

        if column1.type != column2.type:
            changed.append("type")
        if column1.notnull != column2.notnull:
            changed.append("notnull")
        if _defaults_differ(column1.default, column2.default):
            changed.append("default")
        if column1.unsigned != column2.unsigned:
            changed.append("unsigned")

        if is_string_family(column1.type):
            length1 = column1.length or DEFAULT_STRING_LENGTH
            length2 = column2.length or DEFAULT_STRING_LENGTH
            if length1 != length2:
                changed.append("length")
            if column1.fixed != column2.fixed:
                changed.append("fixed")

        if is_decimal_family(column1.type):
            if (column1.precision or 10) != (column2.precision or 10):
                changed.append("precision")
            if column1.scale != column2.scale:
                changed.append("scale")

        if column1.autoincrement != column2.autoincrement:
            changed.append("autoincrement")

        # None on the old side means the comment is unknown; "" and None are equal.
        if (
            column1.comment is not None
            and column1.comment != column2.comment
            and not (column1.comment == "" and column2.comment is None)
        ):
            changed.append("comment")

        options1 = column1.custom_schema_options
        options2 = column2.custom_schema_options
        for key in [*options1, *options2]:
            if key not in options1 or key not in options2:
                changed.append(key)
            elif options1[key] != options2[key]:
                changed.append(key)

        platform_options1 = column1.platform_options
        platform_options2 = column2.platform_options
        for key in platform_options1:
            if key in platform_options2 and platform_options1[key] != platform_options2[key]:
                changed.append(key)

        return list(dict.fromkeys(changed))

    def diff_index(self, index1: Index, index2: Index) -> bool:
        """Check if two indexes differ; equal only if each fulfils the other."""
        return not (index1.is_fulfilled_by(index2) and index2.is_fulfilled_by(index1))

    def diff_foreign_key(
        self, key1: ForeignKeyConstraint, key2: ForeignKeyConstraint
    ) -> bool:
        """Check if columns, target table or referential actions differ."""
        if [c.lower() for c in key1.get_unquoted_local_columns()] != [
            c.lower() for c in key2.get_unquoted_local_columns()
        ]:
            return True
        if [c.lower() for c in key1.get_unquoted_foreign_columns()] != [
            c.lower() for c in key2.get_unquoted_foreign_columns()
        ]:
            return True
        if key1.get_unqualified_foreign_table_name() != key2.get_unqualified_foreign_table_name():
            return True
        if key1.on_update() != key2.on_update():
            return True
        return key1.on_delete() != key2.on_delete()
