"""Schema: the set of tables, sequences and namespaces of one database."""

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional

from dbschema.exceptions import (
    NamedForeignKeyRequired,
    NamespaceAlreadyExists,
    SequenceAlreadyExists,
    SequenceDoesNotExist,
    TableAlreadyExists,
    TableDoesNotExist,
)
from dbschema.schema.asset import AbstractAsset, is_identifier_quoted, trim_quotes
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import DEFAULT_MAX_IDENTIFIER_LENGTH, Table

if TYPE_CHECKING:
    from dbschema.platforms.base import Platform

DEFAULT_SCHEMA_NAME = "public"


@dataclass
class SchemaConfig:
    """Settings shared by a schema and its tables."""

    name: Optional[str] = None
    max_identifier_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH
    default_table_options: dict[str, Any] = field(default_factory=dict)
    explicit_foreign_key_indexes: bool = False


def _unquoted(name: str) -> str:
    if is_identifier_quoted(name):
        return trim_quotes(name)
    return name


class Schema(AbstractAsset):
    """Tables and sequences under one default namespace.

    Lookups accept bare or qualified names. A bare name is qualified with the
    schema's own name, and keys are lower-cased, so ``Users``, ``users`` and
    ``public.users`` all address the same table.
    """

    def __init__(
        self,
        tables: Optional[Iterable[Table]] = None,
        sequences: Optional[Iterable[Sequence]] = None,
        config: Optional[SchemaConfig] = None,
        namespaces: Optional[Iterable[str]] = None,
    ):
        super().__init__()
        self._config = config or SchemaConfig()
        self._set_name(self._config.name or DEFAULT_SCHEMA_NAME)
        self._namespaces: dict[str, str] = {}
        self._tables: dict[str, Table] = {}
        self._sequences: dict[str, Sequence] = {}

        for namespace in namespaces or ():
            self.create_namespace(namespace)
        for table in tables or ():
            self._add_table(table)
        for sequence in sequences or ():
            self._add_sequence(sequence)

    @property
    def config(self) -> SchemaConfig:
        return self._config

    def has_explicit_foreign_key_indexes(self) -> bool:
        return self._config.explicit_foreign_key_indexes

    def _qualify(self, name: str) -> str:
        name = _unquoted(name)
        if "." not in name:
            name = f"{self.name}.{name}"
        return name.lower()

    def _add_table(self, table: Table) -> None:
        key = table.get_full_qualified_name(self.name)
        if key in self._tables:
            raise TableAlreadyExists(key)
        namespace = table.namespace_name
        if not table.is_in_default_namespace(self.name) and not self.has_namespace(
            namespace
        ):
            self.create_namespace(namespace)
        self._tables[key] = table
        table.set_schema_config(self._config)

    def _add_sequence(self, sequence: Sequence) -> None:
        key = sequence.get_full_qualified_name(self.name)
        if key in self._sequences:
            raise SequenceAlreadyExists(key)
        namespace = sequence.namespace_name
        if not sequence.is_in_default_namespace(self.name) and not self.has_namespace(
            namespace
        ):
            self.create_namespace(namespace)
        self._sequences[key] = sequence

    # Namespaces

    def get_namespaces(self) -> list[str]:
        return list(self._namespaces.values())

    def has_namespace(self, name: str) -> bool:
        return _unquoted(name).lower() in self._namespaces

    def create_namespace(self, name: str) -> "Schema":
        key = _unquoted(name).lower()
        if key in self._namespaces:
            raise NamespaceAlreadyExists(key)
        self._namespaces[key] = name
        return self

    # Tables

    def get_tables(self) -> list[Table]:
        return list(self._tables.values())

    def get_table_names(self) -> list[str]:
        return list(self._tables)

    def has_table(self, name: str) -> bool:
        return self._qualify(name) in self._tables

    def get_table(self, name: str) -> Table:
        key = self._qualify(name)
        if key not in self._tables:
            raise TableDoesNotExist(key)
        return self._tables[key]

    def create_table(self, name: str) -> Table:
        """Create and register an empty table with the default table options."""
        table = Table(name)
        self._add_table(table)
        for option, value in self._config.default_table_options.items():
            table.add_option(option, value)
        return table

    def rename_table(self, old_name: str, new_name: str) -> "Schema":
        table = self.get_table(old_name)
        if self.has_table(new_name):
            raise TableAlreadyExists(self._qualify(new_name))
        self.drop_table(old_name)
        table._set_name(new_name)
        self._add_table(table)
        return self

    def drop_table(self, name: str) -> "Schema":
        key = self._qualify(name)
        self.get_table(key)
        del self._tables[key]
        return self

    # Sequences

    def get_sequences(self) -> list[Sequence]:
        return list(self._sequences.values())

    def has_sequence(self, name: str) -> bool:
        return self._qualify(name) in self._sequences

    def get_sequence(self, name: str) -> Sequence:
        key = self._qualify(name)
        if key not in self._sequences:
            raise SequenceDoesNotExist(key)
        return self._sequences[key]

    def create_sequence(
        self,
        name: str,
        allocation_size: int = 1,
        initial_value: int = 1,
        cache_size: Optional[int] = None,
    ) -> Sequence:
        sequence = Sequence(name, allocation_size, initial_value, cache_size)
        self._add_sequence(sequence)
        return sequence

    def drop_sequence(self, name: str) -> "Schema":
        key = self._qualify(name)
        if key not in self._sequences:
            raise SequenceDoesNotExist(key)
        del self._sequences[key]
        return self

    # SQL

    def to_sql(self, platform: "Platform") -> list[str]:
        """Statements that create this schema in an empty database."""
        from dbschema.schema.comparator import Comparator

        empty = Schema(config=self._config)
        return Comparator().compare(empty, self).to_sql(platform)

    def to_drop_sql(self, platform: "Platform") -> list[str]:
        """Statements that drop every table and sequence of this schema."""
        foreign_keys = [
            (table, constraint)
            for table in self._tables.values()
            for constraint in table.get_foreign_keys().values()
        ]
        return build_drop_sql(platform, self.get_tables(), foreign_keys, self.get_sequences())

    def get_migrate_to_sql(self, to_schema: "Schema", platform: "Platform") -> list[str]:
        from dbschema.schema.comparator import Comparator

        return Comparator().compare(self, to_schema).to_sql(platform)

    def get_migrate_from_sql(
        self, from_schema: "Schema", platform: "Platform"
    ) -> list[str]:
        from dbschema.schema.comparator import Comparator

        return Comparator().compare(from_schema, self).to_sql(platform)

    def clone(self) -> "Schema":
        return copy.deepcopy(self)

    def __deepcopy__(self, memo: dict) -> "Schema":
        clone = type(self).__new__(type(self))
        memo[id(self)] = clone
        for key, value in self.__dict__.items():
            setattr(clone, key, copy.deepcopy(value, memo))
        for table in clone._tables.values():
            table.set_schema_config(clone._config)
        return clone


def build_drop_sql(
    platform: "Platform",
    tables: Iterable[Table],
    foreign_keys: Iterable[tuple[Table, ForeignKeyConstraint]],
    sequences: Iterable[Sequence],
) -> list[str]:
    """Drop foreign keys first, then tables, then sequences."""
    sql = []
    if platform.supports_create_drop_foreign_key_constraints():
        for table, constraint in foreign_keys:
            if not constraint.name:
                raise NamedForeignKeyRequired(table.name, constraint.local_columns)
            sql.append(platform.render_drop_foreign_key(constraint, table))
    sql.extend(platform.render_drop_table(table) for table in tables)
    if platform.supports_sequences():
        sql.extend(platform.render_drop_sequence(sequence) for sequence in sequences)
    return sql
