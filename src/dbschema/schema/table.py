"""Table definition: columns, indexes, foreign keys and options."""

import copy
import logging
import re
from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

from dbschema.exceptions import (
    ColumnAlreadyExists,
    ColumnDoesNotExist,
    ForeignKeyAlreadyExists,
    ForeignKeyDoesNotExist,
    IndexAlreadyExists,
    IndexDoesNotExist,
    IndexNameInvalid,
    InvalidTableName,
    PrimaryKeyDoesNotExist,
    UniqueConstraintDoesNotExist,
    UnsupportedOperationError,
)
from dbschema.schema.asset import AbstractAsset, generate_identifier_name, trim_quotes
from dbschema.schema.column import Column
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.index import Index, UniqueConstraint
from dbschema.types import Type

if TYPE_CHECKING:
    from dbschema.schema.schema import SchemaConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_IDENTIFIER_LENGTH = 63

_INVALID_INDEX_NAME = re.compile(r"[^a-zA-Z0-9_]+")


def _normalize(identifier: str) -> str:
    return trim_quotes(identifier.lower())


class Table(AbstractAsset):
    """A table and everything attached to it.

    Columns, indexes, unique constraints and foreign keys are keyed by their
    lower-cased, unquoted name. Adding a foreign key makes sure an index
    covers its local columns, and redundant indexes are merged on insert.
    """

    def __init__(
        self,
        name: str,
        columns: Optional[Iterable[Column]] = None,
        indexes: Optional[Iterable[Index]] = None,
        foreign_keys: Optional[Iterable[ForeignKeyConstraint]] = None,
        options: Optional[dict[str, Any]] = None,
        unique_constraints: Optional[Iterable[UniqueConstraint]] = None,
    ):
        super().__init__()
        if not name:
            raise InvalidTableName(name)
        self._set_name(name)
        self._columns: dict[str, Column] = {}
        self._indexes: dict[str, Index] = {}
        self._unique_constraints: dict[str, UniqueConstraint] = {}
        self._foreign_keys: dict[str, ForeignKeyConstraint] = {}
        self._primary_key_name: Optional[str] = None
        self._options: dict[str, Any] = dict(options or {})
        self._schema_config: Optional["SchemaConfig"] = None

        for column in columns or ():
            self._add_column(column)
        for index in indexes or ():
            self._add_index(index)
        for constraint in unique_constraints or ():
            self._add_unique_constraint(constraint)
        for constraint in foreign_keys or ():
            self._add_foreign_key_constraint(constraint)

    def set_schema_config(self, schema_config: "SchemaConfig") -> None:
        self._schema_config = schema_config

    def _get_max_identifier_length(self) -> int:
        if self._schema_config is not None:
            return self._schema_config.max_identifier_length
        return DEFAULT_MAX_IDENTIFIER_LENGTH

    def _generate_name(self, column_names: Iterable[str], prefix: str) -> str:
        return generate_identifier_name(
            [self.name, *column_names], prefix, self._get_max_identifier_length()
        )

    # Columns

    def add_column(
        self,
        name: str,
        type_name: Union[Type, str],
        options: Optional[dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Column:
        """Create a column and add it to the table."""
        column = Column(name, type_name, {**(options or {}), **kwargs})
        self._add_column(column)
        return column

    def _add_column(self, column: Column) -> None:
        key = _normalize(column.name)
        if key in self._columns:
            raise ColumnAlreadyExists(self.name, key)
        self._columns[key] = column

    def rename_column(self, old_name: str, new_name: str) -> None:
        raise UnsupportedOperationError(
            "Table.rename_column() is not supported, because renaming would drop "
            "and recreate the column. A schema diff cannot reliably detect whether "
            "a column was renamed or one column was created and another one "
            "dropped. Drop and add the columns explicitly instead."
        )

    def change_column(self, name: str, options: dict[str, Any]) -> "Table":
        self.get_column(name).set_options(options)
        return self

    def drop_column(self, name: str) -> "Table":
        key = _normalize(name)
        if key not in self._columns:
            raise ColumnDoesNotExist(name, self.name)
        del self._columns[key]
        return self

    def has_column(self, name: str) -> bool:
        return _normalize(name) in self._columns

    def get_column(self, name: str) -> Column:
        key = _normalize(name)
        if key not in self._columns:
            raise ColumnDoesNotExist(name, self.name)
        return self._columns[key]

    def get_columns(self) -> list[Column]:
        """Columns with primary key members first, then foreign key members."""
        order: list[str] = []
        primary_key = self.get_primary_key()
        if primary_key is not None:
            order.extend(_normalize(name) for name in primary_key.columns)
        for constraint in self._foreign_keys.values():
            order.extend(_normalize(name) for name in constraint.local_columns)
        order.extend(self._columns)
        return [self._columns[key] for key in dict.fromkeys(order) if key in self._columns]

    # Indexes

    def set_primary_key(
        self, columns: list[str], index_name: Optional[str] = None
    ) -> "Table":
        """Add the primary key and mark its columns NOT NULL."""
        self._add_index(
            self._create_index(columns, index_name or "primary", True, True)
        )
        for name in columns:
            self.get_column(name).notnull = True
        return self

    def add_index(
        self,
        columns: list[str],
        name: Optional[str] = None,
        flags: Optional[Iterable[str]] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> "Table":
        if name is None:
            name = self._generate_name(columns, "idx")
        return self._add_index(
            self._create_index(columns, name, False, False, flags, options)
        )

    def add_unique_index(
        self,
        columns: list[str],
        name: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> "Table":
        if name is None:
            name = self._generate_name(columns, "uniq")
        return self._add_index(
            self._create_index(columns, name, True, False, None, options)
        )

    def drop_primary_key(self) -> None:
        if self._primary_key_name is None:
            raise PrimaryKeyDoesNotExist(self.name)
        self.drop_index(self._primary_key_name)
        self._primary_key_name = None

    def drop_index(self, name: str) -> None:
        key = _normalize(name)
        if key not in self._indexes:
            raise IndexDoesNotExist(name, self.name)
        del self._indexes[key]

    def rename_index(self, old_name: str, new_name: Optional[str] = None) -> "Table":
        old_key = _normalize(old_name)
        new_key = _normalize(new_name) if new_name is not None else None
        if old_key == new_key:
            return self
        if not self.has_index(old_key):
            raise IndexDoesNotExist(old_name, self.name)
        if new_key is not None and self.has_index(new_key):
            raise IndexAlreadyExists(new_name, self.name)

        old_index = self._indexes[old_key]
        if old_index.is_primary:
            self.drop_primary_key()
            return self.set_primary_key(old_index.columns, new_name)

        del self._indexes[old_key]
        if old_index.is_unique:
            return self.add_unique_index(old_index.columns, new_name, old_index.options)
        return self.add_index(
            old_index.columns, new_name, old_index.flags, old_index.options
        )

    def columns_are_indexed(self, column_names: list[str]) -> bool:
        """Check if some index spans the given columns."""
        return any(index.spans_columns(column_names) for index in self._indexes.values())

    def _create_index(
        self,
        columns: list[str],
        name: str,
        is_unique: bool,
        is_primary: bool,
        flags: Optional[Iterable[str]] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> Index:
        if _INVALID_INDEX_NAME.search(_normalize(name)):
            raise IndexNameInvalid(name)
        for column in columns:
            if not self.has_column(column):
                raise ColumnDoesNotExist(column, self.name)
        return Index(name, columns, is_unique, is_primary, flags, options)

    def _add_index(self, candidate: Index) -> "Table":
        for existing in self._indexes.values():
            if candidate.is_fulfilled_by(existing):
                logger.debug(
                    f"Index {candidate.name} on {self.name} is fulfilled by {existing.name}, skipping"
                )
                return self

        key = _normalize(candidate.name)
        overruled = [
            existing_key
            for existing_key, existing in self._indexes.items()
            if candidate.overrules(existing)
        ]
        if (key in self._indexes and key not in overruled) or (
            candidate.is_primary and self.has_primary_key()
        ):
            raise IndexAlreadyExists(candidate.name, self.name)

        for existing_key in overruled:
            logger.debug(
                f"Index {candidate.name} on {self.name} overrules {existing_key}, dropping it"
            )
            del self._indexes[existing_key]

        if candidate.is_primary:
            self._primary_key_name = key
        self._indexes[key] = candidate
        return self

    def has_index(self, name: str) -> bool:
        return _normalize(name) in self._indexes

    def get_index(self, name: str) -> Index:
        key = _normalize(name)
        if key not in self._indexes:
            raise IndexDoesNotExist(name, self.name)
        return self._indexes[key]

    def get_indexes(self) -> dict[str, Index]:
        return dict(self._indexes)

    def has_primary_key(self) -> bool:
        return self._primary_key_name is not None and self.has_index(
            self._primary_key_name
        )

    def get_primary_key(self) -> Optional[Index]:
        if not self.has_primary_key():
            return None
        return self.get_index(self._primary_key_name)

    def get_primary_key_columns(self) -> list[str]:
        primary_key = self.get_primary_key()
        if primary_key is None:
            raise PrimaryKeyDoesNotExist(self.name)
        return primary_key.columns

    # Unique constraints

    def add_unique_constraint(
        self,
        columns: list[str],
        name: Optional[str] = None,
        flags: Optional[Iterable[str]] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> "Table":
        if name is None:
            name = self._generate_name(columns, "uniq")
        return self._add_unique_constraint(UniqueConstraint(name, columns, flags, options))

    def _add_unique_constraint(self, constraint: UniqueConstraint) -> "Table":
        for column in constraint.columns:
            if not self.has_column(column):
                raise ColumnDoesNotExist(column, self.name)
        name = constraint.name or self._generate_name(constraint.columns, "uniq")
        key = _normalize(name)
        if key in self._unique_constraints:
            raise IndexAlreadyExists(name, self.name)
        self._unique_constraints[key] = constraint
        return self

    def has_unique_constraint(self, name: str) -> bool:
        return _normalize(name) in self._unique_constraints

    def get_unique_constraint(self, name: str) -> UniqueConstraint:
        key = _normalize(name)
        if key not in self._unique_constraints:
            raise UniqueConstraintDoesNotExist(name, self.name)
        return self._unique_constraints[key]

    def remove_unique_constraint(self, name: str) -> None:
        key = _normalize(name)
        if key not in self._unique_constraints:
            raise UniqueConstraintDoesNotExist(name, self.name)
        del self._unique_constraints[key]

    def get_unique_constraints(self) -> dict[str, UniqueConstraint]:
        return dict(self._unique_constraints)

    # Foreign keys

    def add_foreign_key_constraint(
        self,
        foreign_table: Union[str, "Table"],
        local_columns: list[str],
        foreign_columns: list[str],
        options: Optional[dict[str, Any]] = None,
        name: Optional[str] = None,
    ) -> "Table":
        """Add a foreign key, checking that the referenced columns exist."""
        if name is None:
            name = self._generate_name(local_columns, "fk")
        if isinstance(foreign_table, Table):
            for column in foreign_columns:
                if not foreign_table.has_column(column):
                    raise ColumnDoesNotExist(column, foreign_table.name)
        for column in local_columns:
            if not self.has_column(column):
                raise ColumnDoesNotExist(column, self.name)

        constraint = ForeignKeyConstraint(
            local_columns, foreign_table, foreign_columns, name, options
        )
        self._add_foreign_key_constraint(constraint)
        return self

    def _add_foreign_key_constraint(self, constraint: ForeignKeyConstraint) -> None:
        constraint.set_local_table(self)
        name = constraint.name or self._generate_name(constraint.local_columns, "fk")
        key = _normalize(name)
        if key in self._foreign_keys:
            raise ForeignKeyAlreadyExists(name, self.name)
        self._foreign_keys[key] = constraint

        # Every foreign key gets an index over its local columns unless one exists.
        index_name = self._generate_name(constraint.local_columns, "idx")
        candidate = self._create_index(constraint.local_columns, index_name, False, False)
        for existing in self._indexes.values():
            if candidate.is_fulfilled_by(existing):
                return
        self._add_index(candidate)

    def has_foreign_key(self, name: str) -> bool:
        return _normalize(name) in self._foreign_keys

    def get_foreign_key(self, name: str) -> ForeignKeyConstraint:
        key = _normalize(name)
        if key not in self._foreign_keys:
            raise ForeignKeyDoesNotExist(name, self.name)
        return self._foreign_keys[key]

    def remove_foreign_key(self, name: str) -> None:
        key = _normalize(name)
        if key not in self._foreign_keys:
            raise ForeignKeyDoesNotExist(name, self.name)
        del self._foreign_keys[key]

    def get_foreign_keys(self) -> dict[str, ForeignKeyConstraint]:
        return dict(self._foreign_keys)

    # Options

    @property
    def options(self) -> dict[str, Any]:
        return dict(self._options)

    def add_option(self, name: str, value: Any) -> "Table":
        self._options[name] = value
        return self

    def has_option(self, name: str) -> bool:
        return name in self._options

    def get_option(self, name: str) -> Any:
        return self._options[name]

    @property
    def comment(self) -> Optional[str]:
        return self._options.get("comment")

    @comment.setter
    def comment(self, value: Optional[str]) -> None:
        self._options["comment"] = value

    # Copying

    def clone(self) -> "Table":
        return copy.deepcopy(self)

    def __deepcopy__(self, memo: dict) -> "Table":
        clone = type(self).__new__(type(self))
        memo[id(self)] = clone
        for key, value in self.__dict__.items():
            if key == "_schema_config":
                setattr(clone, key, value)
            else:
                setattr(clone, key, copy.deepcopy(value, memo))
        for constraint in clone._foreign_keys.values():
            constraint.set_local_table(clone)
        return clone
