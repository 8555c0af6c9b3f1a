"""Index and unique constraint definitions."""

from typing import TYPE_CHECKING, Any, Iterable, Optional

from dbschema.schema.asset import AbstractAsset, Identifier, trim_quotes

if TYPE_CHECKING:
    from dbschema.platforms.base import Platform


def _normalize(name: str) -> str:
    return trim_quotes(name.lower())


class _ColumnListAsset(AbstractAsset):
    """Named asset over an ordered list of column names."""

    def __init__(
        self,
        name: Optional[str],
        columns: Iterable[str],
        flags: Optional[Iterable[str]] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        super().__init__()
        self._set_name(name)
        self._columns: list[Identifier] = []
        for column in columns:
            self._add_column(column)
        self._flags: list[str] = []
        for flag in flags or ():
            self.add_flag(flag)
        self._options = {key.lower(): value for key, value in (options or {}).items()}

    def _add_column(self, column: str) -> None:
        if not isinstance(column, str):
            raise TypeError(
                f"Expecting a string as column name, got {type(column).__name__}"
            )
        self._columns.append(Identifier(column))

    @property
    def columns(self) -> list[str]:
        return [column.name for column in self._columns]

    def get_columns(self) -> list[str]:
        return self.columns

    def get_quoted_columns(self, platform: "Platform") -> list[str]:
        return [column.get_quoted_name(platform) for column in self._columns]

    def get_unquoted_columns(self) -> list[str]:
        return [trim_quotes(name) for name in self.columns]

    @property
    def flags(self) -> list[str]:
        return list(self._flags)

    def add_flag(self, flag: str) -> "_ColumnListAsset":
        flag = flag.lower()
        if flag not in self._flags:
            self._flags.append(flag)
        return self

    def has_flag(self, flag: str) -> bool:
        return flag.lower() in self._flags

    def remove_flag(self, flag: str) -> None:
        if flag.lower() in self._flags:
            self._flags.remove(flag.lower())

    @property
    def options(self) -> dict[str, Any]:
        return dict(self._options)

    def has_option(self, name: str) -> bool:
        return name.lower() in self._options

    def get_option(self, name: str) -> Any:
        return self._options[name.lower()]


class Index(_ColumnListAsset):
    """An index over an ordered list of columns.

    Primary indexes are always unique. Flags are platform hints such as
    ``fulltext`` or ``clustered``; the ``where`` option makes a partial index.
    """

    def __init__(
        self,
        name: Optional[str],
        columns: Iterable[str],
        is_unique: bool = False,
        is_primary: bool = False,
        flags: Optional[Iterable[str]] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        super().__init__(name, columns, flags, options)
        self._is_primary = is_primary
        self._is_unique = is_unique or is_primary

    @property
    def is_unique(self) -> bool:
        return self._is_unique

    @property
    def is_primary(self) -> bool:
        return self._is_primary

    def is_simple_index(self) -> bool:
        return not self._is_primary and not self._is_unique

    def has_column_at_position(self, column_name: str, position: int = 0) -> bool:
        column_name = _normalize(column_name)
        index_columns = [name.lower() for name in self.get_unquoted_columns()]
        try:
            return index_columns.index(column_name) == position
        except ValueError:
            return False

    def spans_columns(self, column_names: list[str]) -> bool:
        """Check if every index column matches column_names at the same position."""
        for position, column in enumerate(self.columns):
            if position >= len(column_names):
                return False
            if _normalize(column) != _normalize(column_names[position]):
                return False
        return True

    def is_fulfilled_by(self, other: "Index") -> bool:
        """Check if other already provides everything this index would add."""
        if len(other.columns) != len(self.columns):
            return False
        if not self.spans_columns(other.columns):
            return False
        if not self._same_partial_index(other):
            return False
        if self.is_simple_index():
            return True
        return other.is_primary == self.is_primary and other.is_unique == self.is_unique

    def overrules(self, other: "Index") -> bool:
        """Check if this index makes other redundant."""
        if other.is_primary:
            return False
        if self.is_simple_index() and other.is_unique:
            return False
        return (
            self.spans_columns(other.columns)
            and (self.is_primary or self.is_unique)
            and self._same_partial_index(other)
        )

    def _same_partial_index(self, other: "Index") -> bool:
        if self.has_option("where") and other.has_option("where"):
            return self.get_option("where") == other.get_option("where")
        return not self.has_option("where") and not other.has_option("where")


class UniqueConstraint(_ColumnListAsset):
    """A named UNIQUE constraint declared as part of a table."""
