"""Foreign key constraint definition."""

import weakref
from typing import TYPE_CHECKING, Any, Optional, Union

from dbschema.schema.asset import AbstractAsset, Identifier, trim_quotes

if TYPE_CHECKING:
    from dbschema.platforms.base import Platform
    from dbschema.schema.index import Index
    from dbschema.schema.table import Table

# Referential actions that are the database default and carry no diff signal.
_DEFAULT_ACTIONS = ("NO ACTION", "RESTRICT")


class ForeignKeyConstraint(AbstractAsset):
    """Reference from local columns to columns of a foreign table.

    Options hold the referential actions under ``onUpdate``/``onDelete``
    (``on_update``/``on_delete`` are accepted too) plus any platform extras.
    The owning table is held through a weak reference.
    """

    def __init__(
        self,
        local_columns: list[str],
        foreign_table: Union[str, "Table"],
        foreign_columns: list[str],
        name: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        super().__init__()
        self._set_name(name)
        self._local_columns = [Identifier(column) for column in local_columns]
        if isinstance(foreign_table, str):
            self._foreign_table = Identifier(foreign_table)
        else:
            self._foreign_table = Identifier(
                foreign_table.name, quote=foreign_table.quoted
            )
        self._foreign_columns = [Identifier(column) for column in foreign_columns]
        self._options: dict[str, Any] = {}
        for key, value in (options or {}).items():
            self._options[_option_key(key)] = value
        self._local_table: Optional[weakref.ref] = None

    @property
    def local_table(self) -> Optional["Table"]:
        if self._local_table is None:
            return None
        return self._local_table()

    def set_local_table(self, table: "Table") -> None:
        self._local_table = weakref.ref(table)

    def get_local_table_name(self) -> Optional[str]:
        table = self.local_table
        return table.name if table is not None else None

    @property
    def local_columns(self) -> list[str]:
        return [column.name for column in self._local_columns]

    def get_quoted_local_columns(self, platform: "Platform") -> list[str]:
        return [column.get_quoted_name(platform) for column in self._local_columns]

    def get_unquoted_local_columns(self) -> list[str]:
        return [trim_quotes(name) for name in self.local_columns]

    @property
    def foreign_table_name(self) -> str:
        return self._foreign_table.name

    @property
    def foreign_table(self) -> Identifier:
        return self._foreign_table

    def get_unqualified_foreign_table_name(self) -> str:
        """Last dotted segment of the foreign table name, lower-cased."""
        return self._foreign_table.name.split(".")[-1].lower()

    def get_quoted_foreign_table_name(self, platform: "Platform") -> str:
        return self._foreign_table.get_quoted_name(platform)

    @property
    def foreign_columns(self) -> list[str]:
        return [column.name for column in self._foreign_columns]

    def get_quoted_foreign_columns(self, platform: "Platform") -> list[str]:
        return [column.get_quoted_name(platform) for column in self._foreign_columns]

    def get_unquoted_foreign_columns(self) -> list[str]:
        return [trim_quotes(name) for name in self.foreign_columns]

    @property
    def options(self) -> dict[str, Any]:
        return dict(self._options)

    def has_option(self, name: str) -> bool:
        return _option_key(name) in self._options

    def get_option(self, name: str) -> Any:
        return self._options[_option_key(name)]

    def on_update(self) -> Optional[str]:
        return self._on_event("onUpdate")

    def on_delete(self) -> Optional[str]:
        return self._on_event("onDelete")

    def _on_event(self, event: str) -> Optional[str]:
        value = self._options.get(event)
        if not value:
            return None
        action = str(value).upper()
        if action in _DEFAULT_ACTIONS:
            return None
        return action

    def intersects_index_columns(self, index: "Index") -> bool:
        """Check if any index column is one of the local columns."""
        local = {column.lower() for column in self.local_columns}
        return any(column.lower() in local for column in index.columns)


def _option_key(key: str) -> str:
    if key in ("on_update", "onupdate"):
        return "onUpdate"
    if key in ("on_delete", "ondelete"):
        return "onDelete"
    return key
