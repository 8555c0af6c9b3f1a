"""Sequence definition."""

from typing import TYPE_CHECKING, Any, Optional

from dbschema.schema.asset import AbstractAsset

if TYPE_CHECKING:
    from dbschema.schema.table import Table


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


class Sequence(AbstractAsset):
    """A database sequence.

    ``cache_size`` of None means the platform default; 0 disables caching.
    """

    def __init__(
        self,
        name: str,
        allocation_size: int = 1,
        initial_value: int = 1,
        cache_size: Optional[int] = None,
    ):
        super().__init__()
        self._set_name(name)
        self.allocation_size = allocation_size
        self.initial_value = initial_value
        self.cache_size = cache_size

    @property
    def allocation_size(self) -> int:
        return self._allocation_size

    @allocation_size.setter
    def allocation_size(self, value: Any) -> None:
        self._allocation_size = _positive_int(value, 1)

    @property
    def initial_value(self) -> int:
        return self._initial_value

    @initial_value.setter
    def initial_value(self, value: Any) -> None:
        self._initial_value = _positive_int(value, 1)

    @property
    def cache_size(self) -> Optional[int]:
        return self._cache_size

    @cache_size.setter
    def cache_size(self, value: Any) -> None:
        if value is None:
            self._cache_size = None
            return
        try:
            value = int(value)
        except (TypeError, ValueError):
            self._cache_size = None
            return
        self._cache_size = value if value >= 0 else None

    def equals(self, other: "Sequence") -> bool:
        """Compare allocation size, initial value and cache size."""
        return (
            self.allocation_size == other.allocation_size
            and self.initial_value == other.initial_value
            and self.cache_size == other.cache_size
        )

    def is_autoincrement_for(self, table: "Table") -> bool:
        """Check if this is the implicit sequence behind table's autoincrement key."""
        primary_key = table.get_primary_key()
        if primary_key is None:
            return False
        pk_columns = primary_key.columns
        if len(pk_columns) != 1:
            return False
        column = table.get_column(pk_columns[0])
        if not column.autoincrement:
            return False

        namespace = table.namespace_name
        table_name = table.get_shortest_name(namespace)
        column_name = column.get_shortest_name(namespace)
        return f"{table_name}_{column_name}_seq" == self.get_shortest_name(namespace)
