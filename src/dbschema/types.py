"""Logical column types.

A column carries a logical type, not a raw database type. Each platform turns
the logical type into its own column declaration. Types are stateless
singletons handed out by :func:`get_type`, so two columns of the same type
share one instance and compare equal by class.
"""

from typing import TYPE_CHECKING, Any, TypeAlias

from dbschema.exceptions import DbschemaError, UnknownColumnType

if TYPE_CHECKING:
    from dbschema.platforms.base import AbstractPlatform

TableName: TypeAlias = str
ColumnName: TypeAlias = str
IndexName: TypeAlias = str

__all__ = [
    "TableName",
    "ColumnName",
    "IndexName",
    "Type",
    "IntegerType",
    "SmallIntType",
    "BigIntType",
    "BooleanType",
    "DecimalType",
    "FloatType",
    "StringType",
    "GuidType",
    "TextType",
    "BinaryType",
    "BlobType",
    "DateType",
    "DateTimeType",
    "TimeType",
    "JsonType",
    "get_type",
    "has_type",
    "add_type",
    "get_types_map",
    "is_string_family",
    "is_decimal_family",
]


class Type:
    """Base class for logical column types."""

    name: str = ""

    def get_sql_declaration(
        self, column: dict[str, Any], platform: "AbstractPlatform"
    ) -> str:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __copy__(self) -> "Type":
        return self

    def __deepcopy__(self, memo: dict) -> "Type":
        return self

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    def __str__(self) -> str:
        return self.name


class IntegerType(Type):
    name = "integer"

    def get_sql_declaration(self, column, platform):
        return platform.get_integer_type_declaration_sql(column)


class SmallIntType(Type):
    name = "smallint"

    def get_sql_declaration(self, column, platform):
        return platform.get_smallint_type_declaration_sql(column)


class BigIntType(Type):
    name = "bigint"

    def get_sql_declaration(self, column, platform):
        return platform.get_bigint_type_declaration_sql(column)


class BooleanType(Type):
    name = "boolean"

    def get_sql_declaration(self, column, platform):
        return platform.get_boolean_type_declaration_sql(column)


class DecimalType(Type):
    name = "decimal"

    def get_sql_declaration(self, column, platform):
        return platform.get_decimal_type_declaration_sql(column)


class FloatType(Type):
    name = "float"

    def get_sql_declaration(self, column, platform):
        return platform.get_float_type_declaration_sql(column)


class StringType(Type):
    name = "string"

    def get_sql_declaration(self, column, platform):
        return platform.get_varchar_type_declaration_sql(column)


class GuidType(StringType):
    name = "guid"

    def get_sql_declaration(self, column, platform):
        return platform.get_guid_type_declaration_sql(column)


class TextType(Type):
    name = "text"

    def get_sql_declaration(self, column, platform):
        return platform.get_clob_type_declaration_sql(column)


class BinaryType(Type):
    name = "binary"

    def get_sql_declaration(self, column, platform):
        return platform.get_binary_type_declaration_sql(column)


class BlobType(Type):
    name = "blob"

    def get_sql_declaration(self, column, platform):
        return platform.get_blob_type_declaration_sql(column)


class DateType(Type):
    name = "date"

    def get_sql_declaration(self, column, platform):
        return platform.get_date_type_declaration_sql(column)


class DateTimeType(Type):
    name = "datetime"

    def get_sql_declaration(self, column, platform):
        return platform.get_datetime_type_declaration_sql(column)


class TimeType(Type):
    name = "time"

    def get_sql_declaration(self, column, platform):
        return platform.get_time_type_declaration_sql(column)


class JsonType(Type):
    name = "json"

    def get_sql_declaration(self, column, platform):
        return platform.get_json_type_declaration_sql(column)


_TYPES_MAP: dict[str, type[Type]] = {
    cls.name: cls
    for cls in (
        IntegerType,
        SmallIntType,
        BigIntType,
        BooleanType,
        DecimalType,
        FloatType,
        StringType,
        GuidType,
        TextType,
        BinaryType,
        BlobType,
        DateType,
        DateTimeType,
        TimeType,
        JsonType,
    )
}

_instances: dict[str, Type] = {}


def get_type(name: str) -> Type:
    """Return the shared instance of the logical type registered under name."""
    key = name.lower()
    if key not in _TYPES_MAP:
        raise UnknownColumnType(name)
    if key not in _instances:
        _instances[key] = _TYPES_MAP[key]()
    return _instances[key]


def has_type(name: str) -> bool:
    return name.lower() in _TYPES_MAP


def add_type(name: str, type_class: type[Type]) -> None:
    """Register a custom logical type."""
    key = name.lower()
    if key in _TYPES_MAP:
        raise DbschemaError(f"Type '{name}' already exists.")
    _TYPES_MAP[key] = type_class


def get_types_map() -> dict[str, type[Type]]:
    return dict(_TYPES_MAP)


def is_string_family(column_type: Type) -> bool:
    """Check if length and fixed-width are meaningful for the type."""
    if isinstance(column_type, GuidType):
        return False
    return isinstance(column_type, (StringType, BinaryType))


def is_decimal_family(column_type: Type) -> bool:
    """Check if precision and scale are meaningful for the type."""
    return isinstance(column_type, DecimalType)
