"""Exception classes for dbschema."""

from typing import Optional

__all__ = [
    "DbschemaError",
    "SchemaError",
    "ObjectAlreadyExists",
    "ObjectDoesNotExist",
    "InvalidName",
    "TableAlreadyExists",
    "TableDoesNotExist",
    "ColumnAlreadyExists",
    "ColumnDoesNotExist",
    "IndexAlreadyExists",
    "IndexDoesNotExist",
    "ForeignKeyAlreadyExists",
    "ForeignKeyDoesNotExist",
    "UniqueConstraintDoesNotExist",
    "PrimaryKeyDoesNotExist",
    "SequenceAlreadyExists",
    "SequenceDoesNotExist",
    "NamespaceAlreadyExists",
    "NamedForeignKeyRequired",
    "IndexNameInvalid",
    "InvalidTableName",
    "UnsupportedOperationError",
    "NotSupportedError",
    "UnknownColumnType",
    "SchemaLoadError",
    "ConfigError",
]


class DbschemaError(Exception):
    """Base exception for dbschema."""


class SchemaError(DbschemaError):
    """Base error for violations of the schema model invariants."""


class ObjectAlreadyExists(SchemaError):
    """An operation would register a name that is already taken."""


class ObjectDoesNotExist(SchemaError):
    """An operation references a name absent from the schema graph."""


class InvalidName(SchemaError):
    """A name does not satisfy the identifier rules."""


class TableAlreadyExists(ObjectAlreadyExists):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"The table with name '{table_name}' already exists.")


class TableDoesNotExist(ObjectDoesNotExist):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"There is no table with name '{table_name}' in the schema.")


class ColumnAlreadyExists(ObjectAlreadyExists):
    def __init__(self, table_name: str, column_name: str):
        self.table_name = table_name
        self.column_name = column_name
        super().__init__(
            f"The column '{column_name}' on table '{table_name}' already exists."
        )


class ColumnDoesNotExist(ObjectDoesNotExist):
    def __init__(self, column_name: str, table_name: str):
        self.column_name = column_name
        self.table_name = table_name
        super().__init__(
            f"There is no column with name '{column_name}' on table '{table_name}'."
        )


class IndexAlreadyExists(ObjectAlreadyExists):
    def __init__(self, index_name: str, table_name: str):
        self.index_name = index_name
        self.table_name = table_name
        super().__init__(
            f"An index with name '{index_name}' was already defined on table '{table_name}'."
        )


class IndexDoesNotExist(ObjectDoesNotExist):
    def __init__(self, index_name: str, table_name: str):
        self.index_name = index_name
        self.table_name = table_name
        super().__init__(f"Index '{index_name}' does not exist on table '{table_name}'.")


class ForeignKeyAlreadyExists(ObjectAlreadyExists):
    def __init__(self, constraint_name: str, table_name: str):
        self.constraint_name = constraint_name
        self.table_name = table_name
        super().__init__(
            f"A foreign key with name '{constraint_name}' was already defined "
            f"on table '{table_name}'."
        )


class ForeignKeyDoesNotExist(ObjectDoesNotExist):
    def __init__(self, constraint_name: str, table_name: str):
        self.constraint_name = constraint_name
        self.table_name = table_name
        super().__init__(
            f"There exists no foreign key with the name '{constraint_name}' "
            f"on table '{table_name}'."
        )


class UniqueConstraintDoesNotExist(ObjectDoesNotExist):
    def __init__(self, constraint_name: str, table_name: str):
        self.constraint_name = constraint_name
        self.table_name = table_name
        super().__init__(
            f"There exists no unique constraint with the name '{constraint_name}' "
            f"on table '{table_name}'."
        )


class PrimaryKeyDoesNotExist(ObjectDoesNotExist):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' has no primary key.")


class SequenceAlreadyExists(ObjectAlreadyExists):
    def __init__(self, sequence_name: str):
        self.sequence_name = sequence_name
        super().__init__(f"The sequence '{sequence_name}' already exists.")


class SequenceDoesNotExist(ObjectDoesNotExist):
    def __init__(self, sequence_name: str):
        self.sequence_name = sequence_name
        super().__init__(f"There exists no sequence with the name '{sequence_name}'.")


class NamespaceAlreadyExists(ObjectAlreadyExists):
    def __init__(self, namespace_name: str):
        self.namespace_name = namespace_name
        super().__init__(f"The namespace with name '{namespace_name}' already exists.")


class NamedForeignKeyRequired(SchemaError):
    """The platform cannot handle an unnamed foreign key."""

    def __init__(self, table_name: str, local_columns: list[str]):
        self.table_name = table_name
        self.local_columns = local_columns
        super().__init__(
            f"The performed schema operation on '{table_name}' requires a named "
            f"foreign key, but the given foreign key from "
            f"({', '.join(local_columns)}) is currently unnamed."
        )


class IndexNameInvalid(InvalidName):
    def __init__(self, index_name: str):
        self.index_name = index_name
        super().__init__(
            f"Invalid index-name {index_name} given, has to be [a-zA-Z0-9_]"
        )


class InvalidTableName(InvalidName):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Invalid table name specified: '{table_name}'.")


class UnsupportedOperationError(DbschemaError):
    """The operation is deliberately not supported by the schema model."""


class NotSupportedError(DbschemaError):
    """The platform does not support the requested feature."""

    def __init__(self, feature: str, platform: Optional[str] = None):
        self.feature = feature
        self.platform = platform
        where = f" by platform '{platform}'" if platform else ""
        super().__init__(f"Operation '{feature}' is not supported{where}.")


class UnknownColumnType(DbschemaError):
    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(
            f"Unknown column type '{type_name}' requested. Register custom "
            "types with dbschema.types.add_type() before using them."
        )


class SchemaLoadError(DbschemaError):
    """Error loading schema definition files."""


class ConfigError(DbschemaError):
    """Error in configuration."""
