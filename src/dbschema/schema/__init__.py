"""Schema model, comparator, diff and YAML modules."""

from dbschema.schema.asset import AbstractAsset, Identifier, generate_identifier_name
from dbschema.schema.column import Column
from dbschema.schema.comparator import Comparator, compare_schemas
from dbschema.schema.diff import ColumnDiff, SchemaDiff, TableDiff
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.index import Index, UniqueConstraint
from dbschema.schema.schema import Schema, SchemaConfig
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table
from dbschema.schema.view import View

__all__ = [
    "AbstractAsset",
    "Column",
    "ColumnDiff",
    "Comparator",
    "ForeignKeyConstraint",
    "Identifier",
    "Index",
    "Schema",
    "SchemaConfig",
    "SchemaDiff",
    "Sequence",
    "Table",
    "TableDiff",
    "UniqueConstraint",
    "View",
    "compare_schemas",
    "generate_identifier_name",
]
