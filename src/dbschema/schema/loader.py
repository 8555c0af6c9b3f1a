"""Load schema definitions from YAML files."""

from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import yaml

from dbschema.exceptions import DbschemaError, SchemaLoadError
from dbschema.schema.column import Column
from dbschema.schema.schema import Schema, SchemaConfig
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table

VALID_SCHEMA_FIELDS = {"name", "tables", "sequences"}

VALID_TABLE_FIELDS = {
    "table",
    "columns",
    "primary_key",
    "indexes",
    "unique_constraints",
    "foreign_keys",
    "options",
    "comment",
}

VALID_COLUMN_FIELDS = {
    "name",
    "type",
    "nullable",
    "notnull",
    "default",
    "length",
    "precision",
    "scale",
    "unsigned",
    "fixed",
    "autoincrement",
    "comment",
    "column_definition",
    "platform_options",
    "custom_schema_options",
}

VALID_INDEX_FIELDS = {"name", "columns", "unique", "flags", "options"}

VALID_UNIQUE_CONSTRAINT_FIELDS = {"name", "columns", "flags", "options"}

VALID_FOREIGN_KEY_FIELDS = {
    "name",
    "columns",
    "foreign_table",
    "foreign_columns",
    "on_update",
    "on_delete",
    "options",
}

VALID_SEQUENCE_FIELDS = {"name", "allocation_size", "initial_value", "cache_size"}


def load_schema(schema_path: Path, config: Optional[SchemaConfig] = None) -> Schema:
    """Load schema from a directory of YAML files or a single file."""
    if schema_path.is_file():
        return _load_single_file(schema_path, config)
    elif schema_path.is_dir():
        return _load_directory(schema_path, config)
    else:
        raise SchemaLoadError(f"Schema path does not exist: {schema_path}")


def _read_yaml(file_path: Path) -> dict:
    with open(file_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SchemaLoadError(f"Invalid YAML in {file_path}: {e}") from e
    if data is None:
        raise SchemaLoadError(f"Empty YAML file: {file_path}")
    if not isinstance(data, dict):
        raise SchemaLoadError(f"Expected a mapping at the top of {file_path}")
    return data


def _is_schema_document(data: dict) -> bool:
    return "tables" in data or "sequences" in data


def _load_directory(directory: Path, config: Optional[SchemaConfig]) -> Schema:
    """Load schema from a directory of YAML files."""
    tables: dict[str, Table] = {}
    sequences: list[Sequence] = []
    name = None
    for yaml_file in sorted(directory.glob("*.yaml")):
        data = _read_yaml(yaml_file)
        if _is_schema_document(data):
            name = data.get("name") or name
            file_tables, file_sequences = _parse_schema_dict(data)
        else:
            file_tables, file_sequences = [_parse_table_dict(data)], []
        for table in file_tables:
            key = table.name.lower()
            if key in tables:
                raise SchemaLoadError(
                    f"Duplicate table name '{table.name}' found in directory"
                )
            tables[key] = table
        sequences.extend(file_sequences)
    return _build_schema(name, list(tables.values()), sequences, config)


def _load_single_file(file_path: Path, config: Optional[SchemaConfig]) -> Schema:
    """Load schema from a single YAML file."""
    data = _read_yaml(file_path)

    if _is_schema_document(data):
        tables, sequences = _parse_schema_dict(data)
        return _build_schema(data.get("name"), tables, sequences, config)
    else:
        return _build_schema(None, [_parse_table_dict(data)], [], config)


def _build_schema(
    name: Optional[str],
    tables: list[Table],
    sequences: list[Sequence],
    config: Optional[SchemaConfig],
) -> Schema:
    config = config or SchemaConfig()
    if name:
        config = replace(config, name=name)
    try:
        return Schema(tables, sequences, config)
    except DbschemaError as e:
        raise SchemaLoadError(str(e)) from e


def _check_fields(data: Any, valid: set, what: str) -> None:
    if not isinstance(data, dict):
        raise SchemaLoadError(f"Expected a mapping for {what} definition, got: {data!r}")
    unknown_fields = set(data.keys()) - valid
    if unknown_fields:
        raise SchemaLoadError(
            f"Unknown field(s) in {what} definition: {', '.join(sorted(unknown_fields))}"
        )


def _parse_schema_dict(data: dict) -> tuple[list[Table], list[Sequence]]:
    """Parse a document holding a list of tables and sequences."""
    _check_fields(data, VALID_SCHEMA_FIELDS, "schema")
    names = set()
    tables = []
    for table_data in data.get("tables") or []:
        table = _parse_table_dict(table_data)
        if table.name.lower() in names:
            raise SchemaLoadError(f"Duplicate table name '{table.name}' in file")
        names.add(table.name.lower())
        tables.append(table)
    sequences = [_parse_sequence(s) for s in data.get("sequences") or []]
    return tables, sequences


def _parse_sequence(data: dict) -> Sequence:
    _check_fields(data, VALID_SEQUENCE_FIELDS, "sequence")
    name = data.get("name")
    if not name:
        raise SchemaLoadError("Sequence definition missing 'name' field")
    return Sequence(
        name,
        data.get("allocation_size", 1),
        data.get("initial_value", 1),
        data.get("cache_size"),
    )


def _parse_table_dict(data: dict) -> Table:
    """Parse a table definition from a dictionary."""
    _check_fields(data, VALID_TABLE_FIELDS, "table")

    name = data.get("table")
    if not name:
        raise SchemaLoadError("Table definition missing 'table' field")

    try:
        return _build_table(name, data)
    except SchemaLoadError:
        raise
    except DbschemaError as e:
        raise SchemaLoadError(f"Invalid table '{name}': {e}") from e


def _build_table(name: str, data: dict) -> Table:
    options = dict(data.get("options") or {})
    if data.get("comment") is not None:
        options["comment"] = data["comment"]

    columns = [_parse_column(col) for col in data.get("columns") or []]
    table = Table(name, columns, options=options)

    if pk_data := data.get("primary_key"):
        if isinstance(pk_data, dict):
            table.set_primary_key(pk_data.get("columns", []), pk_data.get("name"))
        else:
            table.set_primary_key(list(pk_data))

    for index_data in data.get("indexes") or []:
        _check_fields(index_data, VALID_INDEX_FIELDS, "index")
        columns = index_data.get("columns") or []
        if index_data.get("unique"):
            table.add_unique_index(
                columns, index_data.get("name"), index_data.get("options")
            )
        else:
            table.add_index(
                columns,
                index_data.get("name"),
                index_data.get("flags"),
                index_data.get("options"),
            )

    for uc_data in data.get("unique_constraints") or []:
        _check_fields(uc_data, VALID_UNIQUE_CONSTRAINT_FIELDS, "unique constraint")
        table.add_unique_constraint(
            uc_data.get("columns") or [],
            uc_data.get("name"),
            uc_data.get("flags"),
            uc_data.get("options"),
        )

    for fk_data in data.get("foreign_keys") or []:
        _check_fields(fk_data, VALID_FOREIGN_KEY_FIELDS, "foreign key")
        foreign_table = fk_data.get("foreign_table")
        if not foreign_table:
            raise SchemaLoadError(
                f"Foreign key in table '{name}' missing 'foreign_table' field"
            )
        fk_options = dict(fk_data.get("options") or {})
        if fk_data.get("on_update"):
            fk_options["onUpdate"] = fk_data["on_update"]
        if fk_data.get("on_delete"):
            fk_options["onDelete"] = fk_data["on_delete"]
        table.add_foreign_key_constraint(
            foreign_table,
            fk_data.get("columns") or [],
            fk_data.get("foreign_columns") or [],
            fk_options,
            fk_data.get("name"),
        )

    return table


def _parse_column(data: dict) -> Column:
    """Parse a column definition from a dictionary."""
    _check_fields(data, VALID_COLUMN_FIELDS, "column")

    name = data.get("name")
    if not name:
        raise SchemaLoadError("Column definition missing 'name' field")

    col_type = data.get("type")
    if not col_type:
        raise SchemaLoadError(f"Column '{name}' missing 'type' field")

    options = {k: v for k, v in data.items() if k not in ("name", "type", "nullable")}
    if "nullable" in data:
        options["notnull"] = not data["nullable"]

    return Column(name, col_type, options)
