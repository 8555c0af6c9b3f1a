"""Export schema models to YAML files."""

from pathlib import Path
from typing import Any

import yaml

from dbschema.schema.asset import AbstractAsset
from dbschema.schema.column import DEFAULT_PRECISION, DEFAULT_SCALE, Column
from dbschema.schema.schema import Schema
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table

SEQUENCES_FILE = "sequences.yaml"


def _asset_name(asset: AbstractAsset) -> str:
    return f'"{asset.name}"' if asset.quoted else asset.name


def table_to_dict(table: Table) -> dict[str, Any]:
    """Convert a Table to a dictionary suitable for YAML export."""
    data: dict[str, Any] = {"table": _asset_name(table)}

    if table.comment:
        data["comment"] = table.comment

    options = {k: v for k, v in table.options.items() if k != "comment"}
    if options:
        data["options"] = options

    data["columns"] = [_column_to_dict(col) for col in table.get_columns()]

    primary_key = table.get_primary_key()
    if primary_key is not None:
        data["primary_key"] = {
            "columns": primary_key.columns,
            "name": primary_key.name,
        }

    indexes = []
    for index in table.get_indexes().values():
        if index.is_primary:
            continue
        index_data: dict[str, Any] = {"name": index.name, "columns": index.columns}
        if index.is_unique:
            index_data["unique"] = True
        if index.flags:
            index_data["flags"] = index.flags
        if index.options:
            index_data["options"] = index.options
        indexes.append(index_data)
    if indexes:
        data["indexes"] = indexes

    unique_constraints = []
    for constraint in table.get_unique_constraints().values():
        uc_data: dict[str, Any] = {
            "name": constraint.name,
            "columns": constraint.columns,
        }
        if constraint.flags:
            uc_data["flags"] = constraint.flags
        if constraint.options:
            uc_data["options"] = constraint.options
        unique_constraints.append(uc_data)
    if unique_constraints:
        data["unique_constraints"] = unique_constraints

    foreign_keys = []
    for fk in table.get_foreign_keys().values():
        fk_data: dict[str, Any] = {
            "name": fk.name,
            "columns": fk.local_columns,
            "foreign_table": _asset_name(fk.foreign_table),
            "foreign_columns": fk.foreign_columns,
        }
        options = fk.options
        if options.get("onUpdate"):
            fk_data["on_update"] = options.pop("onUpdate")
        if options.get("onDelete"):
            fk_data["on_delete"] = options.pop("onDelete")
        options = {k: v for k, v in options.items() if v is not None}
        if options:
            fk_data["options"] = options
        foreign_keys.append(fk_data)
    if foreign_keys:
        data["foreign_keys"] = foreign_keys

    return data


def _column_to_dict(col: Column) -> dict[str, Any]:
    """Convert a Column to a dictionary, leaving out default values."""
    data: dict[str, Any] = {"name": _asset_name(col), "type": col.type.name}

    if not col.notnull:
        data["nullable"] = True

    if col.default is not None:
        data["default"] = col.default

    if col.length is not None:
        data["length"] = col.length

    if col.precision != DEFAULT_PRECISION:
        data["precision"] = col.precision

    if col.scale != DEFAULT_SCALE:
        data["scale"] = col.scale

    for flag in ("unsigned", "fixed", "autoincrement"):
        if getattr(col, flag):
            data[flag] = True

    if col.comment is not None:
        data["comment"] = col.comment

    if col.column_definition is not None:
        data["column_definition"] = col.column_definition

    if col.platform_options:
        data["platform_options"] = dict(col.platform_options)

    if col.custom_schema_options:
        data["custom_schema_options"] = dict(col.custom_schema_options)

    return data


def _sequence_to_dict(sequence: Sequence) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": _asset_name(sequence),
        "allocation_size": sequence.allocation_size,
        "initial_value": sequence.initial_value,
    }
    if sequence.cache_size is not None:
        data["cache_size"] = sequence.cache_size
    return data


def schema_to_dict(schema: Schema) -> dict[str, Any]:
    """Convert a whole Schema to one document with tables and sequences."""
    data: dict[str, Any] = {"name": schema.name}
    sequences = schema.get_sequences()
    if sequences:
        data["sequences"] = [_sequence_to_dict(s) for s in sequences]
    data["tables"] = [table_to_dict(t) for t in schema.get_tables()]
    return data


def _dump(data: dict[str, Any]) -> str:
    return yaml.dump(
        data, default_flow_style=False, sort_keys=False, allow_unicode=True
    )


def export_table_yaml(table: Table) -> str:
    """Export a single table to YAML string."""
    return _dump(table_to_dict(table))


def export_schema_yaml(schema: Schema) -> str:
    """Export a schema to a single YAML string."""
    return _dump(schema_to_dict(schema))


def export_schema_to_directory(schema: Schema, output_dir: Path) -> list[Path]:
    """Export all tables in a schema to individual YAML files.

    Sequences, if any, go to one extra ``sequences.yaml`` document.
    Returns list of created file paths.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    created_files = []

    for table in sorted(schema.get_tables(), key=lambda t: t.name.lower()):
        file_path = output_dir / f"{table.name}.yaml"
        file_path.write_text(export_table_yaml(table))
        created_files.append(file_path)

    sequences = schema.get_sequences()
    if sequences:
        file_path = output_dir / SEQUENCES_FILE
        file_path.write_text(
            _dump({"sequences": [_sequence_to_dict(s) for s in sequences]})
        )
        created_files.append(file_path)

    return created_files
