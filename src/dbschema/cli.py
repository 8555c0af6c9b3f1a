"""Command-line interface for dbschema."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dbschema.config import Config
from dbschema.exceptions import ConfigError
from dbschema.schema.comparator import Comparator
from dbschema.schema.diff import SchemaDiff
from dbschema.schema.loader import load_schema


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    parser = argparse.ArgumentParser(
        prog="dbschema",
        description="Compare database schemas and generate DDL",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--platform",
        help="SQL platform: postgresql, mysql or ansi (default: from config)",
    )
    common.add_argument("--profile", help="Profile name in ~/.dbschema.cfg")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser(
        "validate", parents=[common], help="Validate schema files"
    )
    validate_parser.add_argument("schema_path", type=Path)

    diff_parser = subparsers.add_parser(
        "diff", parents=[common], help="Show differences between two schemas"
    )
    diff_parser.add_argument("from_path", type=Path)
    diff_parser.add_argument("to_path", type=Path)

    migrate_parser = subparsers.add_parser(
        "migrate", parents=[common], help="Generate SQL migrating FROM to TO"
    )
    migrate_parser.add_argument("from_path", type=Path)
    migrate_parser.add_argument("to_path", type=Path)
    migrate_parser.add_argument(
        "--save-mode",
        action="store_true",
        help="Skip statements that drop tables, sequences or foreign keys",
    )
    migrate_parser.add_argument(
        "--output",
        type=Path,
        help="Output file path (default: stdout)",
    )

    create_parser = subparsers.add_parser(
        "create", parents=[common], help="Generate SQL creating a schema"
    )
    create_parser.add_argument("schema_path", type=Path)

    drop_parser = subparsers.add_parser(
        "drop", parents=[common], help="Generate SQL dropping a schema"
    )
    drop_parser.add_argument("schema_path", type=Path)

    args = parser.parse_args(argv)

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "diff":
        return cmd_diff(args)
    elif args.command == "migrate":
        return cmd_migrate(args)
    elif args.command == "create":
        return cmd_create(args)
    elif args.command == "drop":
        return cmd_drop(args)
    else:
        print(f"Command '{args.command}' not yet implemented", file=sys.stderr)
        return 1


def _load_config(args: argparse.Namespace) -> Config:
    return Config.from_env(
        platform=getattr(args, "platform", None),
        profile=getattr(args, "profile", None),
    )


def _format_sql(statements: list[str]) -> str:
    return "\n".join(f"{sql};" for sql in statements)


def _write_sql(statements: list[str], output: Optional[Path] = None) -> None:
    text = _format_sql(statements)
    if output is not None:
        output.write_text(text + "\n")
        print(f"Wrote {len(statements)} statement(s) to {output}")
    else:
        print(text)


def _describe_diff(diff: SchemaDiff) -> list[str]:
    lines = []
    for name in diff.new_namespaces:
        lines.append(f"  create namespace: {name}")
    for table in diff.new_tables.values():
        lines.append(f"  create table: {table.name}")
    for table_diff in diff.changed_tables.values():
        lines.append(f"  alter table: {table_diff.name}")
        for name in table_diff.added_columns:
            lines.append(f"    add column: {name}")
        for name in table_diff.changed_columns:
            lines.append(f"    change column: {name}")
        for name in table_diff.removed_columns:
            lines.append(f"    drop column: {name}")
        for old_name, column in table_diff.renamed_columns.items():
            lines.append(f"    rename column: {old_name} -> {column.name}")
        for name in table_diff.added_indexes:
            lines.append(f"    add index: {name}")
        for name in table_diff.changed_indexes:
            lines.append(f"    change index: {name}")
        for name in table_diff.removed_indexes:
            lines.append(f"    drop index: {name}")
        for fk in table_diff.added_foreign_keys:
            lines.append(f"    add foreign key: {fk.name}")
        for fk in table_diff.changed_foreign_keys:
            lines.append(f"    change foreign key: {fk.name}")
        for fk in table_diff.removed_foreign_keys:
            lines.append(f"    drop foreign key: {fk.name}")
    for name in diff.removed_tables:
        lines.append(f"  drop table: {name}")
    for fk in diff.orphaned_foreign_keys:
        lines.append(f"  drop foreign key: {fk.name}")
    for sequence in diff.new_sequences:
        lines.append(f"  create sequence: {sequence.name}")
    for sequence in diff.changed_sequences:
        lines.append(f"  alter sequence: {sequence.name}")
    for sequence in diff.removed_sequences:
        lines.append(f"  drop sequence: {sequence.name}")
    return lines


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate schema files."""
    try:
        config = _load_config(args)
        schema = load_schema(args.schema_path, config.to_schema_config())
        tables = schema.get_tables()
        print(f"Validated {len(tables)} tables:")
        for table in sorted(tables, key=lambda t: t.name.lower()):
            print(f"  - {table.name} ({len(table.get_columns())} columns)")
        sequences = schema.get_sequences()
        if sequences:
            print(f"Validated {len(sequences)} sequences")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Validation error: {e}", file=sys.stderr)
        return 1


def _compare_paths(args: argparse.Namespace, config: Config) -> SchemaDiff:
    schema_config = config.to_schema_config()
    from_schema = load_schema(args.from_path, schema_config)
    to_schema = load_schema(args.to_path, schema_config)
    return Comparator().compare(from_schema, to_schema)


def cmd_diff(args: argparse.Namespace) -> int:
    """Show the changes needed to turn FROM into TO."""
    try:
        config = _load_config(args)
        diff = _compare_paths(args, config)

        if diff.is_empty():
            print("No changes detected")
            return 0

        lines = _describe_diff(diff)
        print(f"Found {len(lines)} changes:")
        for line in lines:
            print(line)
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Diff error: {e}", file=sys.stderr)
        return 1


def cmd_migrate(args: argparse.Namespace) -> int:
    """Generate migration SQL from FROM to TO."""
    try:
        config = _load_config(args)
        platform = config.get_platform()
        diff = _compare_paths(args, config)

        if diff.is_empty():
            print("No changes to generate")
            return 0

        if args.save_mode:
            statements = diff.to_save_sql(platform)
        else:
            statements = diff.to_sql(platform)

        _write_sql(statements, args.output)
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Migration error: {e}", file=sys.stderr)
        return 1


def cmd_create(args: argparse.Namespace) -> int:
    """Generate SQL that creates a schema in an empty database."""
    try:
        config = _load_config(args)
        schema = load_schema(args.schema_path, config.to_schema_config())
        _write_sql(schema.to_sql(config.get_platform()))
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Create error: {e}", file=sys.stderr)
        return 1


def cmd_drop(args: argparse.Namespace) -> int:
    """Generate SQL that drops every table and sequence of a schema."""
    try:
        config = _load_config(args)
        schema = load_schema(args.schema_path, config.to_schema_config())
        _write_sql(schema.to_drop_sql(config.get_platform()))
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Drop error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
