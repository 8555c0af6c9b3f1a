"""Tests for CLI commands."""

import argparse
from pathlib import Path

import pytest

from dbschema.cli import cmd_diff, cmd_migrate, main
from dbschema.config import CONFIG_FILE_NAME

FIXTURES_PATH = Path(__file__).parent.parent / "fixtures" / "schema"
TABLES_PATH = FIXTURES_PATH / "tables"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ("DBSCHEMA_PROFILE", "DBSCHEMA_PLATFORM", "DBSCHEMA_SCHEMA_NAME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def users_only(tmp_path):
    """Schema directory holding just the users table."""
    schema_dir = tmp_path / "v1"
    schema_dir.mkdir()
    (schema_dir / "users.yaml").write_text((TABLES_PATH / "users.yaml").read_text())
    return schema_dir


def _migrate_args(from_path, to_path, **overrides) -> argparse.Namespace:
    values = {
        "from_path": from_path,
        "to_path": to_path,
        "save_mode": False,
        "output": None,
        "platform": None,
        "profile": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestValidate:
    """Test the validate command."""

    def test_validate_directory(self, capsys):
        """Tables are listed by name with their column count."""
        assert main(["validate", str(TABLES_PATH)]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == [
            "Validated 2 tables:",
            "  - orders (5 columns)",
            "  - users (5 columns)",
        ]

    def test_validate_schema_file_reports_sequences(self, capsys):
        assert main(["validate", str(FIXTURES_PATH / "shop.yaml")]) == 0

        out = capsys.readouterr().out
        assert "Validated 2 tables:" in out
        assert "  - order_lines (3 columns)" in out
        assert "Validated 1 sequences" in out

    def test_validate_missing_path(self, tmp_path, capsys):
        """A missing schema path is a validation error."""
        assert main(["validate", str(tmp_path / "nope")]) == 1
        assert "Validation error: Schema path does not exist" in capsys.readouterr().err

    def test_validate_invalid_yaml(self, tmp_path, capsys):
        bad = tmp_path / "bad.yaml"
        bad.write_text("table: users\ncolumns:\n  - name: id\n")

        assert main(["validate", str(bad)]) == 1
        assert "Column 'id' missing 'type' field" in capsys.readouterr().err


class TestDiff:
    """Test the diff command."""

    def test_no_changes(self, capsys):
        assert main(["diff", str(TABLES_PATH), str(TABLES_PATH)]) == 0
        assert capsys.readouterr().out.strip() == "No changes detected"

    def test_new_table(self, users_only, capsys):
        """Tables only in TO are reported as created."""
        assert main(["diff", str(users_only), str(TABLES_PATH)]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == ["Found 1 changes:", "  create table: orders"]

    def test_removed_table(self, users_only, capsys):
        args = argparse.Namespace(
            from_path=TABLES_PATH, to_path=users_only, platform=None, profile=None
        )
        assert cmd_diff(args) == 0
        assert "  drop table: orders" in capsys.readouterr().out

    def test_changed_column(self, users_only, capsys):
        """Column changes are listed under their table."""
        users = users_only / "users.yaml"
        users.write_text(users.read_text().replace("length: 180", "length: 255"))

        assert main(["diff", str(TABLES_PATH / "users.yaml"), str(users)]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == ["Found 2 changes:", "  alter table: users", "    change column: email"]


class TestMigrate:
    """Test the migrate command."""

    def test_migrate_to_stdout(self, users_only, capsys):
        assert main(["migrate", str(users_only), str(TABLES_PATH)]) == 0

        out = capsys.readouterr().out
        assert "CREATE TABLE orders (" in out
        assert (
            "ALTER TABLE orders ADD CONSTRAINT fk_orders_user FOREIGN KEY (user_id) "
            "REFERENCES users (id) ON DELETE CASCADE;"
        ) in out
        assert all(line.endswith(";") for line in out.strip().splitlines())

    def test_migrate_writes_output_file(self, users_only, tmp_path, capsys):
        output = tmp_path / "migration.sql"

        assert main(
            ["migrate", str(users_only), str(TABLES_PATH), "--output", str(output)]
        ) == 0

        lines = output.read_text().splitlines()
        assert lines[0].startswith("CREATE TABLE orders (")
        assert capsys.readouterr().out.strip() == (
            f"Wrote {len(lines)} statement(s) to {output}"
        )

    def test_migrate_no_changes(self, capsys):
        assert main(["migrate", str(TABLES_PATH), str(TABLES_PATH)]) == 0
        assert capsys.readouterr().out.strip() == "No changes to generate"

    def test_migrate_drops_removed_table(self, users_only, capsys):
        assert cmd_migrate(_migrate_args(TABLES_PATH, users_only)) == 0
        assert capsys.readouterr().out.strip() == "DROP TABLE orders;"

    def test_save_mode_keeps_removed_table(self, users_only, capsys):
        """Save mode leaves out destructive statements."""
        assert cmd_migrate(_migrate_args(TABLES_PATH, users_only, save_mode=True)) == 0
        assert "DROP TABLE" not in capsys.readouterr().out

    def test_migrate_for_mysql(self, users_only, capsys):
        assert main(
            ["migrate", str(users_only), str(TABLES_PATH), "--platform", "mysql"]
        ) == 0

        out = capsys.readouterr().out
        assert "AUTO_INCREMENT" in out
        assert "ENGINE = InnoDB" in out


class TestCreateAndDrop:
    """Test the create and drop commands."""

    def test_create(self, capsys):
        assert main(["create", str(FIXTURES_PATH / "shop.yaml")]) == 0

        out = capsys.readouterr().out
        assert (
            "CREATE SEQUENCE invoice_number_seq INCREMENT BY 1 "
            "MINVALUE 1000 START WITH 1000 CACHE 20;"
        ) in out
        assert "CREATE TABLE products (" in out
        assert out.index("CREATE TABLE products (") < out.index("CREATE TABLE order_lines (")

    def test_drop(self, capsys):
        assert main(["drop", str(FIXTURES_PATH / "shop.yaml")]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == [
            "ALTER TABLE order_lines DROP CONSTRAINT fk_lines_product;",
            "DROP TABLE products;",
            "DROP TABLE order_lines;",
            "DROP SEQUENCE invoice_number_seq CASCADE;",
        ]

    def test_drop_for_mysql_skips_sequences(self, capsys):
        assert main(["drop", str(FIXTURES_PATH / "shop.yaml"), "--platform", "mysql"]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == [
            "ALTER TABLE order_lines DROP FOREIGN KEY fk_lines_product;",
            "DROP TABLE products;",
            "DROP TABLE order_lines;",
        ]


class TestConfiguration:
    """Test platform and profile selection."""

    def test_unknown_platform(self, capsys):
        assert main(["create", str(TABLES_PATH), "--platform", "oracle"]) == 2
        assert "Configuration error: Unknown platform 'oracle'" in capsys.readouterr().err

    def test_platform_from_env(self, monkeypatch, capsys):
        monkeypatch.setenv("DBSCHEMA_PLATFORM", "mysql")

        assert main(["create", str(TABLES_PATH)]) == 0
        assert "AUTO_INCREMENT" in capsys.readouterr().out

    def test_platform_from_profile(self, tmp_path, capsys):
        (tmp_path / CONFIG_FILE_NAME).write_text("[legacy]\nplatform = mysql\n")

        assert main(["drop", str(FIXTURES_PATH / "shop.yaml"), "--profile", "legacy"]) == 0
        assert "DROP FOREIGN KEY" in capsys.readouterr().out

    def test_missing_profile(self, tmp_path, capsys):
        """An explicit profile absent from the config file is a config error."""
        (tmp_path / CONFIG_FILE_NAME).write_text("[legacy]\nplatform = mysql\n")

        assert main(["validate", str(TABLES_PATH), "--profile", "prod"]) == 2
        assert "Profile 'prod' not found" in capsys.readouterr().err

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            main([])
