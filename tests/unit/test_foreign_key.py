"""Tests for ForeignKeyConstraint."""

import gc

from dbschema.platforms import PostgreSQLPlatform
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.index import Index
from dbschema.schema.table import Table


class TestForeignKeyOptions:
    """Tests for referential actions."""

    def test_snake_case_options_accepted(self):
        """on_update/on_delete are stored as onUpdate/onDelete."""
        fk = ForeignKeyConstraint(
            ["user_id"], "users", ["id"], "fk", {"on_delete": "cascade", "on_update": "set null"}
        )
        assert fk.has_option("onDelete")
        assert fk.get_option("on_delete") == "cascade"
        assert fk.on_delete() == "CASCADE"
        assert fk.on_update() == "SET NULL"

    def test_default_actions_are_none(self):
        """Unset, NO ACTION and RESTRICT all mean no action."""
        assert ForeignKeyConstraint(["a"], "t", ["b"]).on_delete() is None
        fk = ForeignKeyConstraint(
            ["a"], "t", ["b"], "fk", {"onDelete": "no action", "onUpdate": "RESTRICT"}
        )
        assert fk.on_delete() is None
        assert fk.on_update() is None


class TestForeignKeyNames:
    """Tests for table and column names."""

    def test_foreign_table_from_string(self):
        """A string foreign table is kept as an identifier."""
        fk = ForeignKeyConstraint(["user_id"], "app.Users", ["id"])
        assert fk.foreign_table_name == "app.Users"
        assert fk.get_unqualified_foreign_table_name() == "users"

    def test_foreign_table_keeps_table_quoting(self):
        """A quoted Table argument stays quoted."""
        fk = ForeignKeyConstraint(["user_id"], Table('"User"'), ["id"])
        assert fk.get_quoted_foreign_table_name(PostgreSQLPlatform()) == '"User"'

    def test_columns(self):
        """Local and foreign columns keep their order."""
        fk = ForeignKeyConstraint(["a", '"B"'], "t", ["x", "y"])
        assert fk.local_columns == ["a", "B"]
        assert fk.get_quoted_local_columns(PostgreSQLPlatform()) == ["a", '"B"']
        assert fk.foreign_columns == ["x", "y"]


class TestLocalTable:
    """Tests for the back-reference to the owning table."""

    def test_local_table_unset(self):
        """A free-standing constraint has no local table."""
        fk = ForeignKeyConstraint(["a"], "t", ["b"])
        assert fk.local_table is None
        assert fk.get_local_table_name() is None

    def test_local_table_is_weak(self):
        """The constraint does not keep its table alive."""
        fk = ForeignKeyConstraint(["a"], "t", ["b"])
        table = Table("orders")
        fk.set_local_table(table)
        assert fk.get_local_table_name() == "orders"
        del table
        gc.collect()
        assert fk.local_table is None


class TestIntersectsIndexColumns:
    """Tests for intersects_index_columns()."""

    def test_intersects(self):
        """Any shared column counts."""
        fk = ForeignKeyConstraint(["user_id", "tenant_id"], "users", ["id", "tenant_id"])
        assert fk.intersects_index_columns(Index("idx", ["TENANT_ID"]))
        assert not fk.intersects_index_columns(Index("idx", ["status"]))
