"""Tests for the SQL platforms."""

import pytest

from dbschema.exceptions import ConfigError, NotSupportedError
from dbschema.platforms import (
    AbstractPlatform,
    MySQLPlatform,
    PostgreSQLPlatform,
    get_platform,
)
from dbschema.schema.column import Column
from dbschema.schema.foreign_key import ForeignKeyConstraint
from dbschema.schema.index import Index
from dbschema.schema.sequence import Sequence
from dbschema.schema.table import Table


def _declare(platform, column: Column) -> str:
    return platform.get_column_declaration_sql(column.name, column.to_dict())


class TestGetPlatform:
    """Tests for platform lookup."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("postgresql", PostgreSQLPlatform),
            ("Postgres", PostgreSQLPlatform),
            ("mysql", MySQLPlatform),
            ("ansi", AbstractPlatform),
        ],
    )
    def test_known_names(self, name, expected):
        """Platforms are looked up case-insensitively."""
        assert type(get_platform(name)) is expected

    def test_unknown_name(self):
        """Unknown platforms are a configuration error."""
        with pytest.raises(ConfigError, match="Unknown platform 'oracle'"):
            get_platform("oracle")


class TestQuoting:
    """Tests for identifier and literal quoting."""

    def test_ansi_quotes(self):
        """ANSI quotes with double quotes and doubles embedded ones."""
        platform = AbstractPlatform()
        assert platform.quote_identifier("app.users") == '"app"."users"'
        assert platform.quote_single_identifier('a"b') == '"a""b"'

    def test_mysql_backticks(self):
        """MySQL quotes with backticks."""
        assert MySQLPlatform().quote_identifier("users") == "`users`"

    def test_string_literal(self):
        """Single quotes in literals are doubled."""
        assert AbstractPlatform().quote_string_literal("it's") == "'it''s'"

    def test_quoted_table_name(self):
        """Quoted names are quoted for the target platform only."""
        table = Table('"User"')
        assert table.get_quoted_name(PostgreSQLPlatform()) == '"User"'
        assert table.get_quoted_name(MySQLPlatform()) == "`User`"
        assert Table("user").get_quoted_name(MySQLPlatform()) == "user"


class TestColumnDeclarations:
    """Tests for column declarations."""

    def test_postgresql_types(self):
        """PostgreSQL maps logical types to its own names."""
        platform = PostgreSQLPlatform()
        assert _declare(platform, Column("id", "integer", {"autoincrement": True})) == "id SERIAL NOT NULL"
        assert _declare(platform, Column("id", "bigint", {"autoincrement": True})) == "id BIGSERIAL NOT NULL"
        assert _declare(platform, Column("n", "smallint")) == "n SMALLINT NOT NULL"
        assert _declare(platform, Column("u", "guid")) == "u UUID NOT NULL"
        assert _declare(platform, Column("b", "blob")) == "b BYTEA NOT NULL"
        assert _declare(platform, Column("j", "json", {"notnull": False})) == "j JSON DEFAULT NULL"
        assert (
            _declare(platform, Column("t", "datetime", {"default": "CURRENT_TIMESTAMP"}))
            == "t TIMESTAMP(0) WITHOUT TIME ZONE DEFAULT CURRENT_TIMESTAMP NOT NULL"
        )

    def test_decimal_and_defaults(self):
        """Decimals carry precision and scale, defaults are quoted by type."""
        platform = PostgreSQLPlatform()
        column = Column("balance", "decimal", {"precision": 12, "scale": 2, "default": 0})
        assert _declare(platform, column) == "balance NUMERIC(12, 2) DEFAULT '0' NOT NULL"
        assert _declare(platform, Column("n", "integer", {"default": 5})) == "n INT DEFAULT 5 NOT NULL"
        assert (
            _declare(platform, Column("active", "boolean", {"default": True}))
            == "active BOOLEAN DEFAULT true NOT NULL"
        )

    def test_fixed_string(self):
        """Fixed strings become CHAR."""
        column = Column("code", "string", {"length": 3, "fixed": True})
        assert _declare(AbstractPlatform(), column) == "code CHAR(3) NOT NULL"

    def test_column_definition_wins(self):
        """A raw column definition replaces the generated declaration."""
        column = Column("geom", "string", {"column_definition": "GEOMETRY NOT NULL"})
        assert _declare(PostgreSQLPlatform(), column) == "geom GEOMETRY NOT NULL"

    def test_mysql_types(self):
        """MySQL uses its own integer, boolean and text declarations."""
        platform = MySQLPlatform()
        column = Column("id", "integer", {"autoincrement": True, "unsigned": True})
        assert _declare(platform, column) == "id INT UNSIGNED AUTO_INCREMENT NOT NULL"
        assert (
            _declare(platform, Column("flag", "boolean", {"default": False}))
            == "flag TINYINT(1) DEFAULT 0 NOT NULL"
        )
        assert _declare(platform, Column("body", "text")) == "body LONGTEXT NOT NULL"
        assert _declare(platform, Column("s", "text", {"length": 200})) == "s TINYTEXT NOT NULL"
        assert _declare(platform, Column("d", "datetime")) == "d DATETIME NOT NULL"

    def test_mysql_inline_comment(self):
        """MySQL puts column comments into the declaration."""
        column = Column("note", "string", {"comment": "it's free"})
        assert _declare(MySQLPlatform(), column) == (
            "note VARCHAR(255) NOT NULL COMMENT 'it''s free'"
        )


class TestCreateTable:
    """Tests for CREATE TABLE."""

    def _table(self) -> Table:
        table = Table("events", options={"comment": "Audit log"})
        table.add_column("id", "integer")
        table.add_column("kind", "string", length=20, comment="Event kind")
        table.set_primary_key(["id"])
        table.add_index(["kind"], "idx_kind")
        table.add_unique_constraint(["kind"], "uq_kind")
        return table

    def test_postgresql(self):
        """PostgreSQL creates indexes and comments in separate statements."""
        assert PostgreSQLPlatform().render_create_table(self._table()) == [
            "CREATE TABLE events (id INT NOT NULL, kind VARCHAR(20) NOT NULL, "
            "CONSTRAINT uq_kind UNIQUE (kind), PRIMARY KEY(id))",
            "CREATE INDEX idx_kind ON events (kind)",
            "COMMENT ON TABLE events IS 'Audit log'",
            "COMMENT ON COLUMN events.kind IS 'Event kind'",
        ]

    def test_mysql(self):
        """MySQL declares indexes inline and appends table options."""
        table = self._table()
        table.add_option("charset", "utf8mb4")
        assert MySQLPlatform().render_create_table(table) == [
            "CREATE TABLE events (id INT NOT NULL, "
            "kind VARCHAR(20) NOT NULL COMMENT 'Event kind', "
            "CONSTRAINT uq_kind UNIQUE (kind), PRIMARY KEY(id), INDEX idx_kind (kind)) "
            "DEFAULT CHARACTER SET utf8mb4 ENGINE = InnoDB COMMENT = 'Audit log'"
        ]

    def test_ansi_has_no_comments(self):
        """The ANSI platform skips COMMENT ON statements."""
        sql = AbstractPlatform().render_create_table(self._table())
        assert len(sql) == 2
        assert sql[1] == "CREATE INDEX idx_kind ON events (kind)"


class TestIndexesAndForeignKeys:
    """Tests for index and foreign key statements."""

    def test_partial_index(self):
        """Only PostgreSQL renders the WHERE clause of a partial index."""
        index = Index("idx_active", ["email"], options={"where": "active"})
        assert PostgreSQLPlatform().render_create_index(index, "users") == (
            "CREATE INDEX idx_active ON users (email) WHERE active"
        )
        assert AbstractPlatform().render_create_index(index, "users") == (
            "CREATE INDEX idx_active ON users (email)"
        )

    def test_primary_index(self):
        """Primary indexes are added and dropped through ALTER TABLE."""
        index = Index("primary", ["id"], True, True)
        assert AbstractPlatform().render_create_index(index, "t") == (
            "ALTER TABLE t ADD PRIMARY KEY (id)"
        )
        assert AbstractPlatform().render_drop_index(index, "t") == (
            "ALTER TABLE t DROP PRIMARY KEY"
        )

    def test_mysql_drop_index(self):
        """MySQL names the table when dropping an index."""
        index = Index("idx_kind", ["kind"])
        assert MySQLPlatform().render_drop_index(index, "events") == (
            "DROP INDEX idx_kind ON events"
        )

    def test_rename_index(self):
        """Each platform renames indexes its own way."""
        index = Index("idx_new", ["kind"])
        assert PostgreSQLPlatform().get_rename_index_sql("idx_old", index, "t") == [
            "ALTER INDEX idx_old RENAME TO idx_new"
        ]
        assert MySQLPlatform().get_rename_index_sql("idx_old", index, "t") == [
            "ALTER TABLE t RENAME INDEX idx_old TO idx_new"
        ]
        assert AbstractPlatform().get_rename_index_sql("idx_old", index, "t") == [
            "DROP INDEX idx_old",
            "CREATE INDEX idx_new ON t (kind)",
        ]

    def test_foreign_key(self):
        """Foreign keys carry their referential actions."""
        constraint = ForeignKeyConstraint(
            ["user_id"], "users", ["id"], "fk_user", {"on_update": "cascade", "onDelete": "set null"}
        )
        assert PostgreSQLPlatform().render_create_foreign_key(constraint, "orders") == (
            "ALTER TABLE orders ADD CONSTRAINT fk_user FOREIGN KEY (user_id) "
            "REFERENCES users (id) ON UPDATE CASCADE ON DELETE SET NULL"
        )

    def test_drop_foreign_key(self):
        """ANSI drops constraints, MySQL drops foreign keys."""
        constraint = ForeignKeyConstraint(["user_id"], "users", ["id"], "fk_user")
        assert AbstractPlatform().render_drop_foreign_key(constraint, "orders") == (
            "ALTER TABLE orders DROP CONSTRAINT fk_user"
        )
        assert MySQLPlatform().render_drop_foreign_key(constraint, "orders") == (
            "ALTER TABLE orders DROP FOREIGN KEY fk_user"
        )


class TestSequencesAndCapabilities:
    """Tests for sequences and platform capabilities."""

    def test_sequence_statements(self):
        """Sequences render with their cache settings."""
        platform = AbstractPlatform()
        assert platform.render_create_sequence(Sequence("s", 2, 10, 5)) == (
            "CREATE SEQUENCE s INCREMENT BY 2 MINVALUE 10 START WITH 10 CACHE 5"
        )
        assert platform.render_alter_sequence(Sequence("s", 3)) == (
            "ALTER SEQUENCE s INCREMENT BY 3"
        )
        assert platform.render_drop_sequence("s") == "DROP SEQUENCE s"
        assert PostgreSQLPlatform().render_drop_sequence("s") == "DROP SEQUENCE s CASCADE"

    def test_capabilities(self):
        """MySQL has no sequences or schemas."""
        mysql = MySQLPlatform()
        assert not mysql.supports_sequences()
        assert not mysql.supports_schemas()
        assert mysql.get_max_identifier_length() == 64
        assert PostgreSQLPlatform().get_max_identifier_length() == 63

    def test_mysql_has_no_sequence_listing(self):
        """Listing sequences is not supported on MySQL."""
        with pytest.raises(NotSupportedError):
            MySQLPlatform().get_list_sequences_sql()

    def test_ansi_has_no_index_listing(self):
        """The ANSI platform cannot list indexes."""
        with pytest.raises(NotSupportedError):
            AbstractPlatform().get_list_table_indexes_sql("users")

    def test_listing_queries_quote_table(self):
        """Introspection queries embed the table name as a literal."""
        sql = PostgreSQLPlatform().get_list_table_columns_sql("users")
        assert "information_schema.columns" in sql
        assert "table_name = 'users'" in sql
        assert "current_schema()" in sql
