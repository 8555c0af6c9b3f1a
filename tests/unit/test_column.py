"""Tests for Column."""

import logging

import pytest

from dbschema.exceptions import UnknownColumnType
from dbschema.schema.column import Column
from dbschema.types import IntegerType, StringType, get_type


class TestColumnDefaults:
    """Tests for default column attributes."""

    def test_column_defaults(self):
        """A new column is NOT NULL with precision 10 and scale 0."""
        column = Column("id", "integer")
        assert column.name == "id"
        assert column.type == IntegerType()
        assert column.notnull is True
        assert column.length is None
        assert column.precision == 10
        assert column.scale == 0
        assert column.unsigned is False
        assert column.fixed is False
        assert column.autoincrement is False
        assert column.default is None
        assert column.comment is None
        assert column.column_definition is None

    def test_type_accepts_instance_or_name(self):
        """The type can be given as a name or as a Type."""
        assert Column("a", get_type("string")).type == StringType()
        assert Column("a", "STRING").type == StringType()

    def test_unknown_type_raises(self):
        """An unregistered type name raises UnknownColumnType."""
        with pytest.raises(UnknownColumnType):
            Column("a", "geometry")


class TestColumnOptions:
    """Tests for set_options()."""

    def test_option_keys_are_normalized(self):
        """notnull, notNull and not_null style keys all apply."""
        column = Column(
            "a",
            "string",
            {"notNull": False, "column_definition": "CHAR(2)", "platformOptions": {"x": 1}},
        )
        assert column.notnull is False
        assert column.column_definition == "CHAR(2)"
        assert column.platform_options == {"x": 1}

    def test_unknown_option_ignored_and_logged(self, caplog):
        """Unknown option keys are ignored and logged at DEBUG."""
        with caplog.at_level(logging.DEBUG, logger="dbschema.schema.column"):
            column = Column("a", "string", {"collation": "utf8"})
        assert not hasattr(column, "collation")
        assert "Ignoring unknown option 'collation'" in caplog.text

    def test_precision_and_scale_repaired(self):
        """Non-numeric precision and scale fall back to 10 and 0."""
        column = Column("a", "decimal", {"precision": "abc", "scale": None})
        assert column.precision == 10
        assert column.scale == 0

    def test_numeric_strings_accepted(self):
        """Numeric strings are converted to integers."""
        column = Column("a", "decimal", {"precision": "12", "scale": "2"})
        assert column.precision == 12
        assert column.scale == 2

    def test_flags_coerced_to_bool(self):
        """Flag options are stored as booleans."""
        column = Column("a", "integer", {"unsigned": 1, "autoincrement": "yes"})
        assert column.unsigned is True
        assert column.autoincrement is True

    def test_custom_schema_options(self):
        """Custom schema options can be set and read back."""
        column = Column("a", "string")
        column.set_custom_schema_option("collation", "C")
        assert column.has_custom_schema_option("collation")
        assert column.get_custom_schema_option("collation") == "C"


class TestColumnToDict:
    """Tests for to_dict()."""

    def test_to_dict_flattens_attributes(self):
        """to_dict includes every attribute plus merged options."""
        column = Column("email", "string", {"length": 180, "comment": "Login"})
        column.set_platform_option("collation", "C")
        column.set_custom_schema_option("check", "email LIKE '%@%'")
        data = column.to_dict()
        assert data["name"] == "email"
        assert data["type"] == StringType()
        assert data["length"] == 180
        assert data["notnull"] is True
        assert data["comment"] == "Login"
        assert data["collation"] == "C"
        assert data["check"] == "email LIKE '%@%'"
