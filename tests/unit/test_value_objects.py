"""Unit tests for domain value objects."""

from __future__ import annotations

import pytest

from minidb.domain.errors import ValidationError
from minidb.domain.value_objects import (
    Column,
    ColumnType,
    WhereClause,
    qualify,
    split_qualified,
    values_equal,
)


@pytest.mark.unit
class TestIdentifiers:
    """Tests for qualified-name helpers."""

    def test_qualify(self) -> None:
        assert qualify("users", "id") == "users.id"

    def test_split_unqualified(self) -> None:
        assert split_qualified("id") == (None, "id")

    def test_split_qualified(self) -> None:
        assert split_qualified("users.id") == ("users", "id")

    def test_split_uses_last_segment(self) -> None:
        """Only the last segment is the column."""
        assert split_qualified("a.b.c") == ("a.b", "c")


@pytest.mark.unit
class TestColumnType:
    """Tests for ColumnType."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("INT", ColumnType.INT),
            ("integer", ColumnType.INT),
            ("Text", ColumnType.TEXT),
            ("VARCHAR", None),
        ],
    )
    def test_from_name(self, name: str, expected: ColumnType | None) -> None:
        assert ColumnType.from_name(name) is expected

    def test_int_rejects_bool_and_float(self) -> None:
        assert ColumnType.INT.accepts(3)
        assert not ColumnType.INT.accepts(True)
        assert not ColumnType.INT.accepts(3.0)
        assert not ColumnType.INT.accepts("3")

    def test_text(self) -> None:
        assert ColumnType.TEXT.accepts("")
        assert not ColumnType.TEXT.accepts(1)


@pytest.mark.unit
class TestColumn:
    """Tests for Column."""

    def test_indexed(self) -> None:
        assert Column("id", ColumnType.INT, primary_key=True).indexed
        assert Column("email", ColumnType.TEXT, unique=True).indexed
        assert not Column("name", ColumnType.TEXT).indexed

    def test_validate_accepts_null(self) -> None:
        assert Column("id", ColumnType.INT).validate(None) is None

    def test_validate_type_mismatch(self) -> None:
        with pytest.raises(ValidationError, match="Column 'id' expects INT"):
            Column("id", ColumnType.INT).validate("1")

    def test_primary_key_is_unique(self) -> None:
        column = Column("id", ColumnType.INT, primary_key=True)

        assert column.unique
        assert column == Column("id", ColumnType.INT, primary_key=True, unique=True)

    def test_str(self) -> None:
        assert str(Column("id", ColumnType.INT, primary_key=True)) == "id INT PRIMARY KEY"
        assert str(Column("name", ColumnType.TEXT)) == "name TEXT"


@pytest.mark.unit
class TestEquality:
    """Tests for strict value equality and WHERE matching."""

    @pytest.mark.parametrize(
        "left,right,expected",
        [
            (1, 1, True),
            ("a", "a", True),
            (None, None, True),
            (1, "1", False),
            (1, True, False),
            (1, 1.0, False),
            (None, 0, False),
        ],
    )
    def test_values_equal(self, left, right, expected: bool) -> None:
        assert values_equal(left, right) is expected

    def test_where_matches(self) -> None:
        where = WhereClause("name", "Ann")

        assert where.matches({"id": 1, "name": "Ann"})
        assert not where.matches({"id": 2, "name": "Bob"})
        assert not where.matches({"id": 3})

    def test_where_null(self) -> None:
        assert WhereClause("name", None).matches({"name": None})

    def test_where_str(self) -> None:
        assert str(WhereClause("name", "Ann")) == "name = 'Ann'"
        assert str(WhereClause("id", 1)) == "id = 1"
        assert str(WhereClause("id", None)) == "id = NULL"
