"""Tests for row-wise validation of Polars DataFrames."""

import polars as pl
import pytest

from vetted import CheckError, Prop, Schema
from vetted.generators import parse_frame


class User(Schema):
    id = Prop(1, min=1)
    name = Prop("", min=1)
    age = Prop(0, required=False, min=0)


@pytest.fixture
def users_frame():
    """Three valid user rows, one with a null age."""
    return pl.DataFrame(
        {
            "id": [1, 2, 3],
            "name": ["Alice", "Bob", "Charlie"],
            "age": [25, None, 35],
        }
    )


class TestParseFrame:
    """Test DataFrame row validation."""

    def test_valid_dataframe_passes(self, users_frame):
        """Every valid row becomes a record."""
        users = User.parse_frame(users_frame)
        assert [u.name for u in users] == ["Alice", "Bob", "Charlie"]
        assert users[0].age == 25

    def test_null_cells_are_missing(self, users_frame):
        """Null cells count as missing input."""
        users = parse_frame(User, users_frame)
        assert not hasattr(users[1], "age")

    def test_invalid_row_strict(self, strict_config):
        """Invalid rows fail with their row index in the path."""
        df = pl.DataFrame({"id": [1, 0], "name": ["Alice", "Bob"]})
        with pytest.raises(CheckError) as exc_info:
            User.parse_frame(df, strict_config)
        assert str(exc_info.value) == "[1].id: value of 0 < minimum value of 1"

    def test_invalid_rows_skipped(self, collecting_config, warnings):
        """With the skip policy on, invalid rows are dropped with a warning."""
        df = pl.DataFrame({"id": [1, 2, 3], "name": ["Alice", "", "Charlie"]})
        users = parse_frame(User, df, collecting_config)
        assert [u.id for u in users] == [1, 3]
        assert warnings == ["skipping element [1].name - length of 0 < minimum length of 1"]

    def test_missing_required_column(self, strict_config):
        """A missing required column fails on the first row."""
        df = pl.DataFrame({"id": [1, 2]})
        with pytest.raises(CheckError, match=r"\[0\].name: missing required property"):
            parse_frame(User, df, strict_config)

    def test_struct_and_list_columns(self):
        """Struct columns parse as nested objects and list columns as arrays."""

        class Address(Schema):
            city = Prop("")

        class Customer(Schema):
            address = Prop(Address.sample())
            scores = Prop([0])

        df = pl.DataFrame(
            {
                "address": [{"city": "Oslo"}, {"city": "Lima"}],
                "scores": [[1, 2], [3]],
            }
        )
        customers = Customer.parse_frame(df)
        assert customers[1].address.city == "Lima"
        assert customers[0].scores == [1, 2]

    def test_requires_dataframe(self):
        """Non-DataFrame input is rejected."""
        with pytest.raises(TypeError, match="polars DataFrame"):
            parse_frame(User, [{"id": 1, "name": "Alice"}])
