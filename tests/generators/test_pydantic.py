"""Tests for Pydantic model generation."""

import sys
from datetime import date
from typing import Any

import pytest
from pydantic import BaseModel, ValidationError

from vetted import BigInt, Prop, Schema, recurse, sample
from vetted.generators import create_pydantic_model

# Skip Pydantic tests on Python 3.14+ due to compatibility issues with Pydantic v2
PYTHON_314_PLUS = sys.version_info >= (3, 14)

pytestmark = pytest.mark.skipif(
    PYTHON_314_PLUS, reason="Pydantic v2 compatibility issue with Python 3.14+"
)


class TestPydanticModelGeneration:
    """Test Pydantic model generation from schemas."""

    def test_simple_model_generation(self):
        """Sample types become annotations."""

        class UserSchema(Schema):
            id = Prop(0)
            name = Prop("")
            active = Prop(True)

        UserModel = UserSchema.to_pydantic()
        assert issubclass(UserModel, BaseModel)
        assert UserModel.__name__ == "UserModel"

        user = UserModel(id=1, name="Alice", active=False)
        assert user.id == 1
        assert user.name == "Alice"
        assert user.active is False

        with pytest.raises(ValidationError):
            UserModel(id=1, name="Alice")

    def test_generator_function(self):
        """create_pydantic_model matches the classmethod."""

        class Point(Schema):
            x = Prop(0)

        Model = create_pydantic_model(Point)
        assert Model.__name__ == "PointModel"
        assert Model(x=3).x == 3

    def test_model_with_constraints_validates(self):
        """Bounds and patterns are enforced by the generated model."""

        class UserSchema(Schema):
            name = Prop("x", min=1, max=5)
            age = Prop(0, min=0, max=120)
            email = Prop("a@b.c", regex=r"^[^@]+@[^@]+\.[^@]+$")

        UserModel = UserSchema.to_pydantic()
        user = UserModel(name="Alice", age=30, email="alice@example.com")
        assert user.age == 30

        with pytest.raises(ValidationError):
            UserModel(name="", age=30, email="alice@example.com")
        with pytest.raises(ValidationError):
            UserModel(name="Alexandra", age=30, email="alice@example.com")
        with pytest.raises(ValidationError):
            UserModel(name="Alice", age=150, email="alice@example.com")
        with pytest.raises(ValidationError):
            UserModel(name="Alice", age=30, email="not-an-email")

    def test_field_descriptions(self):
        """Descriptions are carried into the model's field info."""

        class UserSchema(Schema):
            name = Prop("", description="Display name")

        UserModel = UserSchema.to_pydantic()
        assert UserModel.model_fields["name"].description == "Display name"


class TestRequiredModes:
    """Test how required modes map to model fields."""

    def test_optional_and_default(self):
        """Optional fields default to None and default fields to the sample."""

        class EventSchema(Schema):
            title = Prop("")
            note = Prop("", required=False)
            day = Prop(date(2024, 1, 1), required="default")
            tags = Prop([""], required="default")

        EventModel = EventSchema.to_pydantic()
        event = EventModel(title="launch")
        assert event.note is None
        assert event.day == date(2024, 1, 1)
        assert event.tags == []

        assert EventModel.model_fields["title"].is_required()
        assert not EventModel.model_fields["note"].is_required()
        assert not EventModel.model_fields["day"].is_required()


class TestAllowedValues:
    """Test allowed-value mapping."""

    def test_allowed_becomes_literal(self):
        """Allowed values without a fallback restrict the model."""

        class TicketSchema(Schema):
            status = Prop("open", allowed=["open", "closed"])

        TicketModel = TicketSchema.to_pydantic()
        assert TicketModel(status="closed").status == "closed"
        with pytest.raises(ValidationError):
            TicketModel(status="pending")

    def test_allowed_with_fallback_stays_open(self):
        """With a fallback, any value of the sample type is accepted."""

        class TicketSchema(Schema):
            status = Prop("open", allowed=["open", "closed"], fallback="open")

        TicketModel = TicketSchema.to_pydantic()
        assert TicketModel(status="pending").status == "pending"


class TestNestedModels:
    """Test nested, collection and self-referential schemas."""

    def test_nested_and_collections(self, order_schema, order_data):
        """Nested schemas become nested models inside lists and sets."""
        OrderModel = order_schema.to_pydantic()
        order = OrderModel(**order_data)

        assert order.customer.name == "Ada"
        assert type(order.customer).__name__ == "CustomerModel"
        assert [item.n for item in order.items] == [1, 2]
        assert order.tags == {"gift", "fragile"}
        assert order.placed == date(2024, 1, 1)

        with pytest.raises(ValidationError):
            OrderModel(**{**order_data, "items": [{"n": -1}]})
        with pytest.raises(ValidationError):
            OrderModel(**{**order_data, "items": [{"n": 1}] * 6})

    def test_self_reference_maps_to_dict(self):
        """Cyclic references fall back to plain dicts."""

        class Node(Schema):
            value = Prop("")
            next = Prop(None, required=False)

        recurse(Node, "next", sample(Node))
        NodeModel = Node.to_pydantic()

        node = NodeModel(value="a", next={"value": "b"})
        assert node.next == {"value": "b"}
        assert NodeModel(value="a").next is None

    def test_bigint_is_int(self):
        """BigInt samples map to plain ints."""

        class Account(Schema):
            balance = Prop(BigInt(0))

        Model = Account.to_pydantic()
        assert Model.model_fields["balance"].annotation is int

    def test_untyped_sample(self):
        """None samples accept anything."""

        class Loose(Schema):
            extra = Prop(None)

        Model = Loose.to_pydantic()
        assert Model.model_fields["extra"].annotation is Any
