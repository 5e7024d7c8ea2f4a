"""Shared fixtures for vetted tests."""

from datetime import date

import pytest

from vetted import Config, Prop, Schema, set_config


@pytest.fixture(autouse=True)
def fresh_config():
    """Give every test its own default configuration and type registry."""
    previous = set_config(Config())
    yield
    set_config(previous)


@pytest.fixture
def warnings():
    """List collecting skip warnings."""
    return []


@pytest.fixture
def collecting_config(warnings):
    """Config that skips invalid elements and collects warnings."""
    return Config(skip_invalid=True, warn=warnings.append)


@pytest.fixture
def strict_config():
    """Config that fails on the first invalid element."""
    return Config(skip_invalid=False)


@pytest.fixture
def item_schema():
    """Element schema requiring a non-negative count."""

    class Item(Schema):
        n = Prop(0, min=0)

    return Item


@pytest.fixture
def order_schema(item_schema):
    """Schema with nested objects, arrays and every required mode."""

    class Customer(Schema):
        name = Prop("", min=1)
        email = Prop("a@b.c", regex=r"^[^@]+@[^@]+\.[^@]+$")

    class Order(Schema):
        id = Prop(1, min=1)
        customer = Prop(Customer.sample())
        items = Prop([item_schema.sample()], max=5)
        status = Prop("new", allowed=["new", "paid", "shipped"], fallback="new")
        tags = Prop({""}, required="default")
        note = Prop("", required=False, max=200)
        placed = Prop(date(2024, 1, 1), required="default")

    return Order


@pytest.fixture
def order_data():
    """Valid input for order_schema."""
    return {
        "id": 7,
        "customer": {"name": "Ada", "email": "ada@example.com"},
        "items": [{"n": 1}, {"n": 2}],
        "status": "paid",
        "tags": ["gift", "gift", "fragile"],
    }
