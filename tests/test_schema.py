"""Tests for Schema metaclass compilation, records and self-reference."""

import pytest

from vetted import (
    BigInt,
    BigIntType,
    CheckError,
    Config,
    Prop,
    Required,
    Schema,
    TypeRegistry,
    define,
    recurse,
    sample,
    set_config,
)


class TestSchemaMetaclass:
    """Test Prop collection by the metaclass."""

    def test_fields_collected_in_declaration_order(self):
        """Metaclass compiles every Prop in class-body order."""

        class User(Schema):
            id = Prop(0)
            name = Prop("")
            age = Prop(0, required=False)

        assert list(User.fields()) == ["id", "name", "age"]
        assert User.fields()["name"].name == "name"
        assert User.fields()["age"].required is Required.OPTIONAL

    def test_props_removed_from_class(self):
        """Declarations do not linger as class attributes."""

        class User(Schema):
            name = Prop("")

        assert "name" not in User.__dict__
        assert isinstance(User.properties()["name"], Prop)

    def test_non_prop_attributes_ignored(self):
        """Methods and plain attributes are not fields."""

        class User(Schema):
            id = Prop(0)
            kind = "user"

            def label(self):
                return f"user {self.id}"

        assert list(User.fields()) == ["id"]
        assert User.validate({"id": 3}).label() == "user 3"

    def test_private_field_rejected(self):
        """Field names must not start with an underscore."""
        with pytest.raises(TypeError, match="underscore"):

            class User(Schema):
                _secret = Prop("")

    def test_inherited_fields_collected(self):
        """Fields from parent schemas come first and can be overridden."""

        class Base(Schema):
            id = Prop(0)
            kind = Prop("base")

        class User(Base):
            name = Prop("")
            kind = Prop("user")

        assert list(User.fields()) == ["id", "kind", "name"]
        assert User.sample().kind == "user"
        assert Base.sample().kind == "base"

    def test_invalid_required_mode(self):
        """Only True, False and 'default' are required modes."""
        with pytest.raises(ValueError, match="Invalid required mode"):
            Prop("", required="sometimes")

    def test_bound_config_is_inherited(self):
        """Subclasses keep the config bound to their parent."""
        config = Config(skip_invalid=False)

        class Base(Schema, config=config):
            id = Prop(0)

        class Child(Base):
            name = Prop("")

        assert Child._config is config


class TestDefine:
    """Test schema declaration from mappings."""

    def test_define(self):
        """define() builds the same kind of schema as a class body."""
        Point = define("Point", {"x": Prop(0), "y": Prop(0, min=0)})
        assert issubclass(Point, Schema)
        assert Point.__name__ == "Point"
        assert Point.validate({"x": -1, "y": 2}).x == -1
        with pytest.raises(CheckError, match="y: value of -1 < minimum value of 0"):
            Point.validate({"x": 0, "y": -1})

    def test_define_rejects_non_props(self):
        """Every value must be a Prop."""
        with pytest.raises(TypeError, match="expected a Prop declaration"):
            define("Bad", {"x": 0})


class TestSample:
    """Test sample instances."""

    def test_sample_holds_every_sample_value(self):
        """The sample carries each field's sample, optional fields included."""

        class Inner(Schema):
            n = Prop(1)

        class Outer(Schema):
            name = Prop("x")
            inner = Prop(Inner.sample())
            note = Prop("n/a", required=False)

        s = sample(Outer)
        assert s is Outer.sample()
        assert s.name == "x"
        assert s.inner is Inner.sample()
        assert s.note == "n/a"

    def test_sample_is_not_validated(self):
        """Samples are trusted even when they violate their own checks."""

        class Loose(Schema):
            n = Prop(-5, min=0)

        assert Loose.sample().n == -5

    def test_sample_validates_to_itself(self, order_schema):
        """Validating the sample returns it unchanged."""
        s = order_schema.sample()
        assert order_schema.validate(s) is s


class TestRecurse:
    """Test self-referential schemas."""

    def test_self_reference_forms_a_cycle(self):
        """recurse() points a field of the sample back at the sample."""

        class Node(Schema):
            value = Prop("")
            next = Prop(None, required=False)

        assert Node.fields()["next"].type.name == "default"
        recurse(Node, "next", sample(Node))

        s = sample(Node)
        assert s.next is s
        assert s.next.next is s
        assert Node.fields()["next"].type.name == "checked object"
        assert "..." in repr(s)

    def test_parse_linked_nodes(self):
        """Self-referential schemas parse chains of any depth."""

        class Node(Schema):
            value = Prop("")
            next = Prop(None, required=False)

        recurse(Node, "next", sample(Node))

        node = Node.validate({"value": "a", "next": {"value": "b"}})
        assert node.value == "a"
        assert node.next.value == "b"
        assert not hasattr(node.next, "next")

        chain = Node.validate({"value": "a", "next": {"value": "b", "next": {"value": "c"}}})
        assert chain.next.next.value == "c"

        broken = {"value": "a", "next": {"value": "b", "next": {}}}
        # Invalid optional links are dropped under the default skip policy
        assert not hasattr(Node.validate(broken).next, "next")
        with pytest.raises(CheckError, match="next.next.value: missing required property"):
            Node.validate(broken, Config(skip_invalid=False))

    def test_recompiles_with_the_schema_registry(self):
        """Patched fields resolve against the registry the schema was compiled with."""

        class Account(Schema):
            balance = Prop(None, required=False)

        registry = TypeRegistry.default()
        registry.add(BigIntType())
        set_config(Config(registry=registry))

        recurse(Account, "balance", BigInt(0))
        assert Account.fields()["balance"].type.name == "default"
        with pytest.raises(CheckError, match="balance: expected number but got string"):
            Account.validate({"balance": "5"})

    def test_unknown_field(self):
        """Only declared fields can be patched."""

        class Node(Schema):
            value = Prop("")

        with pytest.raises(KeyError, match="Unknown field 'missing'"):
            recurse(Node, "missing", None)


class TestRecords:
    """Test record behavior."""

    def test_calling_the_class_validates(self):
        """Schema classes validate keyword and mapping input when called."""

        class Point(Schema):
            x = Prop(0)
            y = Prop(0)

        assert Point(x=1, y=2) == Point({"x": 1, "y": 2})
        with pytest.raises(CheckError, match="y: missing required property"):
            Point(x=1)

    def test_root_schema_has_no_fields(self):
        """The Schema base class cannot validate anything."""
        with pytest.raises(TypeError, match="not a compiled schema"):
            Schema()

    def test_equality_and_repr(self):
        """Records compare by class and field values."""

        class Point(Schema):
            x = Prop(0)
            y = Prop(0)

        class Other(Schema):
            x = Prop(0)
            y = Prop(0)

        p = Point.validate({"x": 1, "y": 2})
        assert p == Point.validate({"x": 1, "y": 2})
        assert p != Point.validate({"x": 1, "y": 3})
        assert p != Other.validate({"x": 1, "y": 2})
        assert repr(p) == "Point(x=1, y=2)"

    def test_to_dict(self, order_schema, order_data):
        """to_dict converts nested records and collections to plain data."""
        order = order_schema.validate(order_data)
        plain = order.to_dict()
        assert plain["customer"] == {"name": "Ada", "email": "ada@example.com"}
        assert plain["items"] == [{"n": 1}, {"n": 2}]
        assert sorted(plain["tags"]) == ["fragile", "gift"]
        assert "note" not in plain

    def test_to_dict_rejects_cycles(self):
        """Cyclic samples cannot be flattened."""

        class Node(Schema):
            value = Prop("")
            next = Prop(None, required=False)

        recurse(Node, "next", sample(Node))
        with pytest.raises(ValueError, match="cyclic"):
            Node.sample().to_dict()
