"""Core `Schema` class: metaclass compilation, records and self-reference."""

from __future__ import annotations

import reprlib
from typing import TYPE_CHECKING, Any, Mapping

from loguru import logger

from .fields import Field, Prop

if TYPE_CHECKING:  # pragma: no cover
    from .config import Config
    from .fails import Fail, Result
    from .registry import TypeRegistry


class Metadata:
    """
    Compiled form of a schema.

    Holds the compiled fields in declaration order, an index from field name
    to position, and the sample instance built from every field's sample
    value, plus the registry the fields were compiled with. The only change
    allowed after compilation is `patch`, which replaces one field in place
    to install a self-reference.
    """

    __slots__ = ("_fields", "_index", "registry", "sample")

    def __init__(self, fields: list[Field], registry: TypeRegistry):
        self._fields = fields
        self._index = {f.name: i for i, f in enumerate(fields)}
        self.registry = registry
        self.sample: Any = None

    @property
    def fields(self) -> tuple[Field, ...]:
        return tuple(self._fields)

    def field(self, name: str) -> Field:
        try:
            return self._fields[self._index[name]]
        except KeyError:
            raise KeyError(f"Unknown field '{name}'") from None

    def patch(self, name: str, sample: Any) -> Field:
        """Replace the sample of field ``name`` and recompile that field only."""
        current = self.field(name)
        field = Field.compile(name, current.prop, self.registry, sample=sample)
        self._fields[self._index[name]] = field
        setattr(self.sample, name, sample)
        return field


class SchemaMeta(type):
    """
    Metaclass that collects `Prop` declarations and compiles them.

    Fields are declared by assigning `Prop` instances in the class body:

        class Point(Schema):
            x = Prop(0)
            y = Prop(0, min=0)

    Fields of parent schemas come first, in their declaration order; a child
    redeclaring a field replaces the parent's declaration in place. A config
    can be bound with a class keyword: ``class Point(Schema, config=cfg)``.
    """

    def __new__(mcs, name, bases, namespace, config=None, **kwargs):
        properties: dict[str, Prop] = {}
        for base in reversed(bases):
            properties.update(getattr(base, "_properties", {}))
        if config is None:
            for base in bases:
                config = getattr(base, "_config", None)
                if config is not None:
                    break

        for key, value in list(namespace.items()):
            if not isinstance(value, Prop):
                continue
            if key.startswith("_"):
                raise TypeError(
                    f"Field '{key}': field names must not start with an underscore"
                )
            properties[key] = namespace.pop(key)

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)
        cls._properties = properties
        cls._config = config

        # The root Schema class has no fields of its own and is never compiled
        if not any(isinstance(base, SchemaMeta) for base in bases):
            cls._metadata = None
            return cls

        cls._metadata = mcs._compile(cls, properties, config)
        return cls

    def __init__(cls, name, bases, namespace, config=None, **kwargs):
        super().__init__(name, bases, namespace, **kwargs)

    @staticmethod
    def _compile(cls, properties: dict[str, Prop], config: Config | None) -> Metadata:
        from .config import get_config

        effective = config if config is not None else get_config()
        fields = [
            Field.compile(key, prop, effective.registry)
            for key, prop in properties.items()
        ]
        metadata = Metadata(fields, effective.registry)
        # Samples are valid by definition and are built without validation
        metadata.sample = effective.augment(
            cls._trusted({key: prop.v for key, prop in properties.items()})
        )
        logger.debug(f"Compiled schema '{cls.__name__}' with {len(fields)} fields")
        return metadata

    def __call__(cls, data: Mapping[str, Any] | None = None, /, **kwargs: Any):
        """Validate ``data`` (and/or keyword fields) into a record of this schema."""
        from .engine import validate

        values = dict(data or {})
        values.update(kwargs)
        return validate(cls, values)


def metadata_of(cls: type) -> Metadata:
    """Return the compiled metadata of a schema class."""
    metadata = getattr(cls, "_metadata", None)
    if metadata is None:
        raise TypeError(
            f"{getattr(cls, '__name__', cls)!r} is not a compiled schema. "
            f"Subclass Schema or use define() to declare fields."
        )
    return metadata


class Schema(metaclass=SchemaMeta):
    """
    Base class for validated records.

    Subclass `Schema` and declare fields with `Prop`. Each field's sample
    value is its default and decides how input for it is matched and
    parsed. Calling the class validates its input; invalid input raises
    `CheckError`.

    Examples
    --------
    Basic schema definition:

        >>> from vetted import Prop, Schema
        >>> class Item(Schema):
        ...     name = Prop("", min=1)
        ...     quantity = Prop(1, min=1)
        ...     tags = Prop([""], required="default")
        >>> item = Item.validate({"name": "pen", "quantity": 3})
        >>> item.tags
        []

    Nested and self-referential schemas:

        >>> class Node(Schema):
        ...     value = Prop("")
        ...     next = Prop(None, required=False)
        >>> recurse(Node, "next", Node.sample())
        >>> node = Node.run({"value": "a", "next": {"value": "b"}}).value
        >>> node.next.value
        'b'
    """

    _properties: dict[str, Prop] = {}
    _config: Config | None = None
    _metadata: Metadata | None = None

    @classmethod
    def _trusted(cls, values: Mapping[str, Any]) -> Any:
        """Build a record from already-validated values without running checks."""
        record = object.__new__(cls)
        record.__dict__.update(values)
        return record

    @classmethod
    def fields(cls) -> dict[str, Field]:
        """
        Return the compiled fields of this schema in declaration order.

        Examples
        --------
            >>> class User(Schema):
            ...     id = Prop(0)
            ...     name = Prop("")
            >>> list(User.fields())
            ['id', 'name']
        """
        return {f.name: f for f in metadata_of(cls).fields}

    @classmethod
    def properties(cls) -> dict[str, Prop]:
        """Return the `Prop` declarations of this schema."""
        return dict(cls._properties)

    @classmethod
    def sample(cls) -> Any:
        """Return the sample instance of this schema."""
        return metadata_of(cls).sample

    @classmethod
    def run(cls, data: Any, config: Config | None = None) -> Result[Any]:
        """Validate ``data``, returning a `Success` or `Failure`."""
        from .engine import run

        return run(cls, data, config)

    @classmethod
    def validate(cls, data: Any, config: Config | None = None) -> Any:
        """Validate ``data``, raising `CheckError` on failure."""
        from .engine import validate

        return validate(cls, data, config)

    @classmethod
    def parse(cls, text: str | bytes, config: Config | None = None) -> Any:
        """Validate a JSON document, raising `CheckError` on failure."""
        from .engine import parse

        return parse(cls, text, config)

    @classmethod
    def parse_array(cls, text: str | bytes, config: Config | None = None) -> list[Any]:
        """Validate a JSON array of objects, raising `CheckError` on failure."""
        from .engine import parse_array

        return parse_array(cls, text, config)

    @classmethod
    def run_one(cls, name: str, value: Any) -> list[Fail]:
        """Return every constraint failure of ``value`` for field ``name``."""
        from .engine import run_one

        return run_one(cls, name, value)

    @classmethod
    def to_pydantic(cls) -> type:
        """
        Generate a Pydantic BaseModel from this schema.

        Returns
        -------
        type
            A dynamically created Pydantic BaseModel class.
        """
        from .generators.pydantic import create_pydantic_model

        return create_pydantic_model(cls)

    @classmethod
    def parse_frame(cls, df: Any, config: Config | None = None) -> list[Any]:
        """
        Validate every row of a Polars DataFrame as a record of this schema.

        Parameters
        ----------
        df : pl.DataFrame
            Input frame; column names are matched against input keys.
        config : Config, optional
            Overrides the schema's configuration.

        Returns
        -------
        list
            One record per valid row.
        """
        from .generators.polars import parse_frame

        return parse_frame(cls, df, config)

    def to_dict(self) -> dict[str, Any]:
        """Convert this record, and nested records, to plain dicts and lists."""
        return _plain(self, set())

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return NotImplemented
        return self.__dict__ == other.__dict__

    __hash__ = None  # type: ignore[assignment]

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.__dict__.items())
        return f"{self.__class__.__name__}({fields})"


def _plain(value: Any, active: set[int]) -> Any:
    if isinstance(value, Schema):
        if id(value) in active:
            raise ValueError(f"Cannot convert cyclic {value.__class__.__name__} record")
        active.add(id(value))
        try:
            return {k: _plain(v, active) for k, v in value.__dict__.items()}
        finally:
            active.discard(id(value))
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v, active) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v, active) for k, v in value.items()}
    return value


def define(
    name: str, properties: Mapping[str, Prop], config: Config | None = None
) -> type[Schema]:
    """
    Create a schema class from a mapping of field names to `Prop`.

    Examples
    --------
        >>> Point = define("Point", {"x": Prop(0), "y": Prop(0)})
        >>> Point.validate({"x": 1, "y": 2}).y
        2
    """
    for key, prop in properties.items():
        if not isinstance(prop, Prop):
            raise TypeError(
                f"Field '{key}': expected a Prop declaration, got {type(prop).__name__}"
            )
    return SchemaMeta(name, (Schema,), dict(properties), config=config)


def sample(cls: type) -> Any:
    """Return the sample instance of a schema class."""
    return metadata_of(cls).sample


def recurse(cls: type, name: str, value: Any) -> None:
    """
    Point field ``name`` of the schema's sample at ``value``.

    Used to make a schema self-referential after it has been compiled, e.g.
    ``recurse(Node, "next", sample(Node))``. Only that field's type and
    checks are recompiled, against the registry the schema was compiled
    with.
    """
    field = metadata_of(cls).patch(name, value)
    logger.debug(
        f"Patched field '{name}' of schema '{cls.__name__}' to type '{field.type.name}'"
    )
