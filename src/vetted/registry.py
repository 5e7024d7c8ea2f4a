"""Pluggable value types and the priority-ordered registry that resolves them."""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet
from typing import TYPE_CHECKING, Any, Callable, Iterator

from loguru import logger

from .fails import BIGINT, TYPE, Fail, Failure, Result, Success

if TYPE_CHECKING:  # pragma: no cover
    from .config import Config


class _AlreadyValid:
    def __repr__(self) -> str:
        return "ALREADY_VALID"


# Returned by `Type.mismatch` for values that are already fully validated
ALREADY_VALID = _AlreadyValid()

_NO_ELEMENT = object()


def type_name(value: Any) -> str:
    """Return the JSON-style name of a value's type, used in mismatch messages."""
    from .base import Schema

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, (Mapping, Schema)):
        return "object"
    return type(value).__name__


class Type:
    """
    Base class for value types.

    A type decides, from a field's sample value, how input for that field is
    matched, defaulted and parsed. Types are kept in a `TypeRegistry` ordered
    by descending ``priority``; the first type whose `applies_to` accepts a
    sample is the one used for the field.

    Subclasses override `applies_to`, `mismatch` and `parse`, and optionally
    `default_to`, `size`, `comparable` and `bind`.
    """

    name: str = "type"
    priority: int = 0

    def applies_to(self, sample: Any) -> bool:
        raise NotImplementedError

    def bind(self, sample: Any, registry: TypeRegistry) -> Type:
        """
        Return the type to store on a field compiled from ``sample``.

        Types that contain other values (collections) return a copy with
        their inner types resolved against ``registry``.
        """
        return self

    def default_to(self, sample: Any) -> Any:
        """Value used for a missing field whose required mode is ``"default"``."""
        return sample

    def mismatch(self, value: Any, sample: Any) -> Any:
        """
        Compare the shape of ``value`` against ``sample``.

        Returns
        -------
        str | None | ALREADY_VALID
            A reason string for a hard type error, None to continue with
            constraint checks and `parse`, or `ALREADY_VALID` to use the value
            as-is.
        """
        raise NotImplementedError

    def parse(self, prefix: str, sample: Any, value: Any, config: Config) -> Result[Any]:
        raise NotImplementedError

    def size(self, value: Any) -> int:
        """Measure a sized value for min/max checks."""
        return len(value)

    def comparable(self, value: Any) -> Any:
        """
        Return what min/max compare against for an unsized value.

        None means the value cannot be compared yet; bound checks then pass
        and `parse` reports the problem.
        """
        return value

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r} priority={self.priority}>"


class PrimitiveType(Type):
    """Fallback type: accepts any value whose JSON type matches the sample's."""

    name = "default"
    priority = 0

    def applies_to(self, sample: Any) -> bool:
        return True

    def default_to(self, sample: Any) -> Any:
        # Records must not share a mutable default with the sample instance
        if isinstance(sample, (MutableMapping, MutableSequence, MutableSet)):
            return copy.deepcopy(sample)
        return sample

    def mismatch(self, value: Any, sample: Any) -> Any:
        expected = type_name(sample)
        got = type_name(value)
        if expected != got:
            return f"expected {expected} but got {got}"
        return None

    def parse(self, prefix: str, sample: Any, value: Any, config: Config) -> Result[Any]:
        if type(sample) is int and isinstance(value, float) and value.is_integer():
            return Success(int(value))
        return Success(value)


class CheckedObjectType(Type):
    """Nested schema records; input objects are validated by the nested schema."""

    name = "checked object"
    priority = 200_000_000

    def applies_to(self, sample: Any) -> bool:
        from .base import Schema

        return isinstance(sample, Schema)

    def mismatch(self, value: Any, sample: Any) -> Any:
        if isinstance(value, type(sample)):
            return ALREADY_VALID
        if not isinstance(value, Mapping):
            return f"expected object but got {type_name(value)}"
        return None

    def parse(self, prefix: str, sample: Any, value: Any, config: Config) -> Result[Any]:
        from .engine import run_schema

        return run_schema(type(sample), prefix, value, config)


class CollectionType(Type):
    """
    Generic collection type.

    Input is always a JSON array and is converted element by element into the
    collection built by ``make``. Each element is matched and parsed by the
    type resolved for the collection's representative sample element. That
    type is resolved once, when a field is compiled, by `bind`.

    Parameters
    ----------
    name : str
        Type name, used in mismatch messages.
    priority : int
        Position in the registry; higher wins.
    make : Callable[[], Any]
        Creates an empty collection.
    is_instance : Callable[[Any], bool]
        True for samples of this collection type.
    add : Callable[[Any, Any], None]
        Inserts one parsed element into a collection.
    first : Callable[[Any], Any], optional
        Returns a representative element of a populated sample collection.
        Defaults to the first element in iteration order.
    accepts : tuple[type, ...], default (list, tuple)
        Input shapes accepted for this collection.

    Examples
    --------
        >>> from collections import deque
        >>> deques = CollectionType(
        ...     "deque",
        ...     priority=320_000_000,
        ...     make=deque,
        ...     is_instance=lambda v: isinstance(v, deque),
        ...     add=deque.append,
        ... )
    """

    def __init__(
        self,
        name: str,
        *,
        priority: int,
        make: Callable[[], Any],
        is_instance: Callable[[Any], bool],
        add: Callable[[Any, Any], None],
        first: Callable[[Any], Any] | None = None,
        accepts: tuple[type, ...] = (list, tuple),
    ):
        self.name = name
        self.priority = priority
        self.make = make
        self.is_instance = is_instance
        self.add = add
        self.first = first or (lambda sample: next(iter(sample), _NO_ELEMENT))
        self.accepts = accepts
        self.element_type: Type | None = None

    def applies_to(self, sample: Any) -> bool:
        return self.is_instance(sample)

    def bind(self, sample: Any, registry: TypeRegistry) -> Type:
        element_sample = self.first(sample)
        if element_sample is _NO_ELEMENT:
            return self
        bound = copy.copy(self)
        bound.element_type = registry.resolve(element_sample).bind(
            element_sample, registry
        )
        return bound

    def default_to(self, sample: Any) -> Any:
        return self.make()

    def mismatch(self, value: Any, sample: Any) -> Any:
        if not isinstance(value, self.accepts):
            return f"expected {self.name} but got {type_name(value)}"
        return None

    def size(self, value: Any) -> int:
        # Logical element count of the collection the input converts into
        collection = self.make()
        for element in value:
            self.add(collection, element)
        return len(collection)

    def parse(self, prefix: str, sample: Any, value: Any, config: Config) -> Result[Any]:
        result = self.make()
        element_sample = self.first(sample)
        if element_sample is _NO_ELEMENT:
            for element in value:
                self.add(result, element)
            return Success(result)

        element_type = self.element_type
        if element_type is None:
            # Unbound collections, used outside a compiled field
            element_type = config.registry.resolve(element_sample).bind(
                element_sample, config.registry
            )
        for i, element in enumerate(value):
            path = f"{prefix}[{i}]"
            reason = element_type.mismatch(element, element_sample)
            if isinstance(reason, str):
                return Failure(Fail(path, TYPE, reason))
            if reason:
                self.add(result, element)
                continue
            r = element_type.parse(path, element_sample, element, config)
            if r.success:
                self.add(result, r.value)
            elif config.skip_invalid:
                config.warn(f"skipping element {r.fail.path} - {r.fail.message}")
            else:
                return r
        return Success(result)


class ArrayType(CollectionType):
    """JSON arrays, parsed into Python lists."""

    def __init__(self) -> None:
        super().__init__(
            "array",
            priority=300_000_000,
            make=list,
            is_instance=lambda v: isinstance(v, list),
            add=list.append,
        )

    def size(self, value: Any) -> int:
        return len(value)


class SetType(CollectionType):
    """Sets, accepted from JSON arrays (or sets) and de-duplicated on parse."""

    def __init__(self) -> None:
        super().__init__(
            "set",
            priority=310_000_000,
            make=set,
            is_instance=lambda v: isinstance(v, (set, frozenset)),
            add=set.add,
            accepts=(list, tuple, set, frozenset),
        )

    def size(self, value: Any) -> int:
        try:
            return len(set(value))
        except TypeError:
            return len(value)


class BigInt(int):
    """Integer marker for values carried as numeric strings in JSON."""

    def __repr__(self) -> str:
        return f"BigInt({int(self)})"

    def __str__(self) -> str:
        return int.__repr__(self)


_BIGINT_RE = re.compile(r"^-?\d+$")


class BigIntType(Type):
    """
    Arbitrary-precision integers that arrive as JSON numbers or numeric strings.

    Not registered by default; opt in with ``add_type(BigIntType())``. Applies
    to fields whose sample is a `BigInt`.
    """

    name = "bigint"
    priority = 100_000_000

    def applies_to(self, sample: Any) -> bool:
        return isinstance(sample, BigInt)

    def mismatch(self, value: Any, sample: Any) -> Any:
        if isinstance(value, BigInt):
            return ALREADY_VALID
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            return f"expected bigint but got {type_name(value)}"
        return None

    def comparable(self, value: Any) -> Any:
        if isinstance(value, str):
            return int(value) if _BIGINT_RE.match(value.strip()) else None
        return int(value)

    def parse(self, prefix: str, sample: Any, value: Any, config: Config) -> Result[Any]:
        if isinstance(value, str) and not _BIGINT_RE.match(value.strip()):
            return Failure(Fail(prefix, BIGINT, f"invalid big integer: {value}"))
        return Success(BigInt(int(value)))


class TypeRegistry:
    """
    Types ordered by descending priority.

    Examples
    --------
        >>> registry = TypeRegistry.default()
        >>> registry.resolve([1, 2]).name
        'array'
        >>> registry.resolve("text").name
        'default'
    """

    def __init__(self, types: tuple[Type, ...] | list[Type] = ()):
        self._types: list[Type] = []
        for t in types:
            self.add(t)

    @classmethod
    def default(cls) -> TypeRegistry:
        """Registry holding the built-in set, array, checked object and fallback types."""
        return cls((SetType(), ArrayType(), CheckedObjectType(), PrimitiveType()))

    def add(self, type_: Type) -> None:
        """Insert ``type_`` at its priority position."""
        for existing in self._types:
            if existing.priority == type_.priority:
                raise ValueError(
                    f"Type '{type_.name}' has the same priority ({type_.priority}) "
                    f"as registered type '{existing.name}'"
                )
        index = 0
        while index < len(self._types) and self._types[index].priority > type_.priority:
            index += 1
        self._types.insert(index, type_)
        logger.debug(f"Registered type '{type_.name}' with priority {type_.priority}")

    def resolve(self, sample: Any) -> Type:
        """Return the highest-priority type that applies to ``sample``."""
        for t in self._types:
            if t.applies_to(sample):
                return t
        raise LookupError(f"No registered type applies to {sample!r}")

    def copy(self) -> TypeRegistry:
        return TypeRegistry(tuple(self._types))

    def __iter__(self) -> Iterator[Type]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)
