"""Field declarations (`Prop`) and their compiled form (`Field`)."""

from __future__ import annotations

import enum
import re
from typing import TYPE_CHECKING, Any, Callable, Iterable

from .checkers import Checker, compile_checkers
from .fails import Fail

if TYPE_CHECKING:  # pragma: no cover
    from .registry import Type, TypeRegistry

# Sentinel value to distinguish "no fallback provided" from "fallback is None"
_MISSING = object()


class Required(enum.Enum):
    """How a field treats missing (absent or null) input."""

    REQUIRED = True
    OPTIONAL = False
    DEFAULT = "default"

    @classmethod
    def coerce(cls, value: Any) -> Required:
        if isinstance(value, Required):
            return value
        for member in cls:
            if member.value is value or (
                isinstance(value, str) and member.value == value
            ):
                return member
        raise ValueError(
            f"Invalid required mode {value!r}. Expected True, False or 'default'."
        )


class Prop:
    r"""
    Declare one schema field.

    The sample value ``v`` is the field's default value and also determines
    its type: a string sample makes a string field, a list of records makes an
    array of nested objects, and so on.

    Parameters
    ----------
    v : Any
        Sample value. Must be valid against the field's own constraints.
    required : bool or "default", default True
        ``True`` makes missing input a ``REQ`` failure, ``False`` leaves the
        field out of the result, ``"default"`` substitutes the sample.
    min, max : optional
        Bounds. Applied to the length/size of strings and collections and to
        the value itself for numbers, dates and other ordered values.
    allowed : Iterable, optional
        The only accepted values.
    fallback : optional
        Replaces any value not in ``allowed`` instead of failing.
    integer : bool, optional
        Require a safe integer. Defaults to on for ``int`` samples.
    regex : str or re.Pattern, optional
        Pattern searched in ``str(value)``.
    custom : Callable[[Any], Fail | None], optional
        Extra check run after all others.
    description : str, optional
        Human-readable description of this field.

    Examples
    --------
        >>> from vetted import Prop, Schema
        >>> class User(Schema):
        ...     name = Prop("", min=1, max=100)
        ...     age = Prop(0, min=0, max=150)
        ...     role = Prop("user", allowed=["user", "admin"], fallback="user")
        ...     email = Prop("a@b.c", regex=r"^[^@]+@[^@]+\.[^@]+$")
        ...     bio = Prop("", required=False)
    """

    def __init__(
        self,
        v: Any,
        *,
        required: bool | str | Required = True,
        min: Any = None,
        max: Any = None,
        allowed: Iterable[Any] | None = None,
        fallback: Any = _MISSING,
        integer: bool | None = None,
        regex: str | re.Pattern | None = None,
        custom: Callable[[Any], Fail | None] | None = None,
        description: str | None = None,
    ):
        self.v = v
        self.required = Required.coerce(required)
        self.min = min
        self.max = max
        self.allowed = tuple(allowed) if allowed is not None else None
        self.fallback = fallback
        self.integer = integer
        self.regex = regex
        self.custom = custom
        self.description = description

    @property
    def has_fallback(self) -> bool:
        return self.fallback is not _MISSING

    def __repr__(self) -> str:
        parts = [repr(self.v)]
        if self.required is not Required.REQUIRED:
            parts.append(f"required={self.required.value!r}")
        for key in ("min", "max", "allowed", "integer", "regex", "custom"):
            value = getattr(self, key)
            if value is not None:
                parts.append(f"{key}={value!r}")
        if self.has_fallback:
            parts.append(f"fallback={self.fallback!r}")
        return f"Prop({', '.join(parts)})"


class Field:
    """
    Compiled field: a `Prop` with its resolved type and checker chain.

    Fields are built by the schema compiler and not modified afterwards;
    `vetted.recurse` swaps in a freshly compiled field instead.
    """

    __slots__ = ("name", "prop", "sample", "type", "checks")

    def __init__(
        self,
        name: str,
        prop: Prop,
        sample: Any,
        type_: Type,
        checks: tuple[Checker, ...],
    ):
        self.name = name
        self.prop = prop
        self.sample = sample
        self.type = type_
        self.checks = checks

    @classmethod
    def compile(
        cls, name: str, prop: Prop, registry: TypeRegistry, sample: Any = _MISSING
    ) -> Field:
        """
        Resolve the type for ``sample`` and compile the checker chain.

        Collection element types are resolved here too, against the same
        ``registry``, so a field parses the same way wherever it is reached.

        ``sample`` defaults to the declaration's own sample value.
        """
        if sample is _MISSING:
            sample = prop.v
        type_ = registry.resolve(sample).bind(sample, registry)
        checks = compile_checkers(name, sample, prop, type_.size, type_.comparable)
        return cls(name, prop, sample, type_, checks)

    @property
    def required(self) -> Required:
        return self.prop.required

    def first_fail(self, value: Any) -> Fail | None:
        """Return the first failing check for ``value``, or None."""
        for check in self.checks:
            fail = check(value)
            if fail is not None:
                return fail
        return None

    def check(self, value: Any) -> list[Fail]:
        """Return every failing check for ``value``, located at the field name."""
        fails = []
        for check in self.checks:
            fail = check(value)
            if fail is not None:
                fails.append(fail.with_path(self.name))
        return fails

    def __repr__(self) -> str:
        return f"Field({self.name!r}, type={self.type.name!r}, checks={len(self.checks)})"
