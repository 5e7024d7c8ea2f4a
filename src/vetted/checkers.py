"""Constraint checkers compiled from a field's `Prop` declaration."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Callable, Optional

from .fails import ALLOWED, INTEGER, MAX, MIN, REGEX, Fail

if TYPE_CHECKING:  # pragma: no cover
    from .fields import Prop

Checker = Callable[[Any], Optional[Fail]]

# Largest integer a JSON number survives as without losing precision
MAX_SAFE_INTEGER = 2**53 - 1

_LENGTH_TYPES = (str, bytes, bytearray, list, tuple)


def _identity(value: Any) -> Any:
    return value


def is_sized(sample: Any) -> bool:
    """Return True if min/max should bound the length/size of ``sample``."""
    return isinstance(sample, str) or hasattr(sample, "__len__")


def _measure_word(sample: Any) -> str:
    if isinstance(sample, _LENGTH_TYPES):
        return "length"
    return "size"


def min_checker(
    name: str,
    sample: Any,
    limit: Any,
    size: Callable[[Any], int] = len,
    comparable: Callable[[Any], Any] = _identity,
) -> Checker | None:
    if limit is None:
        return None
    if is_sized(sample):
        word = _measure_word(sample)

        def check_min_size(value: Any) -> Fail | None:
            n = size(value)
            if n < limit:
                return Fail(name, MIN, f"{word} of {n} < minimum {word} of {limit}")
            return None

        return check_min_size

    def check_min(value: Any) -> Fail | None:
        n = comparable(value)
        if n is not None and n < limit:
            return Fail(name, MIN, f"value of {n} < minimum value of {limit}")
        return None

    return check_min


def max_checker(
    name: str,
    sample: Any,
    limit: Any,
    size: Callable[[Any], int] = len,
    comparable: Callable[[Any], Any] = _identity,
) -> Checker | None:
    if limit is None:
        return None
    if is_sized(sample):
        word = _measure_word(sample)

        def check_max_size(value: Any) -> Fail | None:
            n = size(value)
            if n > limit:
                return Fail(name, MAX, f"{word} of {n} > maximum {word} of {limit}")
            return None

        return check_max_size

    def check_max(value: Any) -> Fail | None:
        n = comparable(value)
        if n is not None and n > limit:
            return Fail(name, MAX, f"value of {n} > maximum value of {limit}")
        return None

    return check_max


def allowed_checker(name: str, allowed: Any) -> Checker | None:
    if allowed is None:
        return None
    valid = ",".join(str(v) for v in allowed)
    try:
        members: Any = frozenset(allowed)
    except TypeError:
        # Unhashable choices (dicts, lists) fall back to equality scans
        members = list(allowed)

    def check_allowed(value: Any) -> Fail | None:
        try:
            ok = value in members
        except TypeError:
            ok = any(value == m for m in allowed)
        if not ok:
            return Fail(name, ALLOWED, f"invalid value: {value} - valid values are: {valid}")
        return None

    return check_allowed


def regex_checker(name: str, regex: str | re.Pattern | None) -> Checker | None:
    if regex is None:
        return None
    pattern = re.compile(regex) if isinstance(regex, str) else regex

    def check_regex(value: Any) -> Fail | None:
        if pattern.search(str(value)) is None:
            return Fail(
                name, REGEX, f"invalid value: {value} - must match /{pattern.pattern}/"
            )
        return None

    return check_regex


def is_safe_integer(value: Any) -> bool:
    """Return True if ``value`` is an integer exactly representable as a double."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return abs(value) <= MAX_SAFE_INTEGER
    if isinstance(value, float):
        return value.is_integer() and abs(value) <= MAX_SAFE_INTEGER
    return False


def integer_checker(name: str, sample: Any, integer: bool | None) -> Checker | None:
    if isinstance(sample, bool):
        return None
    if integer is None:
        # On by default for plain int samples; float samples opt in explicitly
        integer = type(sample) is int
    if not integer or not isinstance(sample, (int, float)):
        return None

    def check_integer(value: Any) -> Fail | None:
        if not is_safe_integer(value):
            return Fail(name, INTEGER, f"value of {value} is not a safe integer")
        return None

    return check_integer


def compile_checkers(
    name: str,
    sample: Any,
    prop: Prop,
    size: Callable[[Any], int] = len,
    comparable: Callable[[Any], Any] = _identity,
) -> tuple[Checker, ...]:
    """
    Compile the ordered checker chain for one field.

    The chain runs min, max, allowed, regex, integer and custom checks in that
    order. Checks that do not apply to the declaration are left out entirely.

    Parameters
    ----------
    name : str
        Field name, used as the path of produced failures.
    sample : Any
        The field's sample value. Decides whether min/max bound the size or
        the value itself, and whether the integer check applies.
    prop : Prop
        The field declaration.
    size : Callable, default len
        Measures sized values; collection types pass their own element count.
    comparable : Callable, optional
        Maps unsized values to what the bounds compare against; None skips
        the bound. Types such as `BigIntType` pass their own conversion.

    Returns
    -------
    tuple[Checker, ...]
        Functions returning a `Fail` or None.
    """
    candidates = (
        min_checker(name, sample, prop.min, size, comparable),
        max_checker(name, sample, prop.max, size, comparable),
        allowed_checker(name, prop.allowed),
        regex_checker(name, prop.regex),
        integer_checker(name, sample, prop.integer),
        prop.custom,
    )
    return tuple(c for c in candidates if c is not None)


__all__ = [
    "Checker",
    "MAX_SAFE_INTEGER",
    "compile_checkers",
    "is_safe_integer",
    "is_sized",
]
