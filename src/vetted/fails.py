"""Failure codes, the `Fail` value, parse results and `CheckError`."""

from __future__ import annotations

from typing import Any, Generic, TypeVar, Union

TYPE = "TYPE"
MIN = "MIN"
MAX = "MAX"
REQ = "REQ"
ALLOWED = "ALLOWED"
REGEX = "REGEX"
INTEGER = "INTEGER"
UNKNOWN = "UNKNOWN"
BIGINT = "BIGINT"

T = TypeVar("T")


class Fail:
    """
    A single validation failure.

    Parameters
    ----------
    path : str
        Dotted location of the failing value, e.g. ``"items[2].name"``.
    code : str
        One of the built-in codes (``TYPE``, ``MIN``, ``REQ`` ...) or any
        application-defined code returned by a custom checker.
    message : str
        Human-readable description of the problem.

    Examples
    --------
        >>> fail = Fail("age", MIN, "value of -1 < minimum value of 0")
        >>> fail.with_path("user.age").path
        'user.age'
    """

    __slots__ = ("path", "code", "message")

    def __init__(self, path: str, code: str, message: str):
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "message", message)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def with_path(self, path: str) -> Fail:
        """Return a copy of this failure located at ``path``."""
        return Fail(path, self.code, self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fail):
            return NotImplemented
        return (self.path, self.code, self.message) == (
            other.path,
            other.code,
            other.message,
        )

    def __hash__(self) -> int:
        return hash((self.path, self.code, self.message))

    def __repr__(self) -> str:
        return f"Fail(path={self.path!r}, code={self.code!r}, message={self.message!r})"

    def __str__(self) -> str:
        # Top-level failures have an empty path and render as ": message"
        return f"{self.path}: {self.message}"


class Success(Generic[T]):
    """Successful parse outcome carrying the typed value."""

    __slots__ = ("value",)
    success = True

    def __init__(self, value: T):
        self.value = value

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


class Failure:
    """Failed parse outcome carrying the first `Fail` encountered."""

    __slots__ = ("fail",)
    success = False

    def __init__(self, fail: Fail):
        self.fail = fail

    def __repr__(self) -> str:
        return f"Failure({self.fail!r})"


Result = Union[Success[T], Failure]


class CheckError(ValueError):
    """
    Raised by the raising entry points when validation fails.

    The message has the form ``"<dotted.path>: <message>"``.
    """

    def __init__(self, fail: Fail):
        super().__init__(str(fail))
        self.fail = fail
        self.path = fail.path
        self.code = fail.code
