"""Engine configuration: type registry, skip policy and extension hooks."""

from __future__ import annotations

import re
from typing import Any, Callable

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .registry import Type, TypeRegistry


def _warn(message: str) -> None:
    logger.warning(message)


def _identity(value: Any) -> Any:
    return value


def snake_to_camel(name: str) -> str:
    """Map ``created_at`` to ``createdAt``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def camel_to_snake(name: str) -> str:
    """Map ``createdAt`` to ``created_at``."""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


class Config(BaseModel):
    """
    Settings consumed by the schema compiler and the parse engine.

    Configs are immutable; use `replace` to derive a modified copy. A config
    can be bound to a schema at definition time
    (``class Point(Schema, config=cfg)``) or passed to any entry point.
    Otherwise the process default from `get_config` applies.

    Parameters
    ----------
    skip_invalid : bool, default True
        Drop invalid array elements and invalid optional nested objects with a
        warning instead of failing the whole parse.
    warn : Callable[[str], None]
        Sink for skip warnings. Defaults to ``loguru.logger.warning``.
    augment : Callable[[Any], Any]
        Applied to every record the engine builds; its return value replaces
        the record.
    rename : Callable[[str], str]
        Maps a field name to the key looked up in the input object.
    registry : TypeRegistry
        Types used to resolve field samples.

    Examples
    --------
        >>> from vetted import Config, snake_to_camel
        >>> cfg = Config(rename=snake_to_camel)
        >>> strict = cfg.replace(skip_invalid=False)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    skip_invalid: bool = True
    warn: Callable[[str], None] = _warn
    augment: Callable[[Any], Any] = _identity
    rename: Callable[[str], str] = _identity
    registry: TypeRegistry = Field(default_factory=TypeRegistry.default)

    def replace(self, **changes: Any) -> Config:
        """
        Return a copy with ``changes`` applied.

        The copy gets its own copy of the registry unless ``registry`` is
        among the changes, so types added to one config never leak into
        the other.
        """
        changes.setdefault("registry", self.registry.copy())
        return self.model_copy(update=changes)


_default = Config()


def get_config() -> Config:
    """Return the process-wide default configuration."""
    return _default


def set_config(config: Config) -> Config:
    """Install ``config`` as the process-wide default and return the previous one."""
    global _default
    previous = _default
    _default = config
    return previous


def add_type(type_: Type) -> None:
    """Register ``type_`` with the default configuration's registry."""
    _default.registry.add(type_)


def skip_invalid_objects(flag: bool) -> None:
    """Toggle the skip-invalid policy of the default configuration."""
    set_config(_default.replace(skip_invalid=flag))


def warn_with(warner: Callable[[str], None]) -> None:
    """Route skip warnings of the default configuration to ``warner``."""
    set_config(_default.replace(warn=warner))


def augment_with(augment: Callable[[Any], Any]) -> None:
    """Wrap every record built under the default configuration with ``augment``."""
    set_config(_default.replace(augment=augment))


def rename_with(rename: Callable[[str], str]) -> None:
    """Set the field-name to input-key strategy of the default configuration."""
    set_config(_default.replace(rename=rename))
