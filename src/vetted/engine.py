"""The recursive parse/validate engine and its public entry points."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from loguru import logger

from .base import metadata_of
from .config import Config, get_config
from .fails import REQ, TYPE, UNKNOWN, CheckError, Fail, Failure, Result, Success
from .fields import Field, Required
from .registry import ArrayType, CheckedObjectType, type_name

# Returned by `_run_field` for optional fields left out of the result
_OMIT = object()


def _config_for(cls: type, config: Config | None) -> Config:
    if config is not None:
        return config
    bound = getattr(cls, "_config", None)
    return bound if bound is not None else get_config()


def _run_field(field: Field, path: str, data: Mapping[str, Any], config: Config) -> Any:
    prop = field.prop
    value = data.get(config.rename(field.name))

    if value is None:
        if prop.required is Required.OPTIONAL:
            return _OMIT
        if prop.required is Required.REQUIRED:
            return Failure(Fail(path, REQ, "missing required property"))
        value = field.type.default_to(field.sample)

    # Fallback substitution happens before any type or constraint check
    if prop.allowed is not None and prop.has_fallback and value not in prop.allowed:
        value = prop.fallback

    reason = field.type.mismatch(value, field.sample)
    if isinstance(reason, str):
        return Failure(Fail(path, TYPE, reason))

    fail = field.first_fail(value)
    if fail is not None:
        return Failure(fail.with_path(path))

    if reason:
        return Success(value)

    r = field.type.parse(path, field.sample, value, config)
    if r.success:
        return r
    if (
        config.skip_invalid
        and prop.required is Required.OPTIONAL
        and isinstance(field.type, CheckedObjectType)
    ):
        config.warn(f"skipping nested object {r.fail.path} - {r.fail.message}")
        return _OMIT
    return r


def run_schema(cls: type, prefix: str, data: Any, config: Config) -> Result[Any]:
    """
    Validate ``data`` against schema ``cls``.

    Fields are processed in declaration order and the first failure ends the
    run. Failure paths are built from ``prefix``: ``"user"`` yields paths like
    ``"user.name"``, ``"items[3]"`` yields ``"items[3].name"``.

    Parameters
    ----------
    cls : type
        A compiled schema class.
    prefix : str
        Path of ``data`` within the top-level input; empty at the top level.
    data : Any
        Input object, or an existing record of ``cls``.
    config : Config
        Registry, skip policy and hooks for this run.

    Returns
    -------
    Success | Failure
        The new record (passed through ``config.augment``) or the first
        failure.
    """
    if isinstance(data, cls):
        return Success(data)
    metadata = metadata_of(cls)
    if not isinstance(data, Mapping):
        return Failure(Fail(prefix, TYPE, f"expected object but got {type_name(data)}"))

    object_prefix = prefix + "." if prefix else ""
    values: dict[str, Any] = {}
    for field in metadata.fields:
        path = object_prefix + field.name
        try:
            outcome = _run_field(field, path, data, config)
        except Exception as e:
            logger.opt(exception=e).debug(f"Unexpected error validating '{path}'")
            return Failure(Fail(path, UNKNOWN, str(e) or e.__class__.__name__))
        if outcome is _OMIT:
            continue
        if not outcome.success:
            return outcome
        values[field.name] = outcome.value

    return Success(config.augment(cls._trusted(values)))


def run(cls: type, data: Any, config: Config | None = None) -> Result[Any]:
    """
    Validate ``data`` against schema ``cls`` without raising.

    Examples
    --------
        >>> r = run(Point, {"x": 1})
        >>> r.success, r.fail.code
        (False, 'REQ')
    """
    return run_schema(cls, "", data, _config_for(cls, config))


def validate(cls: type, data: Any, config: Config | None = None) -> Any:
    """Validate ``data`` against schema ``cls``, raising `CheckError` on failure."""
    r = run(cls, data, config)
    if r.success:
        return r.value
    raise CheckError(r.fail)


def parse(cls: type, text: str | bytes, config: Config | None = None) -> Any:
    """Decode a JSON document and validate it against schema ``cls``."""
    return validate(cls, json.loads(text), config)


def validate_array(cls: type, data: Any, config: Config | None = None) -> list[Any]:
    """
    Validate a list of objects against schema ``cls``.

    Elements are handled like the elements of an array field: failure paths
    are ``[index].field`` using input positions, and with the skip-invalid
    policy on, invalid elements are dropped with a warning.

    Raises
    ------
    TypeError
        If ``data`` is not a list.
    CheckError
        If an element fails and is not skipped.
    """
    if not isinstance(data, list):
        raise TypeError(f"expected array but got {type_name(data)}")
    cfg = _config_for(cls, config)
    metadata = metadata_of(cls)
    array_sample = [metadata.sample]
    array_type = ArrayType().bind(array_sample, metadata.registry)
    r = array_type.parse("", array_sample, data, cfg)
    if r.success:
        return r.value
    raise CheckError(r.fail)


def parse_array(cls: type, text: str | bytes, config: Config | None = None) -> list[Any]:
    """Decode a JSON array and validate each element against schema ``cls``."""
    return validate_array(cls, json.loads(text), config)


def run_one(cls: type, name: str, value: Any) -> list[Fail]:
    """
    Check a single field value without building a record.

    Runs every constraint check of field ``name`` (no type or required
    handling) and returns all failures, each located at the field name.
    """
    return metadata_of(cls).field(name).check(value)
