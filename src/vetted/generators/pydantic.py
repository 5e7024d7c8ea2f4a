"""Pydantic model generator with constraint support."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Literal, Optional

from loguru import logger
from pydantic import BaseModel, create_model
from pydantic import Field as PydanticField

from ..base import Schema, metadata_of
from ..checkers import is_sized
from ..fields import Required
from ..registry import BigInt

if TYPE_CHECKING:  # pragma: no cover
    from ..fields import Field


def _python_type(sample: Any, models: dict[type, type[BaseModel] | None]) -> Any:
    if isinstance(sample, Schema):
        return _model_for(type(sample), models)
    if isinstance(sample, list):
        return list[_python_type(sample[0], models)] if sample else list[Any]
    if isinstance(sample, (set, frozenset)):
        element = next(iter(sample), None)
        return set[_python_type(element, models)] if sample else set[Any]
    if isinstance(sample, BigInt):
        return int
    if sample is None:
        return Any
    return type(sample)


def _field_kwargs(field: Field) -> dict[str, Any]:
    prop = field.prop
    kwargs: dict[str, Any] = {}
    if prop.description:
        kwargs["description"] = prop.description
    if is_sized(field.sample):
        if prop.min is not None:
            kwargs["min_length"] = prop.min
        if prop.max is not None:
            kwargs["max_length"] = prop.max
    else:
        if prop.min is not None:
            kwargs["ge"] = prop.min
        if prop.max is not None:
            kwargs["le"] = prop.max
    if prop.regex is not None:
        regex = prop.regex
        kwargs["pattern"] = regex.pattern if isinstance(regex, re.Pattern) else regex
    return kwargs


def _model_for(
    schema_cls: type[Schema], models: dict[type, type[BaseModel] | None]
) -> Any:
    if schema_cls in models:
        model = models[schema_cls]
        if model is None:
            # Self-referential schemas map the back reference to plain dicts
            logger.debug(f"Cyclic reference to '{schema_cls.__name__}' mapped to dict")
            return dict[str, Any]
        return model
    models[schema_cls] = None

    pydantic_fields = {}
    for field in metadata_of(schema_cls).fields:
        python_type = _python_type(field.sample, models)
        prop = field.prop

        # Allowed values without a fallback become a Literal
        if prop.allowed is not None and not prop.has_fallback:
            try:
                python_type = Literal[prop.allowed]  # type: ignore[valid-type]
            except TypeError:
                logger.debug(f"Field '{field.name}': allowed values kept as plain type")

        field_kwargs = _field_kwargs(field)
        if prop.required is Required.OPTIONAL:
            python_type = Optional[python_type]
            field_kwargs["default"] = None
        elif prop.required is Required.DEFAULT and not isinstance(field.sample, Schema):
            field_kwargs["default"] = field.type.default_to(field.sample)

        if field_kwargs:
            pydantic_fields[field.name] = (python_type, PydanticField(**field_kwargs))
        else:
            pydantic_fields[field.name] = (python_type, ...)

    model_name = schema_cls.__name__.removesuffix("Schema") + "Model"
    model: type[BaseModel] = create_model(model_name, **pydantic_fields)  # type: ignore[call-overload]
    models[schema_cls] = model
    return model


def create_pydantic_model(schema_cls: type[Schema]) -> type[BaseModel]:
    """
    Generate a Pydantic BaseModel from a Schema class.

    Sample types become annotations, nested schemas become nested models,
    min/max become length or value bounds, ``regex`` becomes ``pattern`` and
    ``allowed`` (without a fallback) becomes a ``Literal``. Optional fields
    default to None and ``required="default"`` fields to their sample.

    Parameters
    ----------
    schema_cls : type[Schema]
        A subclass of Schema.

    Returns
    -------
    type[BaseModel]
        A dynamically created Pydantic BaseModel class.
    """
    return _model_for(schema_cls, {})  # type: ignore[no-any-return]
