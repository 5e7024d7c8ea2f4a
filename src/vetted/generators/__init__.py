"""Generators for different frameworks."""

from .polars import parse_frame
from .pydantic import create_pydantic_model

__all__ = [
    "create_pydantic_model",
    "parse_frame",
]
