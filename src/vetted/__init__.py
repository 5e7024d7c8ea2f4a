"""
Vetted: sample-driven validation for JSON-like data

Declare a schema once with sample values. Parse untrusted input into records.
"""

from .base import Schema, define, recurse, sample
from .checkers import MAX_SAFE_INTEGER, is_safe_integer
from .config import (
    Config,
    add_type,
    augment_with,
    camel_to_snake,
    get_config,
    rename_with,
    set_config,
    skip_invalid_objects,
    snake_to_camel,
    warn_with,
)
from .engine import parse, parse_array, run, run_one, validate, validate_array
from .fails import (
    ALLOWED,
    BIGINT,
    INTEGER,
    MAX,
    MIN,
    REGEX,
    REQ,
    TYPE,
    UNKNOWN,
    CheckError,
    Fail,
    Failure,
    Result,
    Success,
)
from .fields import Field, Prop, Required
from .registry import (
    ALREADY_VALID,
    ArrayType,
    BigInt,
    BigIntType,
    CheckedObjectType,
    CollectionType,
    PrimitiveType,
    SetType,
    Type,
    TypeRegistry,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Schema",
    "Prop",
    "Required",
    "define",
    "sample",
    "recurse",
    # Entry points
    "run",
    "validate",
    "parse",
    "parse_array",
    "validate_array",
    "run_one",
    # Results and failures
    "Fail",
    "Success",
    "Failure",
    "Result",
    "CheckError",
    "TYPE",
    "MIN",
    "MAX",
    "REQ",
    "ALLOWED",
    "REGEX",
    "INTEGER",
    "UNKNOWN",
    "BIGINT",
    # Types
    "Type",
    "TypeRegistry",
    "CollectionType",
    "ArrayType",
    "SetType",
    "CheckedObjectType",
    "PrimitiveType",
    "BigInt",
    "BigIntType",
    "ALREADY_VALID",
    # Configuration
    "Config",
    "get_config",
    "set_config",
    "add_type",
    "skip_invalid_objects",
    "warn_with",
    "augment_with",
    "rename_with",
    "snake_to_camel",
    "camel_to_snake",
    # Internal (for advanced use)
    "Field",
    "MAX_SAFE_INTEGER",
    "is_safe_integer",
]
