"""Row-wise validation of Polars DataFrames against a schema."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import polars as pl
from loguru import logger

from ..engine import validate_array

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Config


def parse_frame(schema_cls: type, df: pl.DataFrame, config: Config | None = None) -> list[Any]:
    """
    Validate each row of ``df`` as a record of ``schema_cls``.

    Rows are converted with ``iter_rows(named=True)``: null cells count as
    missing input, struct columns arrive as nested objects and list columns as
    arrays. Failure paths are ``[row].field``.

    Parameters
    ----------
    schema_cls : type
        A compiled schema class.
    df : pl.DataFrame
        Input frame.
    config : Config, optional
        Overrides the schema's configuration.

    Returns
    -------
    list
        Records for the valid rows. With the skip-invalid policy on, invalid
        rows are dropped with a warning.

    Raises
    ------
    TypeError
        If ``df`` is not a Polars DataFrame.
    CheckError
        If a row fails and is not skipped.
    """
    if not isinstance(df, pl.DataFrame):
        raise TypeError(f"expected a polars DataFrame but got {type(df).__name__}")
    rows = list(df.iter_rows(named=True))
    records = validate_array(schema_cls, rows, config)
    logger.debug(f"Validated {len(records)} of {df.height} rows as '{schema_cls.__name__}'")
    return records
