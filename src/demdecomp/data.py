"""Preparation of tabular inputs and tidy outputs.

Decomposition methods work on plain aligned vectors. The functions here are
the boundary between data frames and those vectors: they sort the rows, check
that the two states are aligned and replace missing values explicitly.
"""

import numpy as np
import pandas as pd
from loguru import logger

from demdecomp._typing import ArrayLike, DataFrame, NDArray, ScalarFunction
from demdecomp.decompose import decompose
from demdecomp.errors import LengthMismatch


def prepare_vectors(
    df: DataFrame,
    col1: str,
    col2: str,
    sort_by: str | list[str] | None = None,
    fill_value: float | None = 0.0,
) -> tuple[NDArray, NDArray]:
    """Extract two aligned parameter vectors from a data frame.

    Parameters
    ----------
    df : DataFrame
        One row per parameter, e.g. per age group.
    col1 : str
        Column with the parameters of the first state.
    col2 : str
        Column with the parameters of the second state.
    sort_by : str | list[str], optional
        Columns defining the parameter order, e.g. `"age"`. Rows are sorted
        by these columns, which must not contain duplicates. If `None` the
        row order of `df` is used.
    fill_value : float, optional
        Value replacing missing parameters. Default is 0. If `None`, missing
        parameters raise an error.

    Raises
    ------
    KeyError
        Raised when a column is missing from `df`.
    ValueError
        Raised when `sort_by` has duplicates, or when values are missing and
        `fill_value` is `None`.

    Returns
    -------
    tuple[NDArray, NDArray]
        The two parameter vectors, in the same order.

    """
    sort_by = [sort_by] if isinstance(sort_by, str) else sort_by
    missing_cols = [
        col for col in [col1, col2] + list(sort_by or []) if col not in df.columns
    ]
    if missing_cols:
        raise KeyError(f"Missing columns {missing_cols}.")

    if sort_by:
        if df.duplicated(sort_by).any():
            raise ValueError(f"Duplicated rows for {sort_by}.")
        df = df.sort_values(sort_by, ignore_index=True)

    vectors = []
    for col in [col1, col2]:
        vec = pd.to_numeric(df[col]).to_numpy(dtype=float)
        num_missing = int(np.isnan(vec).sum())
        if num_missing:
            if fill_value is None:
                raise ValueError(f"{num_missing} missing values in {col}.")
            logger.info(f"Filling {num_missing} missing values in {col} with {fill_value}")
            vec = np.where(np.isnan(vec), fill_value, vec)
        vectors.append(vec)
    return vectors[0], vectors[1]


def decompose_dataframe(
    df: DataFrame,
    func: ScalarFunction | None,
    col1: str,
    col2: str,
    by: str | list[str] | None = None,
    sort_by: str | list[str] | None = None,
    method: str = "horiuchi",
    fill_value: float | None = 0.0,
    **kwargs,
) -> DataFrame:
    """Decompose within every group of a data frame.

    Parameters
    ----------
    df : DataFrame
        Data frame with one row per parameter and group.
    func : ScalarFunction, optional
        Scalar function of the parameter vector of one group.
    col1 : str
        Column with the parameters of the first state.
    col2 : str
        Column with the parameters of the second state.
    by : str | list[str], optional
        Grouping columns, e.g. `["location_id", "sex_id"]`. If `None` the
        whole data frame is one group.
    sort_by : str | list[str], optional
        Columns defining the parameter order within a group.
    method : str, default='horiuchi'
        Decomposition method, see :func:`demdecomp.decompose.decompose`.
    fill_value : float, optional
        Value replacing missing parameters, see :func:`prepare_vectors`.
    **kwargs
        Options of the decomposition method.

    Returns
    -------
    DataFrame
        The rows of `df`, sorted by `by` and `sort_by`, with a new column
        `contribution`.

    """
    by = [by] if isinstance(by, str) else list(by or [])
    sort_by = [sort_by] if isinstance(sort_by, str) else list(sort_by or [])
    keys = by + sort_by
    df = df.sort_values(keys, ignore_index=True) if keys else df.reset_index(drop=True)

    groups = df.groupby(by, sort=False) if by else [((), df)]
    results = []
    for key, group in groups:
        logger.debug(f"Decomposing group {key} with {method}")
        pars1, pars2 = prepare_vectors(
            group, col1, col2, sort_by=sort_by or None, fill_value=fill_value
        )
        result = group.copy()
        result["contribution"] = decompose(func, pars1, pars2, method, **kwargs)
        results.append(result)
    return pd.concat(results, ignore_index=True)


def contributions_to_frame(
    contributions: ArrayLike,
    index: ArrayLike,
    blocks: list[str] | None = None,
) -> DataFrame:
    """Reshape stacked contributions into an index by block table.

    Parameters
    ----------
    contributions : ArrayLike
        Contributions of a parameter vector made of equal blocks, e.g. the
        rates of several causes stacked cause by cause.
    index : ArrayLike
        Labels of the positions within a block, e.g. ages.
    blocks : list[str], optional
        Labels of the blocks. Defaults to `block_0, block_1, ...`.

    Raises
    ------
    LengthMismatch
        Raised when the contributions do not split into blocks of
        `len(index)`.

    Returns
    -------
    DataFrame
        Data frame indexed by `index` with one column per block.

    """
    contributions = np.asarray(contributions, dtype=float)
    index = list(index)
    if not index or contributions.size % len(index) != 0:
        raise LengthMismatch(
            f"{contributions.size} contributions do not split into blocks of "
            f"{len(index)}."
        )
    n_blocks = contributions.size // len(index)
    if blocks is None:
        blocks = [f"block_{i}" for i in range(n_blocks)]
    if len(blocks) != n_blocks:
        raise LengthMismatch(f"Expected {n_blocks} block labels, got {len(blocks)}.")
    return pd.DataFrame(
        contributions.reshape(n_blocks, len(index)).T, index=index, columns=blocks
    )
