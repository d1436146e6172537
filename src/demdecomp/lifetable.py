"""Lifetable columns from age specific mortality rates.

The lifetable here is the simple single-interval discretization used to
build scalar functions for decomposition: survivorship is the exponential of
the negative cumulative rate and person-years are the trapezoid between
consecutive survivorship values, with nobody surviving past the last age.
The radix is 1, so :math:`e_0 = T_0`.
"""

import numpy as np
import pandas as pd
from loguru import logger

from demdecomp._typing import ArrayLike, NDArray
from demdecomp.errors import DivisionSingularity


def safe_divide(num: NDArray, den: NDArray, strict: bool = False) -> NDArray:
    """Element-wise division that puts 0 wherever the denominator is 0.

    Parameters
    ----------
    num : NDArray
        Numerator.
    den : NDArray
        Denominator, same shape as `num`.
    strict : bool, default=False
        If `True`, raise instead of substituting.

    Raises
    ------
    DivisionSingularity
        Raised when `strict` is `True` and any denominator is 0.

    Returns
    -------
    NDArray
        The ratio, with 0 at the singular positions.

    """
    num = np.asarray(num, dtype=float)
    den = np.asarray(den, dtype=float)
    singular = den == 0
    if singular.any():
        positions = np.flatnonzero(singular).tolist()
        if strict:
            raise DivisionSingularity(
                f"zero denominator at positions {positions}"
            )
        logger.debug(f"zero denominator at positions {positions}, using 0")
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = num / np.where(singular, 1.0, den)
    return np.where(singular, 0.0, ratio)


def mx_to_lx(mx: ArrayLike) -> NDArray:
    r"""Survivorship :math:`l_x = \exp(-\sum_{j<x} m_j)`, with :math:`l_0 = 1`.

    Missing rates are treated as 0 before accumulating. The closing value
    past the last age is dropped so the output has the same length as `mx`.
    """
    mx = np.asarray(mx, dtype=float)
    mx = np.where(np.isnan(mx), 0.0, mx)
    if mx.size == 0:
        return mx
    cumulative = np.concatenate([[0.0], np.cumsum(mx)[:-1]])
    return np.exp(-cumulative)


def lx_to_Lx(lx: ArrayLike) -> NDArray:
    """Person-years in each age interval, by the trapezoid rule.

    Survivorship past the last index is taken to be 0.
    """
    lx = np.asarray(lx, dtype=float)
    lx_next = np.append(lx[1:], 0.0)
    return (lx + lx_next) / 2


def Lx_to_Tx(Lx: ArrayLike) -> NDArray:
    """Person-years remaining above each age (reverse cumulative sum)."""
    Lx = np.asarray(Lx, dtype=float)
    return np.cumsum(Lx[::-1])[::-1]


def lx_to_ex(lx: ArrayLike, strict: bool = False) -> NDArray:
    """Remaining life expectancy at each age, `Tx / lx`.

    Ages with zero survivorship get a life expectancy of 0. With
    `strict=True` a :class:`~demdecomp.errors.DivisionSingularity` is raised
    instead.
    """
    lx = np.asarray(lx, dtype=float)
    Tx = Lx_to_Tx(lx_to_Lx(lx))
    return safe_divide(Tx, lx, strict=strict)


def mx_to_e0(mx: ArrayLike) -> float:
    """Life expectancy at birth from age specific mortality rates.

    This is the default scalar function for decomposing life expectancy.
    """
    return float(lx_to_ex(mx_to_lx(mx))[0])


def lifetable(mx: ArrayLike, age: ArrayLike | None = None) -> pd.DataFrame:
    """Build the lifetable columns for one rate schedule.

    Parameters
    ----------
    mx : ArrayLike
        Age specific mortality rates.
    age : ArrayLike, optional
        Age labels for the rows. Defaults to `0, 1, ..., len(mx) - 1`.

    Returns
    -------
    pd.DataFrame
        Data frame with columns `age`, `mx`, `lx`, `Lx`, `Tx` and `ex`.

    """
    mx = np.asarray(mx, dtype=float)
    if age is None:
        age = np.arange(mx.size)
    lx = mx_to_lx(mx)
    Lx = lx_to_Lx(lx)
    Tx = Lx_to_Tx(Lx)
    return pd.DataFrame({
        "age": np.asarray(age),
        "mx": mx,
        "lx": lx,
        "Lx": Lx,
        "Tx": Tx,
        "ex": safe_divide(Tx, lx),
    })
