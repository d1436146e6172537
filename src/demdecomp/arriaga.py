"""Arriaga decomposition of a difference in life expectancy at birth.

The difference :math:`e_0^{(2)} - e_0^{(1)}` is split into a direct effect,
the change in person-years lived within each age interval, and an indirect
effect, the person-years added above the interval because more (or fewer)
people survive it.

The total contribution of each age equals the stepwise replacement
contribution obtained by replacing rates from the oldest age downward. Its
age pattern can therefore differ visibly from the Horiuchi and LTRE
decompositions, even though all methods sum to the same difference.
"""

import numpy as np
import pandas as pd

from demdecomp._typing import ArrayLike, NDArray
from demdecomp.evaluate import as_pars
from demdecomp.lifetable import Lx_to_Tx, lx_to_Lx, mx_to_lx, safe_divide


def _shift_next(vec: NDArray) -> NDArray:
    """Value at the next age, 0 past the last age."""
    return np.append(vec[1:], 0.0)


def arriaga_components(mx1: ArrayLike, mx2: ArrayLike) -> pd.DataFrame:
    """Direct, indirect and total age contributions to the change in e0.

    Parameters
    ----------
    mx1 : ArrayLike
        Age specific mortality rates of the first state.
    mx2 : ArrayLike
        Age specific mortality rates of the second state.

    Raises
    ------
    LengthMismatch
        Raised when the rate vectors differ in length.

    Returns
    -------
    pd.DataFrame
        Data frame with one row per age and columns `direct`, `indirect` and
        `total`. The `total` column sums to `mx_to_e0(mx2) - mx_to_e0(mx1)`.

    """
    mx1, mx2 = as_pars(mx1, mx2)

    lx1, lx2 = mx_to_lx(mx1), mx_to_lx(mx2)
    Lx1, Lx2 = lx_to_Lx(lx1), lx_to_Lx(lx2)
    Tx2 = Lx_to_Tx(Lx2)

    # survivorship ratio between the two states
    ratio = safe_divide(lx1, lx2)
    direct = lx1 * safe_divide(Lx2, lx2) - lx1 * safe_divide(Lx1, lx1)
    # no next age group for the open interval
    indirect = _shift_next(Tx2) * (ratio - _shift_next(ratio))

    return pd.DataFrame({
        "direct": direct,
        "indirect": indirect,
        "total": direct + indirect,
    })


def arriaga(mx1: ArrayLike, mx2: ArrayLike) -> NDArray:
    """Total age contributions to the difference in life expectancy at birth.

    See :func:`arriaga_components` for the direct and indirect parts.
    """
    return arriaga_components(mx1, mx2)["total"].to_numpy()
