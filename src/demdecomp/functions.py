"""
Scalar demographic functions to decompose
"""

import numpy as np

from demdecomp._typing import ArrayLike, NDArray, ScalarFunction
from demdecomp.errors import LengthMismatch
from demdecomp.lifetable import mx_to_e0


def life_expectancy(mx: ArrayLike) -> float:
    """Life expectancy at birth, see :func:`demdecomp.lifetable.mx_to_e0`."""
    return mx_to_e0(mx)


def _split_blocks(theta: ArrayLike, n_blocks: int) -> NDArray:
    theta = np.asarray(theta, dtype=float)
    if n_blocks < 1 or theta.size % n_blocks != 0:
        raise LengthMismatch(
            f"cannot split {theta.size} parameters into {n_blocks} equal blocks."
        )
    return theta.reshape(n_blocks, -1)


def life_expectancy_by_cause(theta: ArrayLike, n_causes: int) -> float:
    """Life expectancy at birth from stacked cause specific rates.

    Parameters
    ----------
    theta : ArrayLike
        Cause specific mortality rates stacked cause by cause, all ages of
        the first cause, then all ages of the second cause, and so on.
    n_causes : int
        Number of causes.

    Returns
    -------
    float
        Life expectancy at birth of the all cause rates.

    """
    return mx_to_e0(_split_blocks(theta, n_causes).sum(axis=0))


def crude_death_rate(theta: ArrayLike) -> float:
    """Crude death rate from stacked rates and population structure.

    `theta` holds the age specific rates followed by the proportion of the
    population in each age group.
    """
    mx, cx = _split_blocks(theta, 2)
    return float(np.sum(mx * cx))


def total_fertility_rate(fx: ArrayLike, width: float = 1.0) -> float:
    """Total fertility rate from age specific fertility rates.

    `width` is the length of each age interval, e.g. 5 for five year groups.
    """
    return float(width * np.sum(np.asarray(fx, dtype=float)))


class ImputedBlock:
    """Function of a parameter vector with one position imputed.

    Some parameters are constrained, e.g. the population structure sums to 1,
    so one of them is not free. This wrapper takes the reduced vector without
    the position `skip` and fills it in as `1 - sum` of the other positions of
    `block` before calling the full function.

    Which position is imputed changes how the contribution of the block is
    spread over its positions, but not the sum of the block's contributions.

    Parameters
    ----------
    func : ScalarFunction
        Function of the full parameter vector.
    n : int
        Length of the full parameter vector.
    block : slice
        Positions of the full vector that sum to 1.
    skip : int
        Position of the full vector, inside `block`, that is imputed.

    """

    def __init__(self, func: ScalarFunction, n: int, block: slice, skip: int) -> None:
        self.func = func
        self.n = n
        self.block = np.arange(n)[block]
        if skip not in self.block:
            raise ValueError(f"skip={skip} is not in block {self.block.tolist()}.")
        self.skip = int(skip)
        self.others = self.block[self.block != self.skip]

    def reduce(self, theta: ArrayLike) -> NDArray:
        """Drop the imputed position from a full parameter vector."""
        theta = np.asarray(theta, dtype=float)
        if theta.size != self.n:
            raise LengthMismatch(f"expected {self.n} parameters, got {theta.size}.")
        return np.delete(theta, self.skip)

    def impute(self, reduced: ArrayLike) -> NDArray:
        """Rebuild the full parameter vector from the reduced one."""
        reduced = np.asarray(reduced, dtype=float)
        if reduced.size != self.n - 1:
            raise LengthMismatch(
                f"expected {self.n - 1} parameters, got {reduced.size}."
            )
        theta = np.insert(reduced, self.skip, 0.0)
        theta[self.skip] = 1.0 - theta[self.others].sum()
        return theta

    def expand(self, contributions: ArrayLike) -> NDArray:
        """Put a zero contribution back at the imputed position."""
        return np.insert(np.asarray(contributions, dtype=float), self.skip, 0.0)

    def __call__(self, reduced: ArrayLike) -> float:
        return self.func(self.impute(reduced))


FUNCTIONS: dict[str, ScalarFunction] = {
    "e0": life_expectancy,
    "cdr": crude_death_rate,
    "tfr": total_fertility_rate,
}
