"""
Horiuchi decomposition by numerical line integration
"""

import numpy as np
from loguru import logger

from demdecomp._typing import ArrayLike, NDArray, ScalarFunction
from demdecomp.errors import InvalidResolution
from demdecomp.evaluate import Evaluator, as_pars, check_budget

DEFAULT_N = 20


def check_resolution(N: int, name: str = "N") -> int:
    """Validate an integration resolution, which must be an integer >= 1."""
    if isinstance(N, bool) or not isinstance(N, (int, np.integer)):
        raise InvalidResolution(f"{name} must be an integer, got {N!r}.")
    if N < 1:
        raise InvalidResolution(f"{name} must be at least 1, got {N}.")
    return int(N)


def interpolation_points(pars1: NDArray, pars2: NDArray, N: int) -> NDArray:
    """Midpoints of the `N` equal segments of the path from `pars1` to `pars2`.

    Returns
    -------
    NDArray
        Array of shape `(N, n)`, row `k` is the parameter vector at fraction
        `(k + 0.5) / N` of the way.

    """
    fractions = (np.arange(N) + 0.5) / N
    return pars1 + np.outer(fractions, pars2 - pars1)


def horiuchi(
    func: ScalarFunction,
    pars1: ArrayLike,
    pars2: ArrayLike,
    N: int = DEFAULT_N,
    max_evaluations: int | None = None,
) -> NDArray:
    """Decompose `func(pars2) - func(pars1)` by the method of Horiuchi et al.

    The gradient of `func` is integrated along the straight line between the
    two parameter vectors. The line is cut into `N` segments; at the midpoint
    of every segment each parameter in turn is moved half a segment down and
    half a segment up while the other parameters stay at the midpoint, and the
    resulting change in `func` is credited to that parameter.

    Parameters
    ----------
    func : ScalarFunction
        Function taking a parameter vector and returning a scalar. It is
        treated as a black box.
    pars1 : ArrayLike
        Parameters of the first state.
    pars2 : ArrayLike
        Parameters of the second state.
    N : int, default=20
        Number of integration segments. Larger values are more accurate and
        cost `2 * N * len(pars1)` evaluations of `func`.
    max_evaluations : int, optional
        Upper bound on the number of evaluations of `func`.

    Raises
    ------
    LengthMismatch
        Raised when `pars1` and `pars2` differ in length.
    InvalidResolution
        Raised when `N` is not an integer at least 1.
    EvaluationBudgetExceeded
        Raised when the decomposition needs more than `max_evaluations`
        evaluations.
    EvaluationFailure
        Raised when `func` fails or returns a non-finite value at any
        perturbed vector.

    Returns
    -------
    NDArray
        Contribution of each parameter. The sum converges to
        `func(pars2) - func(pars1)` as `N` grows, and is exact for any `N`
        when `func` is at most quadratic.

    """
    pars1, pars2 = as_pars(pars1, pars2)
    N = check_resolution(N)
    n = pars1.size
    check_budget("horiuchi", 2 * N * n, max_evaluations)

    evaluate = Evaluator(func, "horiuchi")
    half_delta = (pars2 - pars1) / N / 2
    contributions = np.zeros((N, n))
    for step, base in enumerate(interpolation_points(pars1, pars2, N)):
        for i in range(n):
            upper = base.copy()
            lower = base.copy()
            upper[i] += half_delta[i]
            lower[i] -= half_delta[i]
            contributions[step, i] = (
                evaluate(upper, step=step, index=i) -
                evaluate(lower, step=step, index=i)
            )

    logger.debug(
        f"horiuchi used {evaluate.num_evaluations} evaluations for "
        f"{n} parameters and N={N}"
    )
    return contributions.sum(axis=0)
