"""Life table response experiment (LTRE) decomposition.

Contributions are sensitivities of the function, evaluated between the two
parameter vectors, multiplied by the parameter differences. This is a first
order approximation: the sum of the contributions misses the total difference
by an amount that grows with the curvature of the function and with the size
of the change. Using `N > 1` averages sensitivities over several points of
the path and reduces that error.
"""

import numpy as np
from loguru import logger

from demdecomp._typing import ArrayLike, GradientFunction, NDArray, ScalarFunction
from demdecomp.errors import EvaluationFailure, InvalidResolution
from demdecomp.evaluate import Evaluator, as_pars, check_budget
from demdecomp.horiuchi import check_resolution, interpolation_points

DEFAULT_STEP = 1e-6


def check_step(step: float) -> float:
    """Validate the relative step of the numerical derivative."""
    if not np.isfinite(step) or step <= 0:
        raise InvalidResolution(f"step must be a positive number, got {step!r}.")
    return float(step)


def derivative_steps(pars: NDArray, step: float = DEFAULT_STEP) -> NDArray:
    """Absolute step for each coordinate, `step` relative to its magnitude.

    Coordinates equal to 0 use `step` as the absolute step.
    """
    scale = np.abs(pars)
    return step * np.where(scale > 0, scale, 1.0)


def numerical_gradient(
    func: ScalarFunction | Evaluator,
    pars: ArrayLike,
    step: float = DEFAULT_STEP,
) -> NDArray:
    """Gradient of `func` at `pars` by symmetric differences.

    Parameters
    ----------
    func : ScalarFunction | Evaluator
        Function taking a parameter vector and returning a scalar.
    pars : ArrayLike
        Point at which the gradient is evaluated.
    step : float, default=1e-6
        Step relative to the magnitude of each coordinate. Smaller steps
        reduce the truncation error but increase floating point cancellation.

    Returns
    -------
    NDArray
        Partial derivative with respect to each coordinate.

    """
    pars = np.array(pars, dtype=float)
    step = check_step(step)
    evaluate = func if isinstance(func, Evaluator) else Evaluator(func, "gradient")
    h = derivative_steps(pars, step)
    gradient = np.zeros(pars.size)
    for i in range(pars.size):
        upper = pars.copy()
        lower = pars.copy()
        upper[i] += h[i]
        lower[i] -= h[i]
        gradient[i] = (
            evaluate(upper, index=i) - evaluate(lower, index=i)
        ) / (2 * h[i])
    return gradient


def _analytical_gradient(
    dfunc: GradientFunction, pars: NDArray, step: int
) -> NDArray:
    try:
        gradient = np.asarray(dfunc(pars.copy()), dtype=float)
    except Exception as e:
        raise EvaluationFailure(
            f"derivative function raised {type(e).__name__}: {e}",
            method="ltre", step=step, pars=pars,
        ) from e
    if gradient.shape != pars.shape:
        raise EvaluationFailure(
            f"derivative function returned shape {gradient.shape}, "
            f"expected {pars.shape}",
            method="ltre", step=step, pars=pars,
        )
    if not np.isfinite(gradient).all():
        bad = np.flatnonzero(~np.isfinite(gradient)).tolist()
        raise EvaluationFailure(
            f"derivative function returned non-finite values at {bad}",
            method="ltre", step=step, index=bad[0], pars=pars,
        )
    return gradient


def ltre(
    func: ScalarFunction | None,
    pars1: ArrayLike,
    pars2: ArrayLike,
    dfunc: GradientFunction | None = None,
    N: int = 1,
    step: float = DEFAULT_STEP,
    max_evaluations: int | None = None,
) -> NDArray:
    """Decompose `func(pars2) - func(pars1)` with sensitivities.

    Parameters
    ----------
    func : ScalarFunction, optional
        Function taking a parameter vector and returning a scalar. Only used
        when `dfunc` is not given.
    pars1 : ArrayLike
        Parameters of the first state.
    pars2 : ArrayLike
        Parameters of the second state.
    dfunc : GradientFunction, optional
        Analytical gradient of `func`, mapping a parameter vector to the
        vector of partial derivatives. If not given, the gradient is computed
        with :func:`numerical_gradient`.
    N : int, default=1
        Number of points on the path at which sensitivities are evaluated.
        With `N=1` only the midpoint `(pars1 + pars2) / 2` is used.
    step : float, default=1e-6
        Relative step of the numerical derivative.
    max_evaluations : int, optional
        Upper bound on the number of evaluations of `func`.

    Raises
    ------
    LengthMismatch
        Raised when `pars1` and `pars2` differ in length.
    InvalidResolution
        Raised when `N` is below 1 or `step` is not positive.
    EvaluationBudgetExceeded
        Raised when the decomposition needs more than `max_evaluations`
        evaluations.
    EvaluationFailure
        Raised when `func` or `dfunc` fails or returns non-finite values.

    Returns
    -------
    NDArray
        Contribution of each parameter. Sums to the total difference only to
        first order.

    """
    pars1, pars2 = as_pars(pars1, pars2)
    N = check_resolution(N)
    step = check_step(step)
    if dfunc is None and func is None:
        raise TypeError("ltre needs either func or dfunc.")

    delta = pars2 - pars1
    points = interpolation_points(pars1, pars2, N)
    if dfunc is not None:
        sensitivities = [
            _analytical_gradient(dfunc, pars, k) for k, pars in enumerate(points)
        ]
    else:
        check_budget("ltre", 2 * N * pars1.size, max_evaluations)
        evaluate = Evaluator(func, "ltre")
        sensitivities = [
            numerical_gradient(evaluate, pars, step) for pars in points
        ]
        logger.debug(f"ltre used {evaluate.num_evaluations} evaluations")
    return np.mean(sensitivities, axis=0) * delta
