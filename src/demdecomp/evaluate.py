"""
Guarded evaluation of user supplied scalar functions
"""

import numpy as np
from loguru import logger

from demdecomp._typing import ArrayLike, NDArray, ScalarFunction
from demdecomp.errors import (
    EvaluationBudgetExceeded,
    EvaluationFailure,
    LengthMismatch,
)


def as_pars(pars1: ArrayLike, pars2: ArrayLike) -> tuple[NDArray, NDArray]:
    """Convert two parameter vectors to aligned float arrays.

    Parameters
    ----------
    pars1 : ArrayLike
        Parameters of the first state.
    pars2 : ArrayLike
        Parameters of the second state.

    Raises
    ------
    LengthMismatch
        Raised when the two vectors differ in length or are not 1-D.

    Returns
    -------
    tuple[NDArray, NDArray]
        Copies of both vectors as 1-D float arrays.

    """
    pars1 = np.array(pars1, dtype=float)
    pars2 = np.array(pars2, dtype=float)
    if pars1.ndim != 1 or pars2.ndim != 1:
        raise LengthMismatch(
            f"Parameters must be 1-D vectors, got shapes {pars1.shape} and "
            f"{pars2.shape}."
        )
    if pars1.size != pars2.size:
        raise LengthMismatch(
            f"pars1 has length {pars1.size} but pars2 has length {pars2.size}."
        )
    return pars1, pars2


def check_budget(method: str, required: int, max_evaluations: int | None) -> None:
    """Reject a decomposition whose evaluation count exceeds the cap."""
    logger.debug(f"{method} needs {required} function evaluations")
    if max_evaluations is not None and required > max_evaluations:
        raise EvaluationBudgetExceeded(
            f"{method} needs {required} function evaluations, "
            f"max_evaluations is {max_evaluations}."
        )


class Evaluator:
    """Call a scalar function and verify that the result is a finite number.

    Parameters
    ----------
    func : ScalarFunction
        Function mapping a parameter vector to a scalar.
    method : str
        Name of the decomposition method, used for error messages.

    Attributes
    ----------
    num_evaluations : int
        Number of times `func` was called through this evaluator.

    """

    def __init__(self, func: ScalarFunction, method: str) -> None:
        if not callable(func):
            raise TypeError(f"func must be callable, got {type(func).__name__}.")
        self.func = func
        self.method = method
        self.num_evaluations = 0

    def __call__(
        self, pars: NDArray, step: int | None = None, index: int | None = None
    ) -> float:
        self.num_evaluations += 1
        try:
            value = self.func(pars.copy())
        except Exception as e:
            raise EvaluationFailure(
                f"function raised {type(e).__name__}: {e}",
                method=self.method, step=step, index=index, pars=pars,
            ) from e
        try:
            value = float(np.asarray(value, dtype=float).item())
        except (TypeError, ValueError) as e:
            raise EvaluationFailure(
                f"function returned {value!r}, expected a scalar",
                method=self.method, step=step, index=index, pars=pars,
            ) from e
        if not np.isfinite(value):
            raise EvaluationFailure(
                f"function returned {value}",
                method=self.method, step=step, index=index, pars=pars,
            )
        return value
