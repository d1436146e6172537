"""Module containing the high level api for decomposition"""

import numpy as np
from loguru import logger

from demdecomp._typing import ArrayLike, NDArray, ScalarFunction
from demdecomp.arriaga import arriaga
from demdecomp.config import METHODS, DecompositionSpecification
from demdecomp.errors import InvalidResolution
from demdecomp.evaluate import Evaluator, as_pars
from demdecomp.functions import life_expectancy
from demdecomp.horiuchi import horiuchi
from demdecomp.lifetable import mx_to_e0
from demdecomp.ltre import ltre
from demdecomp.stepwise import stepwise_replacement


def _arriaga(func: ScalarFunction | None, pars1: NDArray, pars2: NDArray) -> NDArray:
    if func is not None and func not in (mx_to_e0, life_expectancy):
        logger.warning(
            "arriaga decomposes life expectancy at birth, ignoring func "
            f"{getattr(func, '__name__', func)!r}"
        )
    return arriaga(pars1, pars2)


_DECOMPOSERS = {
    "arriaga": _arriaga,
    "horiuchi": horiuchi,
    "stepwise": stepwise_replacement,
    "ltre": ltre,
}


def decompose(
    func: ScalarFunction | None,
    pars1: ArrayLike,
    pars2: ArrayLike,
    method: str = "horiuchi",
    **kwargs,
) -> NDArray:
    """Decompose `func(pars2) - func(pars1)` with the selected method.

    Parameters
    ----------
    func : ScalarFunction, optional
        Function taking a parameter vector and returning a scalar. Ignored by
        `'arriaga'`, which always decomposes life expectancy at birth of the
        mortality rates `pars1` and `pars2`.
    pars1 : ArrayLike
        Parameters of the first state.
    pars2 : ArrayLike
        Parameters of the second state.
    method : {'arriaga', 'horiuchi', 'stepwise', 'ltre'}, default='horiuchi'
        Decomposition method.
    **kwargs
        Options passed to the method, see :func:`~demdecomp.horiuchi.horiuchi`,
        :func:`~demdecomp.stepwise.stepwise_replacement` and
        :func:`~demdecomp.ltre.ltre`. When `max_evaluations` is given it
        bounds every evaluation of `func` made by this call, and the residual
        `sum(contributions) - (func(pars2) - func(pars1))` is not logged.
        Otherwise the residual is computed only when a sink accepts debug
        messages.

    Raises
    ------
    InvalidResolution
        Raised when `method` is unknown.

    Returns
    -------
    NDArray
        Contribution of each parameter, in the order of `pars1`.

    """
    method = str(method).lower()
    if method not in _DECOMPOSERS:
        raise InvalidResolution(f"method must be one of {METHODS}, got {method!r}.")
    pars1, pars2 = as_pars(pars1, pars2)
    logger.debug(f"decomposing {pars1.size} parameters with {method}")

    contributions = _DECOMPOSERS[method](func, pars1, pars2, **kwargs)

    # residual costs two extra evaluations, never spent under a cap
    if kwargs.get("max_evaluations") is None and (method == "arriaga" or func is not None):
        evaluate = Evaluator(mx_to_e0 if method == "arriaga" else func, method)
        logger.opt(lazy=True).debug(
            "{method}: residual {residual:.3g}",
            method=lambda: method,
            residual=lambda: (
                float(np.sum(contributions)) - (evaluate(pars2) - evaluate(pars1))
            ),
        )
    return contributions


def decompose_with_specification(
    func: ScalarFunction | None,
    pars1: ArrayLike,
    pars2: ArrayLike,
    specification: DecompositionSpecification,
) -> NDArray:
    """Decompose with the method and options of a specification."""
    return decompose(
        func, pars1, pars2, specification.method, **specification.to_kwargs()
    )
