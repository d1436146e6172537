"""Stepwise replacement decomposition.

Starting from the first parameter vector, parameters are swapped for their
values in the second vector one at a time, and the change in the function
after each swap is credited to the parameter just swapped. The contributions
telescope, so they always add up exactly to the total difference, whatever
the order of replacement.

The contribution of an individual parameter does depend on the order. This
is a property of the method. The `"both"` and `"full"` directions and the
`symmetrical` option average over several orders to reduce the dependence;
they do not remove it.
"""

import numpy as np

from demdecomp._typing import ArrayLike, NDArray, ScalarFunction, Sequence
from demdecomp.errors import InvalidResolution
from demdecomp.evaluate import Evaluator, as_pars, check_budget

DIRECTIONS = ("up", "down", "both", "full")
DEFAULT_PERMUTATIONS = 100
DEFAULT_SEED = 0


def replacement_orders(
    n: int,
    direction: str = "up",
    order: Sequence[int] | None = None,
    n_permutations: int = DEFAULT_PERMUTATIONS,
    seed: int | None = DEFAULT_SEED,
) -> list[NDArray]:
    """Orders in which the parameters are replaced.

    Parameters
    ----------
    n : int
        Number of parameters.
    direction : {'up', 'down', 'both', 'full'}, default='up'
        `'up'` replaces from the first to the last index, `'down'` from the
        last to the first, `'both'` uses the two, and `'full'` draws
        `n_permutations` random permutations.
    order : Sequence[int], optional
        Explicit permutation of `range(n)`. Overrides `direction`.
    n_permutations : int, default=100
        Number of permutations for `direction='full'`.
    seed : int, optional
        Seed for the permutations of `direction='full'`. Defaults to a fixed
        seed so the result is reproducible.

    Raises
    ------
    InvalidResolution
        Raised when `direction` is unknown, `order` is not a permutation of
        `range(n)` or `n_permutations` is below 1.

    Returns
    -------
    list[NDArray]
        One index array per traversal.

    """
    if order is not None:
        order = np.asarray(order)
        if order.ndim != 1 or sorted(order.tolist()) != list(range(n)):
            raise InvalidResolution(
                f"order must be a permutation of range({n}), got {order.tolist()}."
            )
        return [order.astype(int)]

    direction = str(direction).lower()
    if direction not in DIRECTIONS:
        raise InvalidResolution(
            f"direction must be one of {DIRECTIONS}, got {direction!r}."
        )
    ascending = np.arange(n)
    if direction == "up":
        return [ascending]
    if direction == "down":
        return [ascending[::-1]]
    if direction == "both":
        return [ascending, ascending[::-1]]

    if isinstance(n_permutations, bool) or int(n_permutations) != n_permutations \
            or n_permutations < 1:
        raise InvalidResolution(
            f"n_permutations must be a positive integer, got {n_permutations!r}."
        )
    rng = np.random.default_rng(seed)
    return [rng.permutation(n) for _ in range(int(n_permutations))]


def replace_in_order(
    evaluate: Evaluator, pars1: NDArray, pars2: NDArray, order: NDArray
) -> NDArray:
    """Contributions from one traversal replacing `pars1` with `pars2`."""
    contributions = np.zeros(pars1.size)
    pars = pars1.copy()
    before = evaluate(pars, step=0)
    for step, i in enumerate(order, start=1):
        pars[i] = pars2[i]
        after = evaluate(pars, step=step, index=int(i))
        contributions[i] = after - before
        before = after
    return contributions


def stepwise_replacement(
    func: ScalarFunction,
    pars1: ArrayLike,
    pars2: ArrayLike,
    direction: str = "up",
    symmetrical: bool = True,
    order: Sequence[int] | None = None,
    n_permutations: int = DEFAULT_PERMUTATIONS,
    seed: int | None = DEFAULT_SEED,
    max_evaluations: int | None = None,
) -> NDArray:
    """Decompose `func(pars2) - func(pars1)` by stepwise replacement.

    Parameters
    ----------
    func : ScalarFunction
        Function taking a parameter vector and returning a scalar. It is
        treated as a black box.
    pars1 : ArrayLike
        Parameters of the first state.
    pars2 : ArrayLike
        Parameters of the second state.
    direction : {'up', 'down', 'both', 'full'}, default='up'
        Replacement order, see :func:`replacement_orders`. For `'both'` and
        `'full'` the contributions of all traversals are averaged. `'both'`
        averages the ascending and the descending order, both replacing from
        `pars1` toward `pars2`. The traversal from `pars2` back to `pars1`
        is a separate switch, `symmetrical`, so `direction='up',
        symmetrical=True` is a forward and backward average over one order,
        and `direction='both', symmetrical=True` averages four traversals.
    symmetrical : bool, default=True
        If `True`, also replace from `pars2` back to `pars1` with the same
        orders and average with the sign flipped result.
    order : Sequence[int], optional
        Explicit replacement order, overrides `direction`.
    n_permutations : int, default=100
        Number of random orders for `direction='full'`.
    seed : int, optional
        Seed of the random orders for `direction='full'`.
    max_evaluations : int, optional
        Upper bound on the number of evaluations of `func`.

    Raises
    ------
    LengthMismatch
        Raised when `pars1` and `pars2` differ in length.
    InvalidResolution
        Raised for an unknown direction or an invalid order.
    EvaluationBudgetExceeded
        Raised when the decomposition needs more than `max_evaluations`
        evaluations.
    EvaluationFailure
        Raised when `func` fails or returns a non-finite value.

    Returns
    -------
    NDArray
        Contribution of each parameter. Sums exactly (up to floating point
        error) to `func(pars2) - func(pars1)`.

    """
    pars1, pars2 = as_pars(pars1, pars2)
    orders = replacement_orders(
        pars1.size, direction=direction, order=order,
        n_permutations=n_permutations, seed=seed,
    )
    num_traversals = len(orders) * (2 if symmetrical else 1)
    check_budget(
        "stepwise", num_traversals * (pars1.size + 1), max_evaluations
    )

    evaluate = Evaluator(func, "stepwise")
    forward = np.mean(
        [replace_in_order(evaluate, pars1, pars2, o) for o in orders], axis=0
    )
    if not symmetrical:
        return forward
    backward = np.mean(
        [replace_in_order(evaluate, pars2, pars1, o) for o in orders], axis=0
    )
    return (forward - backward) / 2
