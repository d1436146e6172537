"""
Test ltre module
"""
import numpy as np
import pytest
from demdecomp.errors import (EvaluationBudgetExceeded, EvaluationFailure,
                              InvalidResolution)
from demdecomp.functions import crude_death_rate
from demdecomp.horiuchi import horiuchi
from demdecomp.lifetable import mx_to_e0
from demdecomp.ltre import derivative_steps, ltre, numerical_gradient


@pytest.fixture
def mx1():
    return np.array([0.01, 0.02, 0.05])


@pytest.fixture
def mx2():
    return np.array([0.005, 0.015, 0.04])


@pytest.fixture
def theta1():
    return np.array([0.01, 0.05, 0.7, 0.3])


@pytest.fixture
def theta2():
    return np.array([0.008, 0.045, 0.6, 0.4])


def cdr_gradient(theta):
    mx, cx = theta.reshape(2, -1)
    return np.concatenate([cx, mx])


def test_derivative_steps():
    h = derivative_steps(np.array([2.0, -0.5, 0.0]), step=1e-3)
    assert np.allclose(h, [2e-3, 5e-4, 1e-3])


def test_numerical_gradient():
    pars = np.array([1.0, 2.0, 3.0])
    gradient = numerical_gradient(lambda x: np.sum(x**2), pars)
    assert np.allclose(gradient, 2*pars, rtol=1e-6)


def test_analytical_derivative(theta1, theta2):
    result = ltre(crude_death_rate, theta1, theta2, dfunc=cdr_gradient)
    total = crude_death_rate(theta2) - crude_death_rate(theta1)
    # bilinear function, the midpoint sensitivity is exact
    assert np.isclose(result.sum(), total, rtol=1e-12)


def test_numerical_matches_analytical(theta1, theta2):
    numerical = ltre(crude_death_rate, theta1, theta2)
    analytical = ltre(None, theta1, theta2, dfunc=cdr_gradient)
    assert np.allclose(numerical, analytical, rtol=1e-6, atol=1e-10)


def test_first_order_sum(mx1, mx2):
    total = mx_to_e0(mx2) - mx_to_e0(mx1)
    result = ltre(mx_to_e0, mx1, mx2)
    assert abs(result.sum() - total) < 1e-3


def test_more_points_approach_horiuchi(mx1, mx2):
    reference = horiuchi(mx_to_e0, mx1, mx2, N=100)
    coarse = ltre(mx_to_e0, mx1, mx2, N=1)
    fine = ltre(mx_to_e0, mx1, mx2, N=20)
    assert np.abs(fine - reference).sum() <= np.abs(coarse - reference).sum()


def test_identity(mx1):
    assert np.array_equal(ltre(mx_to_e0, mx1, mx1), np.zeros(mx1.size))


@pytest.mark.parametrize("kwargs", [{"step": 0.0}, {"step": -1e-6}, {"N": 0}])
def test_invalid_options(mx1, mx2, kwargs):
    with pytest.raises(InvalidResolution):
        ltre(mx_to_e0, mx1, mx2, **kwargs)


def test_evaluation_budget(mx1, mx2):
    with pytest.raises(EvaluationBudgetExceeded):
        ltre(mx_to_e0, mx1, mx2, max_evaluations=5)


@pytest.mark.parametrize("dfunc", [
    lambda x: np.ones(x.size + 1),
    lambda x: np.full(x.size, np.nan),
    lambda x: 1/0,
])
def test_bad_derivative(theta1, theta2, dfunc):
    with pytest.raises(EvaluationFailure) as excinfo:
        ltre(None, theta1, theta2, dfunc=dfunc)
    assert excinfo.value.method == "ltre"


def test_needs_a_function(mx1, mx2):
    with pytest.raises(TypeError):
        ltre(None, mx1, mx2)
