"""
Test data module
"""
import numpy as np
import pandas as pd
import pytest
from demdecomp.data import (contributions_to_frame, decompose_dataframe,
                            prepare_vectors)
from demdecomp.errors import LengthMismatch
from demdecomp.functions import life_expectancy_by_cause
from demdecomp.horiuchi import horiuchi
from demdecomp.lifetable import mx_to_e0


@pytest.fixture
def data():
    return pd.DataFrame(dict(
        location_id=[1]*3 + [2]*3,
        age=[10, 0, 5]*2,
        mx_2000=[0.05, 0.01, 0.02, 0.04, 0.02, np.nan],
        mx_2020=[0.04, 0.005, 0.015, 0.03, 0.01, 0.02],
    ))


def test_prepare_vectors(data):
    pars1, pars2 = prepare_vectors(data[data.location_id == 1], "mx_2000", "mx_2020",
                                   sort_by="age")
    assert np.allclose(pars1, [0.01, 0.02, 0.05])
    assert np.allclose(pars2, [0.005, 0.015, 0.04])


def test_prepare_vectors_fills_missing(data):
    pars1, _ = prepare_vectors(data[data.location_id == 2], "mx_2000", "mx_2020",
                               sort_by="age", fill_value=0.0)
    assert np.allclose(pars1, [0.02, 0.0, 0.04])


def test_prepare_vectors_errors(data):
    with pytest.raises(ValueError):
        prepare_vectors(data[data.location_id == 2], "mx_2000", "mx_2020",
                        fill_value=None)
    with pytest.raises(ValueError):
        prepare_vectors(data, "mx_2000", "mx_2020", sort_by="age")
    with pytest.raises(KeyError):
        prepare_vectors(data, "mx_1990", "mx_2020")


def test_decompose_dataframe(data):
    result = decompose_dataframe(data, mx_to_e0, "mx_2000", "mx_2020",
                                 by="location_id", sort_by="age", N=10)
    assert len(result) == len(data)
    assert result["age"].tolist() == [0, 5, 10]*2
    first = result[result.location_id == 1]
    assert np.allclose(first["contribution"],
                       horiuchi(mx_to_e0, [0.01, 0.02, 0.05], [0.005, 0.015, 0.04], N=10))
    assert result["contribution"].notna().all()


def test_decompose_dataframe_single_group(data):
    one = data[data.location_id == 1]
    result = decompose_dataframe(one, None, "mx_2000", "mx_2020",
                                 sort_by="age", method="arriaga")
    total = mx_to_e0([0.005, 0.015, 0.04]) - mx_to_e0([0.01, 0.02, 0.05])
    assert np.isclose(result["contribution"].sum(), total)


def test_contributions_to_frame():
    ages = [0, 5, 10]
    mx1 = np.array([0.004, 0.01, 0.03, 0.006, 0.01, 0.02])
    mx2 = np.array([0.002, 0.008, 0.03, 0.005, 0.01, 0.015])

    def func(theta):
        return life_expectancy_by_cause(theta, 2)

    result = horiuchi(func, mx1, mx2, N=20)
    df = contributions_to_frame(result, ages, blocks=["cancer", "cvd"])
    assert df.shape == (3, 2)
    assert df.index.tolist() == ages
    assert np.allclose(df["cvd"], result[3:])
    assert np.isclose(df.to_numpy().sum(), func(mx2) - func(mx1), atol=1e-6)

    assert contributions_to_frame(result, ages).columns.tolist() == ["block_0", "block_1"]
    with pytest.raises(LengthMismatch):
        contributions_to_frame(result, [0, 5, 10, 15])
    with pytest.raises(LengthMismatch):
        contributions_to_frame(result, ages, blocks=["cancer"])
