"""
Test config module
"""
import pytest
import yaml
from demdecomp.config import DecompositionSpecification
from demdecomp.errors import InvalidResolution


def test_defaults():
    spec = DecompositionSpecification()
    assert spec.method == "horiuchi"
    assert spec.to_kwargs() == {"N": 20, "max_evaluations": None}


@pytest.mark.parametrize("spec_dict", [
    {"method": "shapley"},
    {"N": 0},
    {"ltre_N": -2},
    {"n_permutations": 0},
    {"direction": "sideways"},
    {"step": 0.0},
])
def test_invalid(spec_dict):
    with pytest.raises(InvalidResolution):
        DecompositionSpecification.from_dict(spec_dict)


@pytest.mark.parametrize(("method", "keys"), [
    ("arriaga", set()),
    ("horiuchi", {"N", "max_evaluations"}),
    ("stepwise", {"direction", "symmetrical", "n_permutations", "seed",
                  "max_evaluations"}),
    ("ltre", {"N", "step", "max_evaluations"}),
])
def test_to_kwargs(method, keys):
    spec = DecompositionSpecification(method=method, ltre_N=3)
    kwargs = spec.to_kwargs()
    assert set(kwargs) == keys
    if method == "ltre":
        assert kwargs["N"] == 3


def test_from_dict_ignores_other_keys():
    spec = DecompositionSpecification.from_dict({"method": "Stepwise", "input": "x.csv"})
    assert spec.method == "stepwise"


@pytest.mark.parametrize("nested", [True, False])
def test_from_yaml(tmp_path, nested):
    settings = {"method": "stepwise", "direction": "both", "symmetrical": False}
    path = tmp_path / "decomposition.yaml"
    with open(path, "w") as f:
        yaml.safe_dump({"decomposition": settings} if nested else settings, f)

    spec = DecompositionSpecification.from_yaml(path)
    assert spec.method == "stepwise"
    assert spec.direction == "both"
    assert spec.symmetrical is False
    assert spec.to_dict()["direction"] == "both"
