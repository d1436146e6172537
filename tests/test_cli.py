"""
Test command line interface
"""
import numpy as np
import pandas as pd
import pytest
import yaml
from click.testing import CliRunner
from loguru import logger

from demdecomp.arriaga import arriaga
from demdecomp.cli import demdecomp
from demdecomp.horiuchi import horiuchi
from demdecomp.lifetable import mx_to_e0
from demdecomp.ltre import ltre
from demdecomp.stepwise import stepwise_replacement

MX1 = [0.01, 0.02, 0.05]
MX2 = [0.005, 0.015, 0.04]


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


def run(args):
    return CliRunner().invoke(demdecomp, ["-q"] + args)


def parse(output):
    return np.array([float(line) for line in output.splitlines() if line.strip()])


def test_vectors():
    result = run(["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04",
                  "--method", "arriaga"])
    assert result.exit_code == 0, result.output
    assert np.allclose(parse(result.output), arriaga(MX1, MX2))


def test_horiuchi_resolution():
    result = run(["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04",
                  "--N", "5"])
    assert result.exit_code == 0, result.output
    assert np.allclose(parse(result.output), horiuchi(mx_to_e0, MX1, MX2, N=5))


def test_input_file(tmp_path):
    path = tmp_path / "rates.csv"
    pd.DataFrame({"age": [10, 0, 5], "a": [0.05, 0.01, 0.02],
                  "b": [0.04, 0.005, 0.015]}).to_csv(path, index=False)
    result = run(["--input", str(path), "--col1", "a", "--col2", "b",
                  "--sort-by", "age", "--method", "stepwise",
                  "--direction", "down", "--no-symmetrical"])
    assert result.exit_code == 0, result.output
    assert np.allclose(parse(result.output), arriaga(MX1, MX2))


def test_config(tmp_path):
    path = tmp_path / "config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump({"decomposition": {"method": "ltre", "step": 1e-5}}, f)
    result = run(["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04",
                  "--config", str(path)])
    assert result.exit_code == 0, result.output
    values = parse(result.output)
    assert values.size == 3
    assert abs(values.sum() - (mx_to_e0(MX2) - mx_to_e0(MX1))) < 1e-3


def test_function_choice():
    result = run(["--pars1", "0.1,0.2", "--pars2", "0.2,0.2",
                  "--function", "tfr", "--method", "stepwise"])
    assert result.exit_code == 0, result.output
    assert np.allclose(parse(result.output), [0.1, 0.0])


def test_ltre_points():
    result = run(["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04",
                  "--method", "ltre", "--ltre-N", "4"])
    assert result.exit_code == 0, result.output
    assert np.allclose(parse(result.output), ltre(mx_to_e0, MX1, MX2, N=4))


def test_n_permutations():
    result = run(["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04",
                  "--method", "stepwise", "--direction", "full",
                  "--n-permutations", "3", "--seed", "1"])
    assert result.exit_code == 0, result.output
    expected = stepwise_replacement(mx_to_e0, MX1, MX2, direction="full",
                                    n_permutations=3, seed=1)
    assert np.allclose(parse(result.output), expected)


@pytest.mark.parametrize("args", [
    ["--pars1", "0.01,0.02", "--pars2", "0.005,0.015,0.04"],
    ["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04", "--N", "0"],
    ["--pars1", "0.01,abc", "--pars2", "0.005,0.015"],
    ["--pars1", "0.01,0.02"],
    ["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04", "--ltre-N", "0"],
    ["--pars1", "0.01,0.02,0.05", "--pars2", "0.005,0.015,0.04",
     "--n-permutations", "0"],
])
def test_errors(args):
    result = run(args)
    assert result.exit_code != 0
