"""
Command line interface for demdecomp.

example call:
demdecomp --pars1 0.01,0.02,0.05 --pars2 0.005,0.015,0.04 \
--method horiuchi --N 50

demdecomp --input rates.csv --col1 mx_2000 --col2 mx_2020 --sort-by age \
--method stepwise --direction both
"""
import sys

import click
import numpy as np
import pandas as pd
from loguru import logger

from demdecomp.config import METHODS, DecompositionSpecification
from demdecomp.data import prepare_vectors
from demdecomp.decompose import decompose_with_specification
from demdecomp.errors import Error
from demdecomp.functions import FUNCTIONS
from demdecomp.stepwise import DIRECTIONS


def configure_logging(verbose: int, quiet: bool) -> None:
    """Send log messages to stderr at the requested level."""
    if quiet:
        level = "ERROR"
    else:
        level = {0: "WARNING", 1: "INFO"}.get(verbose, "DEBUG")
    logger.remove()
    logger.add(sys.stderr, level=level)


def parse_vector(value: str) -> np.ndarray:
    try:
        return np.array([float(v) for v in value.split(",") if v.strip()])
    except ValueError as e:
        raise click.BadParameter(f"expected comma separated numbers, got {value!r}") from e


@click.command()
@click.option("--pars1", type=str, help="Comma separated parameters of the first state.")
@click.option("--pars2", type=str, help="Comma separated parameters of the second state.")
@click.option("--input", "input_path", type=click.Path(exists=True, dir_okay=False),
              help="CSV file with one row per parameter.")
@click.option("--col1", type=str, help="Column of --input with the first state.")
@click.option("--col2", type=str, help="Column of --input with the second state.")
@click.option("--sort-by", type=str, default=None,
              help="Column of --input defining the parameter order.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="YAML file with decomposition settings.")
@click.option("--method", type=click.Choice(METHODS), default=None,
              help="Decomposition method. Default horiuchi.")
@click.option("--function", "function_name", type=click.Choice(sorted(FUNCTIONS)),
              default="e0", show_default=True,
              help="Scalar function of the parameters.")
@click.option("--N", "N", type=int, default=None, help="Resolution of horiuchi.")
@click.option("--ltre-N", "ltre_N", type=int, default=None,
              help="Number of sensitivity points of ltre.")
@click.option("--direction", type=click.Choice(DIRECTIONS), default=None,
              help="Replacement direction of stepwise.")
@click.option("--symmetrical/--no-symmetrical", default=None,
              help="Whether stepwise also replaces backward.")
@click.option("--step", type=float, default=None,
              help="Relative derivative step of ltre.")
@click.option("--seed", type=int, default=None,
              help="Seed of the random orders of stepwise --direction full.")
@click.option("--n-permutations", type=int, default=None,
              help="Number of random orders of stepwise --direction full.")
@click.option("--max-evaluations", type=int, default=None,
              help="Cap on the number of function evaluations.")
@click.option("-v", "--verbose", count=True, help="Log more, repeat for debug.")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors.")
def demdecomp(
    pars1: str | None,
    pars2: str | None,
    input_path: str | None,
    col1: str | None,
    col2: str | None,
    sort_by: str | None,
    config_path: str | None,
    method: str | None,
    function_name: str,
    N: int | None,
    ltre_N: int | None,
    direction: str | None,
    symmetrical: bool | None,
    step: float | None,
    seed: int | None,
    n_permutations: int | None,
    max_evaluations: int | None,
    verbose: int,
    quiet: bool,
) -> None:
    """Decompose the difference of a scalar function between two parameter
    vectors and print one contribution per line, in parameter order.
    """
    configure_logging(verbose, quiet)

    if input_path is not None:
        if pars1 is not None or pars2 is not None:
            raise click.UsageError("Use either --input or --pars1/--pars2, not both.")
        if col1 is None or col2 is None:
            raise click.UsageError("--input needs --col1 and --col2.")
        try:
            theta1, theta2 = prepare_vectors(
                pd.read_csv(input_path), col1, col2, sort_by=sort_by
            )
        except (KeyError, ValueError) as e:
            raise click.BadParameter(str(e), param_hint="--input") from e
    elif pars1 is not None and pars2 is not None:
        theta1, theta2 = parse_vector(pars1), parse_vector(pars2)
    else:
        raise click.UsageError("Provide --pars1 and --pars2, or --input.")

    overrides = {
        "method": method,
        "N": N,
        "ltre_N": ltre_N,
        "direction": direction,
        "symmetrical": symmetrical,
        "step": step,
        "seed": seed,
        "n_permutations": n_permutations,
        "max_evaluations": max_evaluations,
    }
    try:
        spec_dict = {}
        if config_path is not None:
            spec_dict = DecompositionSpecification.from_yaml(config_path).to_dict()
        spec_dict.update({k: v for k, v in overrides.items() if v is not None})
        specification = DecompositionSpecification.from_dict(spec_dict)
        logger.info(f"Decomposing {function_name} with {specification}")
        func = FUNCTIONS[function_name]
        contributions = decompose_with_specification(func, theta1, theta2, specification)
    except Error as e:
        raise click.ClickException(str(e)) from e

    logger.info(f"Sum of contributions: {contributions.sum()!r}")
    for value in contributions:
        click.echo(repr(float(value)))
