"""
Decomposition settings
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml

from demdecomp._typing import Any
from demdecomp.errors import InvalidResolution
from demdecomp.horiuchi import DEFAULT_N, check_resolution
from demdecomp.ltre import DEFAULT_STEP, check_step
from demdecomp.stepwise import DEFAULT_PERMUTATIONS, DEFAULT_SEED, DIRECTIONS

METHODS = ("arriaga", "horiuchi", "stepwise", "ltre")


@dataclass
class DecompositionSpecification:
    """Method and method options of a decomposition.

    Attributes
    ----------
    method : {'arriaga', 'horiuchi', 'stepwise', 'ltre'}
        Decomposition method.
    N : int
        Resolution of `horiuchi`. `ltre` uses `ltre_N` instead.
    direction : str
        Replacement direction of `stepwise`.
    symmetrical : bool
        Whether `stepwise` also replaces backward.
    n_permutations : int
        Number of random orders of `stepwise` with `direction='full'`.
    seed : int, optional
        Seed of the random orders.
    step : float
        Relative step of the numerical derivative of `ltre`.
    ltre_N : int
        Number of sensitivity points of `ltre`.
    max_evaluations : int, optional
        Cap on the number of function evaluations.

    """

    method: str = "horiuchi"
    N: int = DEFAULT_N
    direction: str = "up"
    symmetrical: bool = True
    n_permutations: int = DEFAULT_PERMUTATIONS
    seed: int | None = DEFAULT_SEED
    step: float = DEFAULT_STEP
    ltre_N: int = 1
    max_evaluations: int | None = None

    def __post_init__(self):
        self.method = str(self.method).lower()
        if self.method not in METHODS:
            raise InvalidResolution(
                f"method must be one of {METHODS}, got {self.method!r}."
            )
        self.N = check_resolution(self.N)
        self.ltre_N = check_resolution(self.ltre_N, name="ltre_N")
        self.n_permutations = check_resolution(
            self.n_permutations, name="n_permutations"
        )
        self.direction = str(self.direction).lower()
        if self.direction not in DIRECTIONS:
            raise InvalidResolution(
                f"direction must be one of {DIRECTIONS}, got {self.direction!r}."
            )
        self.step = check_step(self.step)

    @classmethod
    def from_dict(cls, spec_dict: dict[str, Any]) -> "DecompositionSpecification":
        """Create the specification, ignoring keys that are not settings."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in spec_dict.items() if k in names})

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DecompositionSpecification":
        """Read the specification from a YAML file.

        Settings may sit at the top level or under a `decomposition` key.
        """
        with open(path) as f:
            spec_dict = yaml.safe_load(f) or {}
        spec_dict = spec_dict.get("decomposition", spec_dict)
        return cls.from_dict(spec_dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_kwargs(self) -> dict[str, Any]:
        """Keyword arguments of the selected method."""
        if self.method == "arriaga":
            return {}
        if self.method == "horiuchi":
            return {"N": self.N, "max_evaluations": self.max_evaluations}
        if self.method == "stepwise":
            return {
                "direction": self.direction,
                "symmetrical": self.symmetrical,
                "n_permutations": self.n_permutations,
                "seed": self.seed,
                "max_evaluations": self.max_evaluations,
            }
        return {
            "N": self.ltre_N,
            "step": self.step,
            "max_evaluations": self.max_evaluations,
        }
