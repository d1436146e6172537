from typing import Any, Callable
from collections.abc import Sequence
from numpy.typing import ArrayLike, NDArray
from pandas import DataFrame

ScalarFunction = Callable[[NDArray], float]
GradientFunction = Callable[[NDArray], NDArray]
