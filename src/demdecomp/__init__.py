from demdecomp.__about__ import __version__
from demdecomp.arriaga import arriaga, arriaga_components
from demdecomp.config import DecompositionSpecification
from demdecomp.decompose import decompose, decompose_with_specification
from demdecomp.functions import (
    ImputedBlock,
    crude_death_rate,
    life_expectancy,
    life_expectancy_by_cause,
    total_fertility_rate,
)
from demdecomp.horiuchi import horiuchi
from demdecomp.lifetable import (
    Lx_to_Tx,
    lifetable,
    lx_to_ex,
    lx_to_Lx,
    mx_to_e0,
    mx_to_lx,
)
from demdecomp.ltre import ltre, numerical_gradient
from demdecomp.stepwise import stepwise_replacement
