"""
psoswarm - concurrent particle swarm optimization.

Each particle runs on its own thread and reports improved personal bests to
a solver, which tracks the global best and broadcasts it back to the swarm.
"""

from .core import (
    Channel,
    DimensionMismatch,
    EvalValue,
    InvalidArgument,
    Param,
    Particle,
    ParticleState,
    PSOError,
    Range,
    Solver,
    TargetFunc,
    TypeMismatch,
    Values,
)
from .float64 import Float64Array, Float64Range, Float64TargetFunc, Float64Value, make_param

__version__ = "0.1.0"

__all__ = [
    "Channel",
    "DimensionMismatch",
    "EvalValue",
    "InvalidArgument",
    "Param",
    "Particle",
    "ParticleState",
    "PSOError",
    "Range",
    "Solver",
    "TargetFunc",
    "TypeMismatch",
    "Values",
    "Float64Array",
    "Float64Range",
    "Float64TargetFunc",
    "Float64Value",
    "make_param",
]
