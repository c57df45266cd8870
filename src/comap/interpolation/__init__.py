"""Kriging engine: variogram model, linear solver and point estimator."""

from comap.interpolation.kriging import (
    KrigingEstimator,
    build_rhs,
    build_system,
    estimate,
    interpolate,
    solve_weights,
)
from comap.interpolation.linalg import solve
from comap.interpolation.variogram import VariogramParameters, exponential_variogram, fit_parameters

__all__ = [
    "KrigingEstimator",
    "VariogramParameters",
    "build_rhs",
    "build_system",
    "estimate",
    "exponential_variogram",
    "fit_parameters",
    "interpolate",
    "solve",
    "solve_weights",
]
