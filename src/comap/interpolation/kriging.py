"""
Ordinary kriging at a single query point.

The pure entry points are `estimate` (fixed parameters) and `interpolate` (fit
then estimate). `KrigingEstimator` keeps the older stateful calling convention,
where parameters live on the instance and are re-fitted on every call.

The system for n samples is (n+1)x(n+1):

    | C  1 | |w |   |c|
    | 1' 0 | |mu| = |1|

with `C[i][j] = sill - gamma(d(i, j))` and `c[i] = sill - gamma(d(q, i))`. The
last row forces the weights to sum to one, which keeps the estimate unbiased.
"""

from __future__ import annotations

import logging
from typing import Sequence

from comap.core.geo import GeoPoint, SamplePoint, haversine_m
from comap.errors import SingularMatrixError
from comap.interpolation.linalg import solve
from comap.interpolation.variogram import (
    VariogramParameters,
    covariance,
    exponential_variogram,
    fit_parameters,
)

logger = logging.getLogger(__name__)


def build_system(samples: Sequence[SamplePoint], params: VariogramParameters) -> list[list[float]]:
    """Build the augmented covariance matrix for `samples`."""
    n = len(samples)
    matrix = [[0.0] * (n + 1) for _ in range(n + 1)]
    for i in range(n):
        for j in range(i, n):
            value = covariance(haversine_m(samples[i].point, samples[j].point), params)
            matrix[i][j] = value
            matrix[j][i] = value
        matrix[i][n] = 1.0
        matrix[n][i] = 1.0
    matrix[n][n] = 0.0
    return matrix


def build_rhs(query: GeoPoint, samples: Sequence[SamplePoint], params: VariogramParameters) -> list[float]:
    """Right-hand side for `query`; the trailing 1 is the unbiasedness constraint."""
    rhs = [covariance(haversine_m(query, s.point), params) for s in samples]
    rhs.append(1.0)
    return rhs


def solve_weights(query: GeoPoint, samples: Sequence[SamplePoint], params: VariogramParameters) -> list[float]:
    """Return `[w_0, ..., w_{n-1}, mu]` for `query`.

    Raises `SingularMatrixError` when the system cannot be solved.
    """
    return solve(build_system(samples, params), build_rhs(query, samples, params))


def estimate(
    query: GeoPoint, samples: Sequence[SamplePoint], params: VariogramParameters
) -> float | None:
    """Kriging estimate at `query`, or None when no estimate is available.

    - no samples: None
    - one sample: its value, unchanged
    - otherwise: the weighted sum of sample values, floored at 0

    Failures (invalid coordinates, singular system) are logged and reported as
    None; they never raise.
    """
    if not samples:
        return None
    if len(samples) == 1:
        return samples[0].value
    if not query.is_finite() or not all(s.is_finite() for s in samples):
        logger.debug("Rejecting kriging input with non-finite coordinates or values.")
        return None

    try:
        weights = solve_weights(query, samples, params)
    except SingularMatrixError as e:
        logger.debug("Kriging system singular for %d samples: %s", len(samples), str(e))
        return None
    except (ArithmeticError, ValueError) as e:
        logger.debug("Kriging failed for %d samples: %s", len(samples), str(e))
        return None

    value = sum(w * s.value for w, s in zip(weights, samples))
    return max(0.0, value)


def interpolate(
    query: GeoPoint,
    samples: Sequence[SamplePoint],
    prior: VariogramParameters | None = None,
    *,
    range_factor: float | None = None,
    sill_floor: float | None = None,
) -> tuple[float | None, VariogramParameters]:
    """Fit parameters to `samples`, then estimate at `query`.

    Returns the estimate together with the parameters that produced it.
    """
    kwargs = {}
    if range_factor is not None:
        kwargs["range_factor"] = range_factor
    if sill_floor is not None:
        kwargs["sill_floor"] = sill_floor
    params = fit_parameters(samples, prior, **kwargs)
    return estimate(query, samples, params), params


class KrigingEstimator:
    """Stateful wrapper holding the current variogram parameters.

    Not safe for concurrent use: `auto_adjust` replaces the parameters in place.
    Use one instance per session, or call the module-level functions instead.
    """

    def __init__(self, parameters: VariogramParameters | None = None):
        self.parameters = parameters or VariogramParameters()

    def auto_adjust(self, samples: Sequence[SamplePoint]) -> None:
        self.parameters = fit_parameters(samples, self.parameters)

    def variogram(self, distance_m: float) -> float:
        return exponential_variogram(distance_m, self.parameters)

    def interpolate(self, lat: float, lon: float, samples: Sequence[SamplePoint]) -> float | None:
        self.auto_adjust(samples)
        return estimate(GeoPoint(lat=lat, lon=lon), samples, self.parameters)
