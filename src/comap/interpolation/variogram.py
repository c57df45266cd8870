"""
Exponential variogram model and a heuristic parameter fit.

`fit_parameters` is not a maximum-likelihood or least-squares fit. It ties the
range to the typical sensor spacing and the sill to the spread of the current
readings, which is enough to keep one fixed model usable across different
sensor layouts without manual calibration.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from itertools import combinations
from typing import Literal, Sequence

from comap.core.geo import SamplePoint, haversine_m

DEFAULT_NUGGET = 0.1
DEFAULT_SILL = 1.0
DEFAULT_RANGE_M = 1000.0
DEFAULT_RANGE_FACTOR = 0.7
DEFAULT_SILL_FLOOR = 0.1


@dataclass(frozen=True)
class VariogramParameters:
    """Model parameters for the exponential variogram."""

    nugget: float = DEFAULT_NUGGET
    sill: float = DEFAULT_SILL
    range_m: float = DEFAULT_RANGE_M
    model: Literal["exponential"] = "exponential"

    def __post_init__(self) -> None:
        if not self.nugget >= 0:
            raise ValueError(f"nugget must be >= 0, got {self.nugget}")
        if not self.sill > 0:
            raise ValueError(f"sill must be > 0, got {self.sill}")
        if not (self.range_m > 0 and math.isfinite(self.range_m)):
            raise ValueError(f"range_m must be a positive finite number, got {self.range_m}")
        if self.model != "exponential":
            raise ValueError(f"Unsupported variogram model: {self.model}")


def exponential_variogram(distance_m: float, params: VariogramParameters) -> float:
    """Semivariance at `distance_m`; reaches ~95% of the sill at the range."""
    if distance_m == 0:
        return 0.0
    return params.nugget + params.sill * (1 - math.exp(-3 * distance_m / params.range_m))


def covariance(distance_m: float, params: VariogramParameters) -> float:
    """Covariance entry used in the kriging system: `sill - gamma(d)`."""
    return params.sill - exponential_variogram(distance_m, params)


def population_variance(values: Sequence[float]) -> float:
    n = len(values)
    if n == 0:
        return 0.0
    mean = sum(values) / n
    return sum((v - mean) ** 2 for v in values) / n


def fit_parameters(
    samples: Sequence[SamplePoint],
    prior: VariogramParameters | None = None,
    *,
    range_factor: float = DEFAULT_RANGE_FACTOR,
    sill_floor: float = DEFAULT_SILL_FLOOR,
) -> VariogramParameters:
    """Derive sill and range from `samples`, keeping the prior nugget.

    With fewer than two samples there is nothing to fit and the prior is returned.
    If all samples share one location the mean spacing is zero; the prior range
    is kept then.
    """
    base = prior or VariogramParameters()
    if len(samples) < 2:
        return base

    distances = [haversine_m(a.point, b.point) for a, b in combinations(samples, 2)]
    mean_distance = sum(distances) / len(distances)
    range_m = mean_distance * range_factor
    if not (range_m > 0 and math.isfinite(range_m)):
        range_m = base.range_m

    sill = max(sill_floor, population_variance([s.value for s in samples]))
    return replace(base, sill=sill, range_m=range_m)
