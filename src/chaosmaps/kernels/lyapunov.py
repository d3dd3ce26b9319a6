"""Lyapunov exponent of the logistic map as a function of ``r``."""

from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Tuple

from ..config import LYAPUNOV_SAMPLES
from ..utils import iteration_count

BOUNDARY_EPSILON = 1e-10
RESEED_VALUE = 0.5


def _near_boundary(x: float) -> bool:
    return x < BOUNDARY_EPSILON or x > 1.0 - BOUNDARY_EPSILON


def lyapunov_exponent(r: float, iterations: float, transient_iterations: float) -> Optional[float]:
    """Average of ``ln|r (1 - 2x)|`` along the orbit, after a discarded transient.

    Whenever the state comes within ``BOUNDARY_EPSILON`` of 0 or 1 it is
    re-seeded to 0.5 and that step contributes no sample. Returns None when no
    usable sample was collected.
    """
    x = RESEED_VALUE
    for _ in range(iteration_count(transient_iterations)):
        x = r * x * (1.0 - x)
        if _near_boundary(x):
            x = RESEED_VALUE

    total = 0.0
    count = 0
    for _ in range(iteration_count(iterations)):
        x = r * x * (1.0 - x)
        if _near_boundary(x):
            x = RESEED_VALUE
            continue
        derivative = abs(r * (1.0 - 2.0 * x))
        if derivative > 0.0:
            total += math.log(derivative)
            count += 1

    if count == 0:
        return None
    return total / count


def sample_r_values(r_min: float, r_max: float, samples: int) -> List[float]:
    if samples <= 0:
        return []
    if samples == 1:
        return [r_min]
    step = (r_max - r_min) / (samples - 1)
    return [r_min + i * step for i in range(samples)]


def calculate_lyapunov(params: Mapping[str, Any], *, samples: int = LYAPUNOV_SAMPLES) -> List[Tuple[float, Optional[float]]]:
    """``(r, exponent)`` samples across ``[rMin, rMax]``.

    An exponent of None marks an ``r`` with no defined value; plotting code
    should skip it rather than draw it as ``-inf``.
    """
    iterations = float(params["iterations"])
    transient = float(params["transientIterations"])
    return [
        (r, lyapunov_exponent(r, iterations, transient))
        for r in sample_r_values(float(params["rMin"]), float(params["rMax"]), samples)
    ]
