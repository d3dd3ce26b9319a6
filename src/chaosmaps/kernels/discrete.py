"""Two-dimensional and one-dimensional discrete maps.

All kernels return a fresh ``(n, 2)`` float array. Point budgets cap the two
heavy kernels (standard map, chaos-esthétique) independently of the requested
iteration counts.
"""

from __future__ import annotations

import math
from typing import Any, List, Mapping, Tuple

import numpy as np

from ..config import MAX_WORKER_POINTS
from ..utils import iteration_count

TWO_PI = 2.0 * math.pi
HENON_DIVERGENCE_LIMIT = 1e6


def _as_points(points: List[Tuple[float, float]]) -> np.ndarray:
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def calculate_henon(params: Mapping[str, Any]) -> np.ndarray:
    """Hénon map from the origin: x' = 1 - a x^2 + y, y' = b x.

    The trajectory is cut short as soon as a coordinate stops being finite or
    exceeds ``HENON_DIVERGENCE_LIMIT`` in magnitude.
    """
    a = float(params["a"])
    b = float(params["b"])
    x, y = 0.0, 0.0
    points: List[Tuple[float, float]] = []
    for _ in range(iteration_count(params["iterations"])):
        x_next = 1.0 - a * x * x + y
        y_next = b * x
        if not (math.isfinite(x_next) and math.isfinite(y_next)):
            break
        if abs(x_next) > HENON_DIVERGENCE_LIMIT or abs(y_next) > HENON_DIVERGENCE_LIMIT:
            break
        x, y = x_next, y_next
        points.append((x, y))
    return _as_points(points)


def calculate_lozi(params: Mapping[str, Any]) -> np.ndarray:
    """Piecewise-linear Lozi map: x' = 1 + y - a|x|, y' = b x."""
    a = float(params["a"])
    b = float(params["b"])
    x = float(params["x0"])
    y = float(params["y0"])
    points: List[Tuple[float, float]] = []
    for _ in range(iteration_count(params["iterations"])):
        x, y = 1.0 + y - a * abs(x), b * x
        points.append((x, y))
    return _as_points(points)


def logistic_step(x: float, r: float) -> float:
    return r * x * (1.0 - x)


def calculate_logistic(params: Mapping[str, Any]) -> np.ndarray:
    """Logistic time series as ``(index, x)`` rows, starting with ``x0`` at index 0."""
    r = float(params["r"])
    x = float(params["x0"])
    points: List[Tuple[float, float]] = []
    for index in range(iteration_count(params["iterations"])):
        points.append((float(index), x))
        x = logistic_step(x, r)
    return _as_points(points)


def normalize_angle(value: float) -> float:
    """Floor-modulo into ``[0, 2*pi)``."""
    angle = value % TWO_PI
    # a tiny negative input rounds up to exactly 2*pi
    return 0.0 if angle >= TWO_PI else angle


def standard_map(numP: float, numQ: float, iterations: float, k: float, max_points: int = MAX_WORKER_POINTS) -> List[Tuple[float, float]]:
    """Chirikov standard map over a ``numP x numQ`` grid of initial angles.

    Emits ``(q, p)`` pairs and stops every loop once ``max_points`` is reached.
    """
    if numP <= 0 or numQ <= 0 or iterations <= 0 or max_points <= 0:
        return []

    points: List[Tuple[float, float]] = []
    for i in range(iteration_count(numP)):
        for j in range(iteration_count(numQ)):
            p = normalize_angle(i / numP * TWO_PI)
            q = normalize_angle(j / numQ * TWO_PI)
            for _ in range(iteration_count(iterations)):
                p = normalize_angle(p + k * math.sin(q))
                q = normalize_angle(q + p)
                points.append((q, p))
                if len(points) >= max_points:
                    return points
    return points


def calculate_standard(params: Mapping[str, Any], *, max_points: int = MAX_WORKER_POINTS) -> np.ndarray:
    return _as_points(
        standard_map(
            float(params["numP"]),
            float(params["numQ"]),
            float(params["iterations"]),
            float(params["k"]),
            max_points,
        )
    )


def saturating(x: float, a: float) -> float:
    """f(x, a) = a x + 2 (1 - a) x^2 / (1 + x^2)"""
    return a * x + (2.0 * (1.0 - a) * x * x) / (1.0 + x * x)


def chaos_esthetique(a: float, b: float, x0: float, y0: float, iterations: float, max_points: int = MAX_WORKER_POINTS) -> List[Tuple[float, float]]:
    points: List[Tuple[float, float]] = []
    x, y = x0, y0
    for _ in range(min(iteration_count(iterations), max(0, max_points))):
        x_next = y + saturating(x, a)
        y_next = -b * x + saturating(x_next, a)
        points.append((x_next, y_next))
        x, y = x_next, y_next
    return points


def calculate_chaos_esthetique(params: Mapping[str, Any], *, max_points: int = MAX_WORKER_POINTS) -> np.ndarray:
    return _as_points(
        chaos_esthetique(
            float(params["a"]),
            float(params["b"]),
            float(params["x0"]),
            float(params["y0"]),
            float(params["iterations"]),
            max_points,
        )
    )
