"""Pixel-grid kernels: Newton fractal and bifurcation diagrams.

These work on whole rows/columns at once with numpy, but every pixel or
column follows exactly the scalar recurrence described in its docstring.
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np

from ..config import BIFURCATION_WARMUP, RASTER_HEIGHT, RASTER_WIDTH
from ..utils import iteration_count

CUBE_ROOTS_OF_UNITY = np.exp(2j * np.pi * np.arange(3) / 3)
ROOT_COLORS = np.array(
    [
        [0, 243, 255],
        [188, 19, 254],
        [255, 214, 0],
    ],
    dtype=np.float64,
)
SENTINEL_COLOR = np.array([0, 0, 0, 255], dtype=np.uint8)
DERIVATIVE_EPSILON = 1e-10
CONVERGENCE_TOLERANCE = 1e-3

POINT_ALPHA = 0.1
HENON_X_RANGE = (-1.5, 1.5)
DIVERGENCE_LIMIT = 1e6


def _check_size(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise ValueError(f"raster size must be positive, got {width}x{height}")


def calculate_newton(
    params: Mapping[str, Any],
    *,
    width: int = RASTER_WIDTH,
    height: int = RASTER_HEIGHT,
) -> np.ndarray:
    """Newton's method for z^3 - 1 on every pixel of the viewport.

    Returns an ``(height, width, 4)`` RGBA ``uint8`` image. A pixel converged
    to root k takes that root's colour scaled by ``1 - iteration / maxIterations``.
    Pixels whose derivative ``|3 z^2|`` falls below ``DERIVATIVE_EPSILON``, and
    pixels that never converge, get the opaque black sentinel. Each pixel is
    written exactly once.
    """
    _check_size(width, height)
    max_iterations = float(params["maxIterations"])
    xs = np.linspace(float(params["xMin"]), float(params["xMax"]), width)
    # row 0 is the top of the image
    ys = np.linspace(float(params["yMax"]), float(params["yMin"]), height)
    z = (xs[np.newaxis, :] + 1j * ys[:, np.newaxis]).ravel()

    colors = np.zeros((z.size, 4), dtype=np.uint8)
    pending = np.arange(z.size)

    for iteration in range(iteration_count(max_iterations)):
        if pending.size == 0:
            break
        current = z[pending]
        derivative = 3.0 * current * current
        degenerate = np.abs(derivative) < DERIVATIVE_EPSILON
        colors[pending[degenerate]] = SENTINEL_COLOR
        pending = pending[~degenerate]
        current = current[~degenerate]
        derivative = derivative[~degenerate]

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            current = current - (current * current * current - 1.0) / derivative
            distances = np.abs(current[:, np.newaxis] - CUBE_ROOTS_OF_UNITY[np.newaxis, :])
        z[pending] = current

        nearest = np.argmin(distances, axis=1)
        converged = distances[np.arange(nearest.size), nearest] < CONVERGENCE_TOLERANCE
        if np.any(converged):
            brightness = 1.0 - iteration / max_iterations
            rgb = ROOT_COLORS[nearest[converged]] * brightness
            done = pending[converged]
            colors[done, :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
            colors[done, 3] = 255
        pending = pending[~converged]

    colors[pending] = SENTINEL_COLOR
    return colors.reshape(height, width, 4)


def _column_parameters(low: float, high: float, width: int) -> np.ndarray:
    if width == 1:
        return np.array([low], dtype=np.float64)
    return low + (high - low) * np.arange(width, dtype=np.float64) / (width - 1)


def _accumulate(density: np.ndarray, values: np.ndarray, low: float, high: float) -> None:
    """Add one hit per column at the row where ``values`` lands."""
    height = density.shape[0]
    with np.errstate(invalid="ignore"):
        inside = np.isfinite(values) & (values >= low) & (values <= high)
    columns = np.flatnonzero(inside)
    rows = np.rint((high - values[inside]) / (high - low) * (height - 1)).astype(np.intp)
    np.add.at(density, (rows, columns), 1)


def _to_opacity(density: np.ndarray, alpha: float) -> np.ndarray:
    """Composite ``count`` overplotted points of opacity ``alpha``."""
    return (1.0 - np.power(1.0 - alpha, density)).astype(np.float32)


def calculate_bifurcation_logistic(
    params: Mapping[str, Any],
    *,
    width: int = RASTER_WIDTH,
    height: int = RASTER_HEIGHT,
    warmup: int = BIFURCATION_WARMUP,
    alpha: float = POINT_ALPHA,
) -> np.ndarray:
    """Bifurcation diagram of x' = r x (1 - x) over ``r`` in ``[rMin, rMax]``.

    Column ``i`` uses ``r = rMin + (rMax - rMin) * i / (width - 1)`` starting at
    ``x = 0.5``. After ``warmup`` settling iterations each of the following
    ``maxIterations`` states is plotted with ``x`` in ``[0, 1]`` mapped bottom
    to top. Returns an ``(height, width)`` opacity image in ``[0, 1]``.
    """
    _check_size(width, height)
    r = _column_parameters(float(params["rMin"]), float(params["rMax"]), width)
    x = np.full(width, 0.5)
    density = np.zeros((height, width), dtype=np.float64)

    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(warmup):
            x = r * x * (1.0 - x)
        for _ in range(iteration_count(params["maxIterations"])):
            x = r * x * (1.0 - x)
            _accumulate(density, x, 0.0, 1.0)
    return _to_opacity(density, alpha)


def calculate_bifurcation_henon(
    params: Mapping[str, Any],
    *,
    width: int = RASTER_WIDTH,
    height: int = RASTER_HEIGHT,
    warmup: int = BIFURCATION_WARMUP,
    alpha: float = POINT_ALPHA,
) -> np.ndarray:
    """Bifurcation diagram of the Hénon map over ``a`` in ``[aMin, aMax]``.

    Each column iterates x' = 1 - a x^2 + y, y' = b x from the origin and
    plots ``x`` within ``HENON_X_RANGE``. A column that diverges past
    ``DIVERGENCE_LIMIT`` stops contributing points.
    """
    _check_size(width, height)
    a = _column_parameters(float(params["aMin"]), float(params["aMax"]), width)
    b = float(params["b"])
    x = np.zeros(width)
    y = np.zeros(width)
    density = np.zeros((height, width), dtype=np.float64)
    low, high = HENON_X_RANGE

    def advance(x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        x_next = 1.0 - a * x * x + y
        y_next = b * x
        diverged = ~np.isfinite(x_next) | (np.abs(x_next) > DIVERGENCE_LIMIT)
        x_next[diverged] = np.nan
        y_next[diverged] = np.nan
        return x_next, y_next

    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(warmup):
            x, y = advance(x, y)
        for _ in range(iteration_count(params["maxIterations"])):
            x, y = advance(x, y)
            _accumulate(density, x, low, high)
    return _to_opacity(density, alpha)
