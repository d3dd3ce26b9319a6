"""Continuous-time attractors integrated with fixed step sizes.

Lorenz keeps its historical forward-Euler scheme; Rössler uses classical
fourth-order Runge-Kutta. Neither guards against divergence: large ``dt`` or
out-of-range parameters can grow to ``inf``/``nan``, which the stability
checker is expected to warn about beforehand.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

import numpy as np

from ..config import LORENZ_DT, LORENZ_STEPS, ROSSLER_DT, ROSSLER_STEPS

Derivative = Callable[[np.ndarray], np.ndarray]


def rk4_step(f: Derivative, x: np.ndarray, dt: float) -> np.ndarray:
    """Fourth-order Runge-Kutta integrator for a single step."""
    k1 = f(x)
    k2 = f(x + 0.5 * dt * k1)
    k3 = f(x + 0.5 * dt * k2)
    k4 = f(x + dt * k3)
    return x + (dt / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


def euler_step(f: Derivative, x: np.ndarray, dt: float) -> np.ndarray:
    return x + dt * f(x)


def lorenz_derivative(sigma: float, rho: float, beta: float) -> Derivative:
    """
    dot(x) = sigma * (y - x)
    dot(y) = x * (rho - z) - y
    dot(z) = x * y - beta * z
    """

    def dynamics(state: np.ndarray) -> np.ndarray:
        x, y, z = state
        return np.array([sigma * (y - x), x * (rho - z) - y, x * y - beta * z], dtype=np.float64)

    return dynamics


def rossler_derivative(a: float, b: float, c: float) -> Derivative:
    """
    dot(x) = -y - z
    dot(y) = x + a * y
    dot(z) = b + z * (x - c)
    """

    def dynamics(state: np.ndarray) -> np.ndarray:
        x, y, z = state
        return np.array([-y - z, x + a * y, b + z * (x - c)], dtype=np.float64)

    return dynamics


def _integrate(step: Callable[[Derivative, np.ndarray, float], np.ndarray], f: Derivative, x0: np.ndarray, steps: int, dt: float) -> np.ndarray:
    """Advance ``steps`` times and record every state after the initial one."""
    states = np.empty((max(0, steps), 3), dtype=np.float64)
    current = x0
    for idx in range(states.shape[0]):
        current = step(f, current, dt)
        states[idx] = current
    return states


def calculate_lorenz(params: Mapping[str, Any], *, steps: int | None = None, dt: float | None = None) -> np.ndarray:
    """Lorenz trajectory as an ``(steps, 3)`` array of ``x, y, z`` rows.

    ``params`` needs ``sigma``, ``rho`` and ``beta``; ``x0``/``y0``/``z0``,
    ``steps`` and ``dt`` are optional and fall back to the page defaults.
    """
    n_steps = int(steps if steps is not None else params.get("steps", LORENZ_STEPS))
    step_dt = float(dt if dt is not None else params.get("dt", LORENZ_DT))
    x0 = np.array(
        [float(params.get("x0", 0.1)), float(params.get("y0", 0.0)), float(params.get("z0", 0.0))],
        dtype=np.float64,
    )
    f = lorenz_derivative(float(params["sigma"]), float(params["rho"]), float(params["beta"]))
    return _integrate(euler_step, f, x0, n_steps, step_dt)


def calculate_rossler(params: Mapping[str, Any], *, steps: int | None = None, dt: float | None = None) -> np.ndarray:
    """Rössler trajectory integrated with RK4, as an ``(steps, 3)`` array.

    ``params`` needs ``a``, ``b`` and ``c``; initial conditions ``x0``/``y0``/
    ``z0`` default to ``(0.1, 0, 0)``. ``steps=0`` yields an empty trajectory.
    """
    n_steps = int(steps if steps is not None else params.get("steps", ROSSLER_STEPS))
    step_dt = float(dt if dt is not None else params.get("dt", ROSSLER_DT))
    x0 = np.array(
        [float(params.get("x0", 0.1)), float(params.get("y0", 0.0)), float(params.get("z0", 0.0))],
        dtype=np.float64,
    )
    f = rossler_derivative(float(params["a"]), float(params["b"]), float(params["c"]))
    return _integrate(rk4_step, f, x0, n_steps, step_dt)
