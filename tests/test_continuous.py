import numpy as np
import pytest

from chaosmaps.kernels.continuous import (
    calculate_lorenz,
    calculate_rossler,
    euler_step,
    lorenz_derivative,
    rk4_step,
    rossler_derivative,
)

ROSSLER = {"a": 0.2, "b": 0.2, "c": 5.7, "x0": 1.0, "y0": 1.0, "z0": 1.0}


def _rossler_rhs(state, a=0.2, b=0.2, c=5.7):
    x, y, z = state
    return np.array([-y - z, x + a * y, b + z * (x - c)])


def test_rossler_dynamics_matches_docstring():
    f = rossler_derivative(0.2, 0.2, 5.7)
    x = np.array([1.0, 2.0, 3.0])
    np.testing.assert_allclose(f(x), _rossler_rhs(x), rtol=1e-12)


def test_lorenz_dynamics_matches_docstring():
    sigma, rho, beta = 10.0, 28.0, 8.0 / 3.0
    f = lorenz_derivative(sigma, rho, beta)
    x = np.array([1.0, 2.0, 3.0])
    expected = np.array([sigma * (x[1] - x[0]), x[0] * (rho - x[2]) - x[1], x[0] * x[1] - beta * x[2]])
    np.testing.assert_allclose(f(x), expected, rtol=1e-12)


def test_rossler_first_step_is_classical_rk4():
    dt = 0.01
    x = np.array([1.0, 1.0, 1.0])
    k1 = _rossler_rhs(x)
    k2 = _rossler_rhs(x + dt / 2 * k1)
    k3 = _rossler_rhs(x + dt / 2 * k2)
    k4 = _rossler_rhs(x + dt * k3)
    expected = x + dt / 6 * (k1 + 2 * k2 + 2 * k3 + k4)

    trajectory = calculate_rossler(ROSSLER, steps=1, dt=dt)
    assert trajectory.shape == (1, 3)
    np.testing.assert_allclose(trajectory[0], expected, rtol=0, atol=1e-10)
    np.testing.assert_allclose(trajectory[0], [0.980162, 1.011912, 0.955946], atol=1e-4)


def test_rossler_is_not_euler():
    dt = 0.01
    x = np.array([1.0, 1.0, 1.0])
    euler = x + dt * _rossler_rhs(x)
    trajectory = calculate_rossler(ROSSLER, steps=1, dt=dt)
    assert np.max(np.abs(trajectory[0] - euler)) > 1e-4


def test_rossler_zero_steps_is_empty():
    trajectory = calculate_rossler(ROSSLER, steps=0, dt=0.01)
    assert trajectory.shape == (0, 3)


def test_rossler_trajectory_is_bounded():
    trajectory = calculate_rossler({"a": 0.2, "b": 0.2, "c": 5.7}, steps=5000, dt=0.01)
    assert trajectory.shape == (5000, 3)
    assert np.all(np.isfinite(trajectory))
    assert np.max(np.abs(trajectory)) < 50


def test_rossler_reads_steps_from_params():
    trajectory = calculate_rossler(dict(ROSSLER, steps=7, dt=0.02))
    assert trajectory.shape == (7, 3)


def test_lorenz_first_step_is_forward_euler():
    params = {"sigma": 10.0, "rho": 28.0, "beta": 8.0 / 3.0}
    trajectory = calculate_lorenz(params, steps=2, dt=0.005)
    np.testing.assert_allclose(trajectory[0], [0.095, 0.014, 0.0], atol=1e-12)
    f = lorenz_derivative(10.0, 28.0, 8.0 / 3.0)
    np.testing.assert_allclose(trajectory[1], euler_step(f, trajectory[0], 0.005), atol=1e-12)


def test_lorenz_default_length():
    trajectory = calculate_lorenz({"sigma": 10.0, "rho": 28.0, "beta": 8.0 / 3.0})
    assert trajectory.shape == (15_000, 3)
    assert np.all(np.isfinite(trajectory))


@pytest.mark.parametrize("dt", [0.1, 0.01])
def test_rk4_step_exact_for_linear_decay(dt):
    # dot(x) = -x ; one RK4 step equals the 4th order Taylor polynomial of exp(-dt)
    x = np.array([1.0, 2.0, 3.0])
    taylor = 1 - dt + dt**2 / 2 - dt**3 / 6 + dt**4 / 24
    np.testing.assert_allclose(rk4_step(lambda s: -s, x, dt), taylor * x, rtol=1e-12)
