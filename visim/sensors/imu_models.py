"""
IMU error model: bias and white noise on gyroscope and accelerometer.

Forward model used by the simulator:
    ω̃ = ω + b_g + n_g
    f̃ = f + b_a + n_a

where ω is the true body angular velocity, f the true specific force, b_*
slowly varying random-walk biases and n_* zero-mean white noise.

Noise parameters are continuous-time densities, as listed on IMU
datasheets. Converting to per-sample standard deviations at period dt:
    white noise:   σ_d = σ / sqrt(dt)      (σ in unit/sqrt(Hz))
    bias walk:     σ_d = σ * sqrt(dt)      (σ in unit*sqrt(Hz))

Frames:
    - All IMU quantities are expressed in the body frame B.
"""

from typing import Optional

import numpy as np


def corrupt_gyro(
    omega: np.ndarray,
    b_g: np.ndarray,
    n_g: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Apply the gyroscope error model ω̃ = ω + b_g + n_g.

    Args:
        omega: True angular velocity in body frame. Shape (3,) or (N, 3). Units: rad/s.
        b_g: Gyroscope bias, broadcastable to omega. Units: rad/s.
        n_g: White noise sample (optional). If None, no noise is added.

    Returns:
        Measured angular velocity, same shape as omega.
    """
    omega_meas = omega + b_g
    if n_g is not None:
        omega_meas = omega_meas + n_g
    return omega_meas


def corrupt_accel(
    f: np.ndarray,
    b_a: np.ndarray,
    n_a: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Apply the accelerometer error model f̃ = f + b_a + n_a.

    Args:
        f: True specific force in body frame. Shape (3,) or (N, 3). Units: m/s².
        b_a: Accelerometer bias, broadcastable to f. Units: m/s².
        n_a: White noise sample (optional).

    Returns:
        Measured specific force, same shape as f.
    """
    f_meas = f + b_a
    if n_a is not None:
        f_meas = f_meas + n_a
    return f_meas


def white_noise_std(noise_density: float, dt: float) -> float:
    """
    Per-sample standard deviation of white noise sampled at period dt.

    Args:
        noise_density: Continuous white noise density σ (e.g. rad/s/sqrt(Hz)).
        dt: Sample period [s], must be positive.

    Returns:
        Discrete standard deviation σ / sqrt(dt).
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    return noise_density / np.sqrt(dt)


def random_walk_std(walk_density: float, dt: float) -> float:
    """
    Standard deviation of one random-walk increment over dt.

    Args:
        walk_density: Random walk density σ (e.g. rad/s²/sqrt(Hz)).
        dt: Elapsed time [s], must be non-negative.

    Returns:
        σ * sqrt(dt).
    """
    if dt < 0:
        raise ValueError(f"dt must be non-negative, got {dt}")
    return walk_density * np.sqrt(dt)
