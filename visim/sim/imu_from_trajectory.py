"""
Ideal IMU readings from trajectory kinematics.

Accelerometers measure **specific force** (reaction force), not
gravitational acceleration. For a stationary device in ENU:
    - True acceleration: a_W = [0, 0, 0]
    - Specific force: f_b = [0, 0, +9.81] (upward reaction from ground)

The forward model is:
    1. Take true acceleration in world frame: a_W = d²p/dt²
    2. Subtract gravity: a_W - g_W
    3. Rotate to body frame: f_b = R_W^B @ (a_W - g_W)

Gyroscopes measure the body angular rate, which the continuous trajectory
provides directly. gyro_from_quaternions recovers it from a sampled
attitude series by finite differences and is kept as an independent check.
"""

from typing import Tuple

import numpy as np

from visim.coords.rotations import quat_conjugate, quat_multiply
from visim.sim.bspline_se3 import TrajectorySample


def ideal_imu_from_sample(
    sample: TrajectorySample,
    gravity_world: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Noise-free IMU reading for one trajectory sample.

    Args:
        sample: Trajectory pose and derivatives.
        gravity_world: Gravity vector in world frame.

    Returns:
        Tuple (gyro_body, accel_body): angular velocity [rad/s] and
        specific force [m/s²], both in body frame.
    """
    accel_body = sample.rotation.T @ (sample.linear_acceleration - gravity_world)
    return sample.angular_velocity.copy(), accel_body


def gyro_from_quaternions(
    quat_series: np.ndarray,
    dt: float,
) -> np.ndarray:
    """
    Angular velocity in body frame from a uniformly sampled attitude series.

    Uses ω ≈ 2 · vec(q_k* ⊗ (q_k+1 - q_k-1) / (2 dt)) (central differences,
    one-sided at the ends).

    Args:
        quat_series: Body-to-world quaternions, shape (N, 4), N >= 2, with
                     consistent sign between neighbours.
        dt: Sample period [s].

    Returns:
        Angular velocity in body frame, shape (N, 3). Units: rad/s.
    """
    N = quat_series.shape[0]
    if N < 2:
        raise ValueError(f"Need at least 2 quaternions, got {N}")

    dq_dt = np.gradient(quat_series, dt, axis=0)
    omega = np.zeros((N, 3))
    for i in range(N):
        omega[i] = 2.0 * quat_multiply(quat_conjugate(quat_series[i]), dq_dt[i])[1:4]
    return omega
