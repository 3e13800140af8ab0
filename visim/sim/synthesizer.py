"""
Measurement synthesis from the continuous trajectory.

IMU (body frame B, world frame W):
    ω̃ = ω_B + b_g + n_g,              n_g ~ N(0, σ_w² / dt)
    f̃ = R_WB^T (a_W - g_W) + b_a + n_a, n_a ~ N(0, σ_a² / dt)

The biases are stepped by the random-walk process to the sample time
before being applied, so the ground-truth state at that time reports the
same bias the measurement carries.

Pose-tracker (marker frame M rigidly attached to B by T_BM):
    T_WM = T_WB · T_BM
    q̃ = q_WM ⊗ Exp(δθ),  δθ ~ N(0, σ_ori² I)
    p̃ = p_WM + δp,       δp ~ N(0, σ_pos² I)

Camera: trigger time only.

Ground truth: pose and velocity from the trajectory plus the bias history
lookup, with no RNG draws and no state change.
"""

import numpy as np

from visim.coords.rotations import quat_multiply, quat_normalize, rotation_matrix_to_quat
from visim.coords.se3 import se3_from_quat_pos, se3_to_quat_pos, so3_exp
from visim.sensors.imu_models import corrupt_accel, corrupt_gyro, white_noise_std
from visim.sensors.types import CameraTrigger, ImuMeasurement, ImuState, ViconMeasurement
from visim.sim.bias import BiasProcess
from visim.sim.bspline_se3 import ContinuousTrajectory
from visim.sim.errors import OutOfRangeError
from visim.sim.imu_from_trajectory import ideal_imu_from_sample
from visim.sim.noise import NoiseSource
from visim.sim.params import SimulatorParams


class MeasurementSynthesizer:
    """
    Turns trajectory kinematics into noisy sensor samples.

    Args:
        trajectory: Ground-truth continuous trajectory.
        params: Noise densities, extrinsics, gravity and IMU rate.
        noise: The three noise streams.
        bias: Bias random-walk process (driven by noise.perturb).
    """

    def __init__(
        self,
        trajectory: ContinuousTrajectory,
        params: SimulatorParams,
        noise: NoiseSource,
        bias: BiasProcess,
    ):
        self._trajectory = trajectory
        self._params = params
        self._noise = noise
        self._bias = bias
        self._gravity = params.gravity_vector()
        self._imu_dt = 1.0 / params.sim_freq_imu
        self._T_marker_in_body = se3_from_quat_pos(
            params.q_marker_to_body, params.p_marker_in_body
        )

    @property
    def gravity(self) -> np.ndarray:
        return self._gravity.copy()

    def imu_at(self, t: float) -> ImuMeasurement:
        """
        IMU sample at time t.

        Raises:
            OutOfRangeError: If t is outside the trajectory span. Nothing is
                mutated in that case.
            ValueError: If t precedes the latest bias history entry.
        """
        sample = self._trajectory.evaluate(t)
        gyro_true, accel_true = ideal_imu_from_sample(sample, self._gravity)

        p = self._params
        bias = self._bias.advance_to(t, walk_std_accel=p.sigma_ab, walk_std_gyro=p.sigma_wb)

        n_g = self._noise.imu.gaussian_vec3(white_noise_std(p.sigma_w, self._imu_dt))
        n_a = self._noise.imu.gaussian_vec3(white_noise_std(p.sigma_a, self._imu_dt))

        return ImuMeasurement(
            t=t,
            gyro=corrupt_gyro(gyro_true, bias.gyro_bias, n_g),
            accel=corrupt_accel(accel_true, bias.accel_bias, n_a),
        )

    def vicon_at(self, t: float) -> ViconMeasurement:
        """
        Pose-tracker sample of the marker frame at time t.

        Raises:
            OutOfRangeError: If t is outside the trajectory span.
        """
        sample = self._trajectory.evaluate(t)

        T_body = np.eye(4)
        T_body[0:3, 0:3] = sample.rotation
        T_body[0:3, 3] = sample.position
        q_marker, p_marker = se3_to_quat_pos(T_body @ self._T_marker_in_body)

        p = self._params
        dtheta = self._noise.vicon.gaussian_vec3(p.sigma_vicon_ori)
        dp = self._noise.vicon.gaussian_vec3(p.sigma_vicon_pos)

        q_meas = quat_normalize(
            quat_multiply(q_marker, rotation_matrix_to_quat(so3_exp(dtheta)))
        )
        return ViconMeasurement(t=t, orientation=q_meas, position=p_marker + dp)

    def cam_trigger_at(self, t: float) -> CameraTrigger:
        """Camera trigger at time t (timing only)."""
        if not self._trajectory.feasible(t):
            raise OutOfRangeError(t, self._trajectory.start_time, self._trajectory.end_time)
        return CameraTrigger(t=t)

    def state_at(self, t: float) -> ImuState:
        """
        Ground-truth IMU state at time t.

        Raises:
            OutOfRangeError: If t is outside the trajectory span.
        """
        sample = self._trajectory.evaluate(t)
        bias = self._bias.bias_at(t)
        return ImuState(
            t=t,
            orientation=sample.orientation,
            position=sample.position,
            velocity=sample.linear_velocity,
            gyro_bias=bias.gyro_bias.copy(),
            accel_bias=bias.accel_bias.copy(),
        )
