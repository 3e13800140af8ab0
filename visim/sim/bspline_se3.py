"""
Continuous-time SE(3) trajectory from discrete waypoints.

The simulator queries the ground-truth trajectory at arbitrary times
through the ContinuousTrajectory contract:

    feasible(t) -> bool
    evaluate(t) -> TrajectorySample   (raises OutOfRangeError if not feasible)

BsplineSE3 implements it with a uniform cubic B-spline in cumulative form
on SE(3). For t in knot segment [t_k, t_k+1), with u = (t - t_k) / dt:

    T(u) = T_{k-1} · exp(B~0(u) Ω_{k-1}) · exp(B~1(u) Ω_k) · exp(B~2(u) Ω_{k+1})

    Ω_j   = log(T_j⁻¹ T_{j+1})
    B~0   = (5 + 3u - 3u² + u³) / 6
    B~1   = (1 + 3u + 3u² - 2u³) / 6
    B~2   = u³ / 6

Velocity and acceleration follow from the product rule with
d/dt exp(b Ω) = exp(b Ω) · (ḃ Ω)^. The curve is C² in position and
orientation, so angular velocity and specific force are well defined at
every feasible time.

Control poses sit on a uniform knot grid covering the waypoint span with
one knot before the start and one after the end. Their values are obtained
by slerp (orientation) and linear interpolation (position) between the
bounding waypoints, held at the end poses outside the waypoint range. The
feasible span is exactly [first waypoint time, last waypoint time]; queries
outside it are rejected, never extrapolated.
"""

import warnings
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np
from scipy.spatial.transform import Rotation, Slerp

from visim.coords.rotations import rotation_matrix_to_quat
from visim.coords.se3 import se3_exp, se3_hat, se3_inverse, se3_log, vee
from visim.sim.errors import OutOfRangeError
from visim.sim.waypoints import WaypointStore


@dataclass(frozen=True)
class TrajectorySample:
    """
    Pose and derivatives of the trajectory at one time.

    Attributes:
        orientation: Body-to-world quaternion [qw, qx, qy, qz].
        position: Body origin in world frame [m].
        linear_velocity: d/dt position, world frame [m/s].
        linear_acceleration: d²/dt² position, world frame [m/s²].
        angular_velocity: Body angular rate, body frame [rad/s].
        angular_acceleration: d/dt angular_velocity, body frame [rad/s²].
        rotation: Body-to-world rotation matrix matching orientation.
    """

    orientation: np.ndarray
    position: np.ndarray
    linear_velocity: np.ndarray
    linear_acceleration: np.ndarray
    angular_velocity: np.ndarray
    angular_acceleration: np.ndarray
    rotation: np.ndarray


class ContinuousTrajectory(Protocol):
    """Time-parameterized pose with first and second derivatives."""

    @property
    def start_time(self) -> float:
        ...

    @property
    def end_time(self) -> float:
        ...

    def feasible(self, t: float) -> bool:
        ...

    def evaluate(self, t: float) -> TrajectorySample:
        ...


def _skew_part_vee(M: np.ndarray) -> np.ndarray:
    return vee(0.5 * (M - M.T))


class BsplineSE3:
    """
    Uniform cubic B-spline on SE(3) fitted to a WaypointStore.

    Args:
        waypoints: Ground-truth waypoints (at least 2).
        knot_spacing: Knot period [s]. If None, the mean waypoint spacing
                      (held at min_knot_spacing or above).
        min_knot_spacing: Lower bound on the knot period [s]. Default 0.05.
                          A smaller knot_spacing is raised to it with a warning.

    Example:
        >>> spline = BsplineSE3(load_data("traj.txt"))
        >>> sample = spline.evaluate(spline.start_time + 1.0)
        >>> print(sample.angular_velocity)
    """

    def __init__(
        self,
        waypoints: WaypointStore,
        knot_spacing: Optional[float] = None,
        min_knot_spacing: float = 0.05,
    ):
        t_wp, quat, pos = waypoints.as_arrays()
        self._start_time = float(t_wp[0])
        self._end_time = float(t_wp[-1])
        duration = self._end_time - self._start_time

        if knot_spacing is None:
            knot_spacing = max(float(np.mean(np.diff(t_wp))), min_knot_spacing)
        if knot_spacing <= 0:
            raise ValueError(f"knot_spacing must be positive, got {knot_spacing}")
        if knot_spacing < min_knot_spacing:
            warnings.warn(
                f"knot_spacing {knot_spacing} s is below min_knot_spacing, "
                f"using {min_knot_spacing} s",
                UserWarning,
            )
            knot_spacing = min_knot_spacing

        # Integer number of segments so the last knot lands on end_time
        self._num_segments = max(1, int(round(duration / knot_spacing)))
        self._dt = duration / self._num_segments

        # Knots k = -1 .. n+1 (control index j = k + 1)
        knot_idx = np.arange(-1, self._num_segments + 2)
        knot_times = np.clip(
            self._start_time + self._dt * knot_idx, self._start_time, self._end_time
        )

        # scipy rotations are scalar-last
        slerp = Slerp(t_wp, Rotation.from_quat(quat[:, [1, 2, 3, 0]]))
        R_ctrl = slerp(knot_times).as_matrix()
        p_ctrl = np.column_stack(
            [np.interp(knot_times, t_wp, pos[:, i]) for i in range(3)]
        )

        control = np.tile(np.eye(4), (len(knot_times), 1, 1))
        control[:, 0:3, 0:3] = R_ctrl
        control[:, 0:3, 3] = p_ctrl
        self._control = control
        self._control.flags.writeable = False

        self._twists = np.array(
            [
                se3_log(se3_inverse(control[j]) @ control[j + 1])
                for j in range(len(control) - 1)
            ]
        )
        self._twists.flags.writeable = False

    @property
    def start_time(self) -> float:
        return self._start_time

    @property
    def end_time(self) -> float:
        return self._end_time

    @property
    def knot_spacing(self) -> float:
        return self._dt

    @property
    def control_poses(self) -> np.ndarray:
        """Control poses, shape (n + 3, 4, 4)."""
        return self._control

    def feasible(self, t: float) -> bool:
        """True if t lies within [start_time, end_time]."""
        return bool(self._start_time <= t <= self._end_time)

    def evaluate(self, t: float) -> TrajectorySample:
        """
        Pose, velocity and acceleration at time t.

        Raises:
            OutOfRangeError: If t is outside [start_time, end_time].
        """
        if not self.feasible(t):
            raise OutOfRangeError(t, self._start_time, self._end_time)

        s = (t - self._start_time) / self._dt
        k = min(int(np.floor(s)), self._num_segments - 1)
        u = s - k
        dt = self._dt

        b = np.array(
            [
                (5.0 + 3.0 * u - 3.0 * u**2 + u**3) / 6.0,
                (1.0 + 3.0 * u + 3.0 * u**2 - 2.0 * u**3) / 6.0,
                u**3 / 6.0,
            ]
        )
        b_dot = np.array(
            [
                (3.0 - 6.0 * u + 3.0 * u**2) / 6.0,
                (3.0 + 6.0 * u - 6.0 * u**2) / 6.0,
                3.0 * u**2 / 6.0,
            ]
        ) / dt
        b_ddot = np.array(
            [
                (-6.0 + 6.0 * u) / 6.0,
                (6.0 - 12.0 * u) / 6.0,
                6.0 * u / 6.0,
            ]
        ) / (dt * dt)

        # Segment k uses control poses k-1 .. k+2, i.e. indices k .. k+3
        T0 = self._control[k]
        A, A_dot, A_ddot = [], [], []
        for j in range(3):
            omega = self._twists[k + j]
            Aj = se3_exp(b[j] * omega)
            Xi_dot = se3_hat(b_dot[j] * omega)
            Xi_ddot = se3_hat(b_ddot[j] * omega)
            Aj_dot = Aj @ Xi_dot
            A.append(Aj)
            A_dot.append(Aj_dot)
            A_ddot.append(Aj_dot @ Xi_dot + Aj @ Xi_ddot)

        T = T0 @ A[0] @ A[1] @ A[2]
        T_dot = T0 @ (
            A_dot[0] @ A[1] @ A[2]
            + A[0] @ A_dot[1] @ A[2]
            + A[0] @ A[1] @ A_dot[2]
        )
        T_ddot = T0 @ (
            A_ddot[0] @ A[1] @ A[2]
            + A[0] @ A_ddot[1] @ A[2]
            + A[0] @ A[1] @ A_ddot[2]
            + 2.0 * A_dot[0] @ A_dot[1] @ A[2]
            + 2.0 * A_dot[0] @ A[1] @ A_dot[2]
            + 2.0 * A[0] @ A_dot[1] @ A_dot[2]
        )

        R = T[0:3, 0:3]
        R_T = R.T
        omega_body = _skew_part_vee(R_T @ T_dot[0:3, 0:3])
        # R^T R'' = [α]x + [ω]x², the second term is symmetric
        alpha_body = _skew_part_vee(R_T @ T_ddot[0:3, 0:3])

        return TrajectorySample(
            orientation=rotation_matrix_to_quat(R),
            position=T[0:3, 3].copy(),
            linear_velocity=T_dot[0:3, 3].copy(),
            linear_acceleration=T_ddot[0:3, 3].copy(),
            angular_velocity=omega_body,
            angular_acceleration=alpha_body,
            rotation=R.copy(),
        )
