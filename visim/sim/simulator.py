"""
Vicon-inertial simulator facade.

Given a ground-truth trajectory, the Simulator produces IMU, camera-trigger
and pose-tracker samples at independent rates, with random-walk IMU bias
and white measurement noise, and answers ground-truth state queries.

Typical loop:

    >>> sim = Simulator(SimulatorParams.from_json("sim.json"))
    >>> while sim.ok():
    ...     ok_imu, t, wm, am = sim.get_next_imu()
    ...     ok_vicon, tv, q, p = sim.get_next_vicon()
    ...     ok_state, x = sim.get_state(t)

Every get_* call returns a success flag first. On failure the remaining
fields are placeholders and carry no meaning. Once a stream runs past the
end of the trajectory it keeps failing; ok() turns False when all three
streams have.

The object is single-owner: callers sharing it across threads must
serialize access themselves.
"""

from typing import Iterator, Optional, Tuple, Union

import numpy as np

from visim.sensors.types import CameraTrigger, ImuMeasurement, ImuState, ViconMeasurement
from visim.sim.bias import BiasProcess, BiasState
from visim.sim.bspline_se3 import BsplineSE3, ContinuousTrajectory
from visim.sim.errors import OutOfRangeError
from visim.sim.noise import NoiseSource
from visim.sim.params import SimulatorParams
from visim.sim.scheduler import EventScheduler, SchedulerState, StreamKind
from visim.sim.synthesizer import MeasurementSynthesizer
from visim.sim.waypoints import WaypointStore, load_data

Packet = Union[ImuMeasurement, CameraTrigger, ViconMeasurement]

_IDENTITY_QUAT = np.array([1.0, 0.0, 0.0, 0.0])


class Simulator:
    """
    Master simulator generating vicon-inertial measurements.

    Args:
        params: Simulation parameters. params.traj_path is loaded and fitted
                with a cubic B-spline unless a trajectory is given.
        trajectory: Ready-made continuous trajectory (optional).

    Raises:
        MalformedInputError, UnsortedInputError, InsufficientDataError:
            The trajectory file cannot be used.
        ValueError: Neither params.traj_path nor trajectory is given.
    """

    def __init__(
        self,
        params: SimulatorParams,
        trajectory: Optional[ContinuousTrajectory] = None,
    ):
        self.params = params
        self._waypoints: Optional[WaypointStore] = None

        if trajectory is None:
            if params.traj_path is None:
                raise ValueError("SimulatorParams.traj_path is required without a trajectory")
            self._waypoints = load_data(params.traj_path, time_tolerance=params.time_tolerance)
            trajectory = BsplineSE3(
                self._waypoints,
                knot_spacing=params.knot_spacing,
                min_knot_spacing=params.min_knot_spacing,
            )
        self._trajectory = trajectory

        self._noise = NoiseSource(params.seed_imu, params.seed_vicon, params.seed_perturb)
        self._bias = BiasProcess(
            self._noise.perturb,
            start_time=trajectory.start_time,
            initial_accel_bias=params.initial_accel_bias,
            initial_gyro_bias=params.initial_gyro_bias,
        )
        self._scheduler = EventScheduler(
            trajectory,
            imu_rate=params.sim_freq_imu,
            cam_rate=params.sim_freq_cam,
            vicon_rate=params.sim_freq_vicon,
            enforce_ordering=params.enforce_ordering,
        )
        self._synth = MeasurementSynthesizer(trajectory, params, self._noise, self._bias)

    @classmethod
    def from_waypoints(
        cls,
        waypoints: WaypointStore,
        params: SimulatorParams,
    ) -> "Simulator":
        """Build a simulator from in-memory waypoints instead of params.traj_path."""
        spline = BsplineSE3(
            waypoints,
            knot_spacing=params.knot_spacing,
            min_knot_spacing=params.min_knot_spacing,
        )
        sim = cls(params, trajectory=spline)
        sim._waypoints = waypoints
        return sim

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def trajectory(self) -> ContinuousTrajectory:
        return self._trajectory

    @property
    def waypoints(self) -> Optional[WaypointStore]:
        return self._waypoints

    @property
    def start_time(self) -> float:
        return self._trajectory.start_time

    @property
    def end_time(self) -> float:
        return self._trajectory.end_time

    @property
    def now(self) -> float:
        return self._scheduler.now

    @property
    def state(self) -> SchedulerState:
        return self._scheduler.state

    @property
    def bias_history(self) -> Tuple[BiasState, ...]:
        return self._bias.history

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------

    def ok(self) -> bool:
        """True while there is still simulation data to pull."""
        return self._scheduler.ok()

    def get_state(self, desired_time: float) -> Tuple[bool, np.ndarray]:
        """
        Ground-truth state at desired_time.

        Returns:
            (success, x) with x = [t, q(4), p(3), v(3), b_g(3), b_a(3)].
            Never mutates the clock, bias history or noise streams.
        """
        try:
            state = self._synth.state_at(desired_time)
        except OutOfRangeError:
            placeholder = np.zeros(ImuState.STATE_DIM)
            placeholder[1:5] = _IDENTITY_QUAT
            return False, placeholder
        return True, state.to_vector()

    def get_next_imu(self) -> Tuple[bool, float, np.ndarray, np.ndarray]:
        """
        Next IMU reading.

        Returns:
            (success, time, wm, am): angular velocity [rad/s] and specific
            force [m/s²] in the IMU frame.
        """
        meas = self._next_packet(StreamKind.IMU)
        if meas is None:
            return False, 0.0, np.zeros(3), np.zeros(3)
        return True, meas.t, meas.gyro, meas.accel

    def get_next_cam(self) -> Tuple[bool, float]:
        """Next camera trigger: (success, time)."""
        meas = self._next_packet(StreamKind.CAMERA)
        if meas is None:
            return False, 0.0
        return True, meas.t

    def get_next_vicon(self) -> Tuple[bool, float, np.ndarray, np.ndarray]:
        """
        Next pose-tracker reading.

        Returns:
            (success, time, q, p): marker-to-world quaternion [qw, qx, qy, qz]
            and marker position in the world frame.
        """
        meas = self._next_packet(StreamKind.VICON)
        if meas is None:
            return False, 0.0, _IDENTITY_QUAT.copy(), np.zeros(3)
        return True, meas.t, meas.orientation, meas.position

    def iter_measurements(self) -> Iterator[Packet]:
        """
        Drain all streams in global time order.

        Ties between streams go IMU, camera, then pose-tracker. Stops when
        every stream is exhausted.
        """
        while True:
            kind = self._scheduler.next_stream()
            if kind is None:
                return
            packet = self._next_packet(kind)
            if packet is not None:
                yield packet

    def _next_packet(self, kind: StreamKind) -> Optional[Packet]:
        t = self._scheduler.advance(kind)
        if t is None:
            return None
        if kind is StreamKind.IMU:
            return self._synth.imu_at(t)
        if kind is StreamKind.CAMERA:
            return self._synth.cam_trigger_at(t)
        return self._synth.vicon_at(t)
