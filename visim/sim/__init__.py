"""
Vicon-inertial simulation from a continuous ground-truth trajectory.

This package turns a list of timestamped poses into time-synchronized IMU,
camera-trigger and pose-tracker streams with bias and noise, while keeping
the ground truth queryable.

Modules:
    waypoints: Trajectory file parsing (time qx qy qz qw px py pz)
    bspline_se3: Cubic B-spline on SE(3) with pose derivatives
    noise: Independently seeded Gaussian streams
    bias: Random-walk IMU bias with replayable history
    imu_from_trajectory: Specific force and body rate from kinematics
    scheduler: Simulation clock and per-stream cursors
    synthesizer: IMU / camera / pose-tracker sample generation
    simulator: Simulator facade (ok, get_state, get_next_*)
    params: SimulatorParams configuration
    errors: Exception taxonomy
"""

from visim.sim.bias import BiasProcess, BiasState
from visim.sim.bspline_se3 import BsplineSE3, ContinuousTrajectory, TrajectorySample
from visim.sim.errors import (
    InsufficientDataError,
    MalformedInputError,
    OutOfRangeError,
    UnsortedInputError,
    VisimError,
)
from visim.sim.imu_from_trajectory import (
    gyro_from_quaternions,
    ideal_imu_from_sample,
)
from visim.sim.noise import GaussianStream, NoiseSource
from visim.sim.params import SimulatorParams
from visim.sim.scheduler import EventScheduler, SchedulerState, StreamKind
from visim.sim.simulator import Simulator
from visim.sim.synthesizer import MeasurementSynthesizer
from visim.sim.waypoints import Waypoint, WaypointStore, load_data, parse_waypoints

__all__ = [
    "BiasProcess",
    "BiasState",
    "BsplineSE3",
    "ContinuousTrajectory",
    "TrajectorySample",
    "InsufficientDataError",
    "MalformedInputError",
    "OutOfRangeError",
    "UnsortedInputError",
    "VisimError",
    "gyro_from_quaternions",
    "ideal_imu_from_sample",
    "GaussianStream",
    "NoiseSource",
    "SimulatorParams",
    "EventScheduler",
    "SchedulerState",
    "StreamKind",
    "Simulator",
    "MeasurementSynthesizer",
    "Waypoint",
    "WaypointStore",
    "load_data",
    "parse_waypoints",
]
