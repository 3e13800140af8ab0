"""
Simulation configuration.

SimulatorParams collects every option the simulator reads at construction:
stream rates, IMU and pose-tracker noise, marker extrinsics, RNG seeds,
gravity and spline settings. Values are validated in __post_init__.

Noise conventions:
    sigma_w, sigma_a     IMU white noise densities (rad/s/√Hz, m/s²/√Hz)
    sigma_wb, sigma_ab   IMU bias random-walk densities (rad/s²/√Hz, m/s³/√Hz)
    sigma_vicon_ori      pose-tracker orientation noise per sample (rad)
    sigma_vicon_pos      pose-tracker position noise per sample (m)

Configurations are usually kept as JSON:

    {
        "traj_path": "data/udel_gore.txt",
        "sim_freq_imu": 400,
        "sim_freq_cam": 10,
        "sim_freq_vicon": 100,
        "seed_imu": 0, "seed_vicon": 1, "seed_perturb": 2
    }
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from visim.coords.rotations import quat_normalize
from visim.sensors.gravity import gravity_magnitude
from visim.sensors.types import FrameConvention


def _vec(values: Any, size: int, name: str) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must be finite, got {arr}")
    return arr


@dataclass
class SimulatorParams:
    """
    Parameters of the vicon-inertial simulator.

    Attributes:
        traj_path: Trajectory file (time qx qy qz qw px py pz per line).
        sim_freq_imu: IMU rate [Hz].
        sim_freq_cam: Camera trigger rate [Hz].
        sim_freq_vicon: Pose-tracker rate [Hz].
        sigma_w: Gyroscope white noise density.
        sigma_a: Accelerometer white noise density.
        sigma_wb: Gyroscope bias random-walk density.
        sigma_ab: Accelerometer bias random-walk density.
        sigma_vicon_ori: Pose-tracker orientation noise std [rad].
        sigma_vicon_pos: Pose-tracker position noise std [m].
        q_marker_to_body: Rotation of the tracked marker frame into the IMU
                          body frame, quaternion [qw, qx, qy, qz].
        p_marker_in_body: Marker origin in the IMU body frame [m].
        seed_imu: Seed of the IMU measurement-noise stream.
        seed_vicon: Seed of the pose-tracker measurement-noise stream.
        seed_perturb: Seed of the bias random-walk stream.
        gravity_mag: Gravity magnitude [m/s²] when no latitude is given.
        gravity_latitude_deg: If set, gravity magnitude from the WGS-84 model.
        map_frame: World frame convention, 'ENU' or 'NED'.
        initial_gyro_bias: Gyroscope bias at the start time [rad/s].
        initial_accel_bias: Accelerometer bias at the start time [m/s²].
        knot_spacing: B-spline knot period [s]; None uses the mean waypoint spacing.
        min_knot_spacing: Lower bound on the knot period [s].
        time_tolerance: Backwards waypoint time step dropped instead of rejected [s].
        enforce_ordering: If True, a stream is only served when no other
                          stream has an earlier pending sample.
    """

    traj_path: Optional[str] = None
    sim_freq_imu: float = 400.0
    sim_freq_cam: float = 10.0
    sim_freq_vicon: float = 100.0
    sigma_w: float = 1.6968e-04
    sigma_a: float = 2.0e-03
    sigma_wb: float = 1.9393e-05
    sigma_ab: float = 3.0e-03
    sigma_vicon_ori: float = 1.0e-03
    sigma_vicon_pos: float = 1.0e-03
    q_marker_to_body: np.ndarray = field(
        default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0])
    )
    p_marker_in_body: np.ndarray = field(default_factory=lambda: np.zeros(3))
    seed_imu: int = 0
    seed_vicon: int = 1
    seed_perturb: int = 2
    gravity_mag: float = 9.81
    gravity_latitude_deg: Optional[float] = None
    map_frame: str = 'ENU'
    initial_gyro_bias: np.ndarray = field(default_factory=lambda: np.zeros(3))
    initial_accel_bias: np.ndarray = field(default_factory=lambda: np.zeros(3))
    knot_spacing: Optional[float] = None
    min_knot_spacing: float = 0.05
    time_tolerance: float = 0.0
    enforce_ordering: bool = False

    def __post_init__(self) -> None:
        """Validate and normalize parameters."""
        for name in ("sim_freq_imu", "sim_freq_cam", "sim_freq_vicon"):
            value = float(getattr(self, name))
            if not np.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
            setattr(self, name, value)

        for name in (
            "sigma_w",
            "sigma_a",
            "sigma_wb",
            "sigma_ab",
            "sigma_vicon_ori",
            "sigma_vicon_pos",
            "min_knot_spacing",
            "time_tolerance",
        ):
            value = float(getattr(self, name))
            if not np.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
            setattr(self, name, value)

        if self.gravity_mag <= 0:
            raise ValueError(f"gravity_mag must be positive, got {self.gravity_mag}")
        if self.knot_spacing is not None and self.knot_spacing <= 0:
            raise ValueError(f"knot_spacing must be positive, got {self.knot_spacing}")

        # Raises ValueError for anything but 'ENU' / 'NED'
        FrameConvention.from_name(self.map_frame)
        self.map_frame = self.map_frame.upper()

        self.q_marker_to_body = quat_normalize(
            _vec(self.q_marker_to_body, 4, "q_marker_to_body")
        )
        self.p_marker_in_body = _vec(self.p_marker_in_body, 3, "p_marker_in_body")
        self.initial_gyro_bias = _vec(self.initial_gyro_bias, 3, "initial_gyro_bias")
        self.initial_accel_bias = _vec(self.initial_accel_bias, 3, "initial_accel_bias")

        for name in ("seed_imu", "seed_vicon", "seed_perturb"):
            setattr(self, name, int(getattr(self, name)))

    @property
    def frame(self) -> FrameConvention:
        return FrameConvention.from_name(self.map_frame)

    def gravity_vector(self) -> np.ndarray:
        """World-frame gravity vector, e.g. [0, 0, -9.81] for ENU."""
        g = gravity_magnitude(self.gravity_latitude_deg, default_g=self.gravity_mag)
        return self.frame.gravity_vector(g)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "SimulatorParams":
        """
        Build parameters from a plain dictionary.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown simulator parameter(s): {', '.join(unknown)}")
        return cls(**config)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "SimulatorParams":
        """Load parameters from a JSON file. A relative traj_path is resolved
        against the directory of the JSON file."""
        path = Path(path)
        with open(path, "r") as f:
            config = json.load(f)
        traj_path = config.get("traj_path")
        if traj_path is not None and not Path(traj_path).is_absolute():
            config["traj_path"] = str(path.parent / traj_path)
        return cls.from_dict(config)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable dictionary of all parameters."""
        config = asdict(self)
        for key, value in config.items():
            if isinstance(value, np.ndarray):
                config[key] = value.tolist()
        return config
